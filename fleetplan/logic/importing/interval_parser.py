"""Interval threshold parsing.

Header tokens look like "500 Horas", "20.000 Kilómetros", "100h" or plain numbers.
A single NumberConvention is applied to every token (default: '.' groups thousands,
',' separates decimals), it is never guessed per cell.
"""
from __future__ import annotations
import logging
import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, List, NamedTuple, Optional, Sequence, Tuple

from fleetplan.domain.Grid import cell_to_text
from fleetplan.domain.errors import Advisory, NonMonotonicIntervalsError, DISCARDED_INTERVAL_COLUMN
from fleetplan.logic.importing.settings import NumberConvention

logger = logging.getLogger(__name__)

__all__ = ["HOURS_UNIT", "KM_UNIT", "ParsedInterval", "parse", "format_decimal", "check_increasing", "build_intervals"]

HOURS_UNIT = r'(?:hours?|horas?|hrs|hr|h)'
KM_UNIT = r'(?:kil[oó]metros?|kilomet(?:er|re)s?|kms|km)'
_UNIT_SUFFIX = re.compile(rf'\s*(?:{KM_UNIT}|{HOURS_UNIT})[\s.:;,]*$')

_DEFAULT_CONVENTION = NumberConvention()


class ParsedInterval(NamedTuple):
    column: Optional[int]  # None when not read from a worksheet
    hours: Decimal
    kilometers: Decimal
    sequence_order: int


def _from_number(value: Any) -> Optional[Decimal]:
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        number = Decimal(int(value)) if value.is_integer() else Decimal(repr(value))
    elif isinstance(value, Decimal):
        if not value.is_finite():
            return None
        number = value
    else:
        number = Decimal(value)
    return number if number >= 0 else None


def parse(token: Any, convention: Optional[NumberConvention] = None) -> Optional[Decimal]:
    """Parse a header token into a non-negative Decimal, or None. Never raises."""
    conv = convention or _DEFAULT_CONVENTION
    if isinstance(token, bool):
        return None
    if isinstance(token, (int, float, Decimal)):
        return _from_number(token)
    text = cell_to_text(token).lower()
    if not text:
        return None
    text = _UNIT_SUFFIX.sub('', text).strip()
    if not text:
        return None
    t = re.escape(conv.thousands_separator)
    d = re.escape(conv.decimal_separator)
    grouped = rf'\d{{1,3}}(?:{t}\d{{3}})+(?:{d}\d+)?'
    plain = rf'\d+(?:{d}\d+)?'
    if not (re.fullmatch(grouped, text) or re.fullmatch(plain, text)):
        return None
    normalized = text.replace(conv.thousands_separator, '').replace(conv.decimal_separator, '.')
    try:
        return Decimal(normalized)
    except InvalidOperation:
        return None


def format_decimal(value: Decimal, convention: Optional[NumberConvention] = None) -> str:
    """Render a value in the convention, e.g. Decimal('20000.5') -> '20.000,5'."""
    conv = convention or _DEFAULT_CONVENTION
    text = format(Decimal(value), 'f')
    int_part, _, frac_part = text.partition('.')
    groups = []
    while len(int_part) > 3:
        groups.insert(0, int_part[-3:])
        int_part = int_part[:-3]
    groups.insert(0, int_part)
    rendered = conv.thousands_separator.join(groups)
    if frac_part:
        rendered += conv.decimal_separator + frac_part
    return rendered


def check_increasing(intervals: Sequence[ParsedInterval], hours_row: Optional[int] = None,
                     km_row: Optional[int] = None) -> None:
    """Raise NonMonotonicIntervalsError unless hours and kilometers both increase strictly."""
    for prev, cur in zip(intervals, intervals[1:]):
        if cur.hours <= prev.hours:
            raise NonMonotonicIntervalsError(
                f"Hours must increase strictly: {cur.hours} follows {prev.hours} (I{cur.sequence_order})",
                row=hours_row, column=cur.column)
        if cur.kilometers <= prev.kilometers:
            raise NonMonotonicIntervalsError(
                f"Kilometers must increase strictly: {cur.kilometers} follows {prev.kilometers} "
                f"(I{cur.sequence_order})",
                row=km_row, column=cur.column)


def build_intervals(header_block, convention: Optional[NumberConvention] = None) -> Tuple[List[ParsedInterval], List[Advisory]]:
    """Turn header candidates into ordered intervals.

    Columns where either threshold does not parse are dropped with an advisory.
    Survivors keep their column order and must increase strictly in hours and kilometers.
    """
    warnings: List[Advisory] = []
    survivors: List[ParsedInterval] = []
    for candidate in header_block.candidates:
        hours = parse(candidate.hours_token, convention)
        kilometers = parse(candidate.km_token, convention)
        if hours is None or kilometers is None:
            warnings.append(Advisory(
                DISCARDED_INTERVAL_COLUMN,
                f"Interval column discarded: hours={cell_to_text(candidate.hours_token)!r}, "
                f"km={cell_to_text(candidate.km_token)!r}",
                column=candidate.column,
            ))
            continue
        survivors.append(ParsedInterval(candidate.column, hours, kilometers, len(survivors) + 1))

    check_increasing(survivors, header_block.hours_row, header_block.km_row)
    logger.debug("Parsed %d intervals (%d columns discarded)", len(survivors), len(warnings))
    return survivors, warnings
