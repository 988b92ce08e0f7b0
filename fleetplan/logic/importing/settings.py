"""Import settings: scan bounds, number convention and mark vocabulary.

Everything the heuristics depend on is explicit here so a workbook authored with
another convention can be imported by changing configuration, not code.
"""
from __future__ import annotations
from typing import Iterable, Optional

from fleetplan.utilities import constants


class NumberConvention:
    """Fixed decimal/thousands separators applied to every header token."""

    def __init__(self, decimal_separator: str = constants.DECIMAL_SEPARATOR,
                 thousands_separator: str = constants.THOUSANDS_SEPARATOR):
        if len(decimal_separator) != 1 or len(thousands_separator) != 1:
            raise ValueError("Separators must be single characters")
        if decimal_separator == thousands_separator:
            raise ValueError("Decimal and thousands separators must differ")
        self.decimal_separator = decimal_separator
        self.thousands_separator = thousands_separator

    def __repr__(self) -> str:
        return f"NumberConvention(decimal={self.decimal_separator!r}, thousands={self.thousands_separator!r})"


class MarkVocabulary:
    """Recognized applicability symbols (compared trimmed and lowercased)."""

    def __init__(self, true_tokens: Iterable[str] = constants.MARK_TRUE_TOKENS,
                 false_tokens: Iterable[str] = constants.MARK_FALSE_TOKENS):
        self.true_tokens = frozenset(t.strip().lower() for t in true_tokens)
        self.false_tokens = frozenset(t.strip().lower() for t in false_tokens)
        overlap = self.true_tokens & self.false_tokens
        if overlap:
            raise ValueError(f"Tokens cannot be both true and false: {sorted(overlap)}")

    def __repr__(self) -> str:
        return f"MarkVocabulary(true={sorted(self.true_tokens)}, false={sorted(self.false_tokens)})"


class ImportSettings:
    def __init__(self, max_rows: int = constants.MAX_SCAN_ROWS, max_cols: int = constants.MAX_SCAN_COLS,
                 header_scan_rows: int = constants.HEADER_SCAN_ROWS,
                 header_scan_cols: int = constants.HEADER_SCAN_COLS,
                 blank_run_limit: int = constants.BLANK_RUN_LIMIT,
                 code_column: int = constants.CODE_COLUMN,
                 description_column: int = constants.DESCRIPTION_COLUMN,
                 first_interval_column: int = constants.FIRST_INTERVAL_COLUMN,
                 convention: Optional[NumberConvention] = None,
                 vocabulary: Optional[MarkVocabulary] = None):
        if blank_run_limit < 1:
            raise ValueError("blank_run_limit must be at least 1")
        self.max_rows = max_rows
        self.max_cols = max_cols
        self.header_scan_rows = min(header_scan_rows, max_rows)
        self.header_scan_cols = min(header_scan_cols, max_cols)
        self.blank_run_limit = blank_run_limit
        self.code_column = code_column
        self.description_column = description_column
        self.first_interval_column = first_interval_column
        self.convention = convention or NumberConvention()
        self.vocabulary = vocabulary or MarkVocabulary()


__all__ = ["NumberConvention", "MarkVocabulary", "ImportSettings"]
