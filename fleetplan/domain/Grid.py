"""CellGrid: immutable 1-indexed snapshot of a worksheet (raw cell values + bounds)."""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence


def cell_to_text(value: Any) -> str:
    """Render a raw cell value as trimmed text (numbers without a spurious '.0')."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value).replace("\xa0", " ").strip()


class CellGrid:
    def __init__(self, rows: Iterable[Sequence[Any]], n_rows: Optional[int] = None, n_cols: Optional[int] = None):
        self._rows: List[tuple] = [tuple(r) for r in rows]
        self.n_rows = n_rows if n_rows is not None else len(self._rows)
        self.n_cols = n_cols if n_cols is not None else max((len(r) for r in self._rows), default=0)

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Any]]):
        return cls(rows)

    def cell(self, row: int, col: int) -> Any:
        """Raw value at (row, col), both 1-based; None outside the stored data."""
        if row < 1 or col < 1 or row > len(self._rows):
            return None
        values = self._rows[row - 1]
        if col > len(values):
            return None
        return values[col - 1]

    def text(self, row: int, col: int) -> str:
        return cell_to_text(self.cell(row, col))

    def is_blank_row(self, row: int) -> bool:
        return all(self.text(row, c) == "" for c in range(1, self.n_cols + 1))

    def __repr__(self) -> str:
        return f"CellGrid({self.n_rows}x{self.n_cols})"
