from typing import Final

# Scan window (rows/columns of the worksheet that an import is allowed to touch)
MAX_SCAN_ROWS: Final[int] = 2000
MAX_SCAN_COLS: Final[int] = 60
HEADER_SCAN_ROWS: Final[int] = 15
HEADER_SCAN_COLS: Final[int] = 40

# Worksheet layout: code in column A, description in column B, intervals from column C
CODE_COLUMN: Final[int] = 1
DESCRIPTION_COLUMN: Final[int] = 2
FIRST_INTERVAL_COLUMN: Final[int] = 3

# Consecutive fully blank rows that end the activity table
BLANK_RUN_LIMIT: Final[int] = 5

# Number convention of the workbook: '.' groups thousands, ',' separates decimals
DECIMAL_SEPARATOR: Final[str] = ","
THOUSANDS_SEPARATOR: Final[str] = "."

MARK_TRUE_TOKENS: Final[tuple] = ("√", "v", "x", "1", "yes", "si", "sí")
MARK_FALSE_TOKENS: Final[tuple] = ("", "-", "0", "no")

# Sheet selection order when reading a workbook
PREFERRED_SHEETS: Final[tuple] = ("AnexoActividadesVS$VHT", "Completo (Caja FULLER)")
SHEET_NAME_HINTS: Final[tuple] = ("anexo", "actividades")

# Next maintenance: an interval is "upcoming" within this share of its threshold
UPCOMING_RATIO: Final[float] = 0.1
NEXT_INTERVALS_LIMIT: Final[int] = 3

BACKUPS_TO_KEEP: Final[int] = 10
