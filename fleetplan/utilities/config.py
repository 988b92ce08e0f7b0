"""Configuration management for the fleet maintenance plan service."""
import os
from typing import Final, Tuple
from pathlib import Path

from dotenv import load_dotenv

from fleetplan.utilities import constants

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)


def _tokens(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    """Comma separated env var -> tuple of lowercase tokens (keeps empty tokens like '')."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return tuple(t.strip().lower() for t in raw.split(','))


# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'INFO').upper()

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('DATA_DIR', str(BASE_DIR / 'data')))
PLAN_STORE_FILE: Final[Path] = Path(os.getenv('PLAN_STORE_FILE', str(DATA_DIR / 'maintenance_plans.json')))
BACKUP_ON_IMPORT: Final[bool] = os.getenv('BACKUP_ON_IMPORT', 'True').lower() == 'true'

# Import scan window
MAX_SCAN_ROWS: Final[int] = int(os.getenv('MAX_SCAN_ROWS', str(constants.MAX_SCAN_ROWS)))
MAX_SCAN_COLS: Final[int] = int(os.getenv('MAX_SCAN_COLS', str(constants.MAX_SCAN_COLS)))
HEADER_SCAN_ROWS: Final[int] = int(os.getenv('HEADER_SCAN_ROWS', str(constants.HEADER_SCAN_ROWS)))
HEADER_SCAN_COLS: Final[int] = int(os.getenv('HEADER_SCAN_COLS', str(constants.HEADER_SCAN_COLS)))
BLANK_RUN_LIMIT: Final[int] = int(os.getenv('BLANK_RUN_LIMIT', str(constants.BLANK_RUN_LIMIT)))

# Number convention and mark vocabulary
NUMBER_DECIMAL_SEPARATOR: Final[str] = os.getenv('NUMBER_DECIMAL_SEPARATOR', constants.DECIMAL_SEPARATOR)
NUMBER_THOUSANDS_SEPARATOR: Final[str] = os.getenv('NUMBER_THOUSANDS_SEPARATOR', constants.THOUSANDS_SEPARATOR)
MARK_TRUE_TOKENS: Final[Tuple[str, ...]] = _tokens('MARK_TRUE_TOKENS', constants.MARK_TRUE_TOKENS)
MARK_FALSE_TOKENS: Final[Tuple[str, ...]] = _tokens('MARK_FALSE_TOKENS', constants.MARK_FALSE_TOKENS)


def load_import_settings():
    """Build ImportSettings from the environment-backed values above."""
    from fleetplan.logic.importing.settings import ImportSettings, MarkVocabulary, NumberConvention
    return ImportSettings(
        max_rows=MAX_SCAN_ROWS,
        max_cols=MAX_SCAN_COLS,
        header_scan_rows=HEADER_SCAN_ROWS,
        header_scan_cols=HEADER_SCAN_COLS,
        blank_run_limit=BLANK_RUN_LIMIT,
        convention=NumberConvention(NUMBER_DECIMAL_SEPARATOR, NUMBER_THOUSANDS_SEPARATOR),
        vocabulary=MarkVocabulary(MARK_TRUE_TOKENS, MARK_FALSE_TOKENS),
    )
