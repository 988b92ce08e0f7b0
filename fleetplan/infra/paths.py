from pathlib import Path

from fleetplan.utilities.config import DATA_DIR as _DATA_DIR, PLAN_STORE_FILE as _PLAN_STORE_FILE

# Centralized paths for data files (single source of truth)
DATA_DIR = Path(_DATA_DIR).resolve()
PLAN_STORE_FILE = Path(_PLAN_STORE_FILE).resolve()
BACKUP_DIR = DATA_DIR / 'backups'

__all__ = ['DATA_DIR', 'PLAN_STORE_FILE', 'BACKUP_DIR']
