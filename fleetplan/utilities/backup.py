"""
Backup utility for the maintenance plan store.
Snapshots the store file before a structural replace so a bad import can be rolled back by hand.
"""
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional
import logging

from fleetplan.utilities.constants import BACKUPS_TO_KEEP

logger = logging.getLogger(__name__)


class BackupManager:
    """Manages timestamped backups of one data file."""

    def __init__(self, store_file: Path, backup_dir: Path = None, keep: int = BACKUPS_TO_KEEP):
        self.store_file = Path(store_file)
        self.backup_dir = Path(backup_dir) if backup_dir else (self.store_file.parent / 'backups')
        self.keep = keep

    def create_backup(self) -> Optional[Path]:
        """Copy the store file to the backup dir; returns the backup path or None."""
        if not self.store_file.exists():
            logger.info(f"Nothing to back up yet: {self.store_file.name}")
            return None
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
            destination = self.backup_dir / f"{self.store_file.stem}_{timestamp}{self.store_file.suffix}"
            shutil.copy2(self.store_file, destination)
            logger.info(f"Backup created: {destination.name}")
            self._cleanup_old_backups()
            return destination
        except OSError as e:
            logger.error(f"Backup failed for {self.store_file.name}: {e}")
            return None

    def list_backups(self) -> List[Path]:
        pattern = f"{self.store_file.stem}_*{self.store_file.suffix}"
        return sorted(self.backup_dir.glob(pattern), key=lambda p: p.name)

    def _cleanup_old_backups(self):
        """Remove old backups, keeping only the most recent ones."""
        for backup in self.list_backups()[:-self.keep]:
            try:
                backup.unlink()
                logger.info(f"Removed old backup: {backup.name}")
            except OSError as e:
                logger.error(f"Failed to remove old backup {backup.name}: {e}")

    def restore_backup(self, backup_filename: str) -> bool:
        """Restore a specific backup over the store file (current file is backed up first)."""
        backup_path = self.backup_dir / backup_filename
        if not backup_path.exists():
            logger.error(f"Backup not found: {backup_filename}")
            return False
        # Read first: the backup taken below may rotate the requested file out
        content = backup_path.read_bytes()
        if self.store_file.exists():
            self.create_backup()
        self.store_file.write_bytes(content)
        logger.info(f"Restored backup: {backup_filename} -> {self.store_file.name}")
        return True
