"""Backup snapshots written next to the backing file."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from ._base import JsonFile
from ..errors import InvalidArgument
from ..log import logger

AUTO_PREFIX = "backup-"


class BackupWriter:
    """Writes ``<data_dir>/<name>.json`` snapshots of a store."""

    def __init__(self, data_dir: Path, *, indent: int = 2) -> None:
        self.data_dir = data_dir
        self.indent = indent

    def path_for(self, name: str) -> Path:
        if not isinstance(name, str) or not name:
            raise InvalidArgument("Filename is not defined!")
        return self.data_dir / f"{name}.json"

    def write(self, name: str, data: dict) -> Path:
        """Write *data* under *name* and return the backup path."""
        path = self.path_for(name)
        JsonFile(path, indent=self.indent).save(data)
        logger.info("backup written to %s", path)
        return path

    @staticmethod
    def auto_name(now: datetime | None = None) -> str:
        """Name for an automatic backup, e.g. ``backup-2026-10-19T08-30-00-000Z``."""
        now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
        stamp = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
        return AUTO_PREFIX + stamp.replace(":", "-").replace(".", "-")

    def list_backups(self) -> list[Path]:
        """Return automatic backup files, oldest first."""
        if not self.data_dir.is_dir():
            return []
        return sorted(self.data_dir.glob(f"{AUTO_PREFIX}*.json"))
