"""Database options.

Options can be built in code or loaded from a YAML file such as::

    file_name: database.json
    data_dir: FlexiDB
    debounce_seconds: 0.5
    indent: 2
    auto_backup:
      enabled: false
      interval_seconds: 60

Missing keys keep their defaults.  An unreadable or invalid file falls back
to defaults entirely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .log import logger

DEFAULT_FILE_NAME = "database.json"
DEFAULT_DATA_DIR = "FlexiDB"


@dataclass
class AutoBackupOptions:
    """Settings for periodic backup snapshots."""

    enabled: bool = False
    interval_seconds: float = 60.0


@dataclass
class DatabaseOptions:
    """Top-level database options."""

    file_name: str = DEFAULT_FILE_NAME
    data_dir: str = DEFAULT_DATA_DIR
    debounce_seconds: float = 0.5  # quiescence before a pending flush runs
    indent: int = 2
    auto_backup: AutoBackupOptions = field(default_factory=AutoBackupOptions)

    @property
    def data_path(self) -> Path:
        """Absolute data directory."""
        return Path(self.data_dir).expanduser().resolve()

    @property
    def file_path(self) -> Path:
        return self.data_path / self.file_name


def load_options(path: Path) -> DatabaseOptions:
    """Load options from a YAML file, falling back to defaults."""
    opts = DatabaseOptions()
    if not path.exists():
        return opts

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            logger.warning("options file %s is not a mapping, using defaults", path)
            return opts
        if "file_name" in data:
            opts.file_name = str(data["file_name"])
        if "data_dir" in data:
            opts.data_dir = str(data["data_dir"])
        if "debounce_seconds" in data:
            opts.debounce_seconds = max(0.0, float(data["debounce_seconds"]))
        if "indent" in data:
            opts.indent = int(data["indent"])
        if isinstance(data.get("auto_backup"), dict):
            bdata = data["auto_backup"]
            if "enabled" in bdata:
                opts.auto_backup.enabled = bool(bdata["enabled"])
            if "interval_seconds" in bdata:
                opts.auto_backup.interval_seconds = float(bdata["interval_seconds"])
    except (OSError, yaml.YAMLError, TypeError, ValueError):
        logger.warning("failed to load options from %s, using defaults", path, exc_info=True)
        return DatabaseOptions()

    return opts
