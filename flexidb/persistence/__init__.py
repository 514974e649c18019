"""Persistence layer – the backing file and backup snapshots."""

from ._base import JsonFile
from .backups import BackupWriter

__all__ = [
    "BackupWriter",
    "JsonFile",
]
