"""FlexiDB: an in-memory key-value store backed by one JSON file.

Mutations land in memory immediately and are written to disk by a debounced
:class:`~flexidb.scheduler.FlushScheduler`, so a burst of writes costs one
full-file rewrite.  :meth:`FlexiDB.destroy` (or leaving a ``with`` block)
always flushes.
"""

from __future__ import annotations

import dataclasses
import threading
from pathlib import Path
from typing import Any, Iterable, Mapping

from . import operations
from .config import DatabaseOptions
from .errors import InvalidState
from .log import logger
from .persistence import BackupWriter, JsonFile
from .scheduler import FlushScheduler, IntervalTask, TimerFactory
from .store import Store, Value
from .transaction import Operation, TransactionCoordinator


class FlexiDB:
    """JSON-file backed key-value database.

    All public methods are thread-safe: each runs under one re-entrant lock
    that the background flush also takes.
    """

    def __init__(
        self,
        file_name: str | None = None,
        options: DatabaseOptions | None = None,
        *,
        start_timer: TimerFactory | None = None,
    ) -> None:
        self.options = options or DatabaseOptions()
        if file_name is not None:
            self.options = dataclasses.replace(self.options, file_name=file_name)
        self._lock = threading.RLock()
        self._store = Store()
        self._file = JsonFile(self.options.file_path, indent=self.options.indent)
        self._backups = BackupWriter(self.options.data_path, indent=self.options.indent)
        self._scheduler = FlushScheduler(
            self._write_snapshot,
            delay=self.options.debounce_seconds,
            start_timer=start_timer,
            lock=self._lock,
        )
        self._transactions = TransactionCoordinator()
        self._auto_backup: IntervalTask | None = None
        if self.options.auto_backup.enabled:
            self._auto_backup = IntervalTask(
                self.options.auto_backup.interval_seconds,
                self.auto_backup,
                start_timer=start_timer,
            )
        self._ready = False
        self._closed = False

    def __repr__(self) -> str:
        return f"FlexiDB({str(self.file_path)!r}, keys={len(self._store)})"

    def __enter__(self) -> FlexiDB:
        self.init()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.destroy()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def file_path(self) -> Path:
        return self._file.path

    @property
    def data_dir(self) -> Path:
        return self._backups.data_dir

    @property
    def dirty(self) -> bool:
        """True while in-memory changes have not reached the backing file."""
        return self._scheduler.dirty

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self) -> None:
        """Create the data directory and backing file, then load it.

        Idempotent; every other operation calls it on first use.
        """
        with self._lock:
            if self._closed:
                raise InvalidState("Database has been destroyed")
            if self._ready:
                return
            if self._file.ensure():
                logger.info("created backing file %s", self.file_path)
            data = self._file.load()
            self._store.replace(
                {k: v for k, v in data.items() if isinstance(k, str) and k}
            )
            self._ready = True
            logger.debug("loaded %d keys from %s", len(self._store), self.file_path)
            if self._auto_backup is not None:
                self._auto_backup.start()

    def flush(self) -> bool:
        """Write pending changes now.  Return True if a write happened."""
        with self._lock:
            self._ensure_ready()
            return self._scheduler.flush_now()

    def destroy(self) -> None:
        """Stop timers and flush pending changes.

        The instance cannot be used afterwards.  Calling it twice is a no-op.
        """
        with self._lock:
            if self._closed:
                return
            if self._auto_backup is not None:
                self._auto_backup.stop()
            if self._ready:
                self._scheduler.flush_now()
            else:
                self._scheduler.cancel()
            self._closed = True
            logger.debug("closed %s", self.file_path)

    close = destroy

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, key: str) -> Value | None:
        with self._lock:
            self._ensure_ready()
            return self._store.get(key)

    def has(self, key: str) -> bool:
        with self._lock:
            self._ensure_ready()
            return self._store.has(key)

    def all(self, limit: int = 0) -> list[tuple[str, Value]]:
        """Return ``(key, value)`` pairs, at most *limit* when positive."""
        with self._lock:
            self._ensure_ready()
            return self._store.entries(limit)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set(self, key: str, value: Value) -> Value:
        return self._mutate(operations.set_value, key, value)

    def delete(self, key: str) -> bool:
        """Remove *key*; raise :class:`~flexidb.errors.NotFound` if absent."""
        return self._mutate(operations.delete, key)

    def add(self, key: str, value: int | float) -> int | float:
        return self._mutate(operations.add, key, value)

    def subtract(self, key: str, value: int | float) -> int | float:
        return self._mutate(operations.subtract, key, value)

    def math(self, key: str, operator: str, value: int | float) -> int | float:
        return self._mutate(operations.math, key, operator, value)

    def push(self, key: str, value: Value) -> list[Value]:
        return self._mutate(operations.push, key, value)

    def reset(self) -> None:
        """Remove every key."""
        with self._lock:
            self._ensure_ready()
            self._store.clear()
            self._scheduler.mark_dirty()

    def transaction(
        self, ops: Iterable[Operation | Mapping[str, Any]]
    ) -> list[Value]:
        """Apply *ops* all-or-nothing and return their results.

        Each op is an :class:`~flexidb.transaction.Operation` or a mapping like
        ``{"type": "add", "key": "hits", "value": 1}``.  On failure nothing is
        applied and :class:`~flexidb.errors.TransactionFailed` is raised.
        """
        with self._lock:
            self._ensure_ready()
            results = self._transactions.apply(self._store, ops)
            if results:
                self._scheduler.mark_dirty()
            return results

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    def backup(self, name: str) -> Path:
        """Write the current state to ``<data_dir>/<name>.json``."""
        with self._lock:
            self._ensure_ready()
            return self._backups.write(name, self._store.snapshot())

    def auto_backup(self) -> Path | None:
        """Write a timestamped ``backup-...`` snapshot.

        Returns None without writing once the database has been destroyed.
        """
        with self._lock:
            if self._closed:
                return None
            return self.backup(BackupWriter.auto_name())

    def backups(self) -> list[Path]:
        """Existing automatic backups, oldest first."""
        return self._backups.list_backups()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_ready(self) -> None:
        if self._closed:
            raise InvalidState("Database has been destroyed")
        if not self._ready:
            self.init()

    def _mutate(self, fn: Any, *args: Any) -> Any:
        with self._lock:
            self._ensure_ready()
            result = fn(self._store, *args)
            self._scheduler.mark_dirty()
            return result

    def _write_snapshot(self) -> None:
        self._file.save(self._store.snapshot())


