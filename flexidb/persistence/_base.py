"""Backing-file JSON I/O."""

from __future__ import annotations

import json
import math
from pathlib import Path

from ..errors import IOFailure
from ..log import logger


def _reject_constant(name: str) -> None:
    # NaN and Infinity are not JSON and could never be written back.
    raise ValueError(f"non-standard JSON constant {name}")


def _parse_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


class JsonFile:
    """A single JSON document on disk holding a ``{key: value}`` mapping.

    Reads are forgiving: a corrupt or non-object document is logged and
    treated as empty.  Writes are strict and raise
    :class:`~flexidb.errors.IOFailure`.
    """

    def __init__(self, path: Path, *, indent: int = 2) -> None:
        self.path = path
        self.indent = indent

    # -- core I/O -------------------------------------------------------------

    def ensure(self) -> bool:
        """Create parent directories and an empty ``{}`` document if missing.

        Returns True if the file was created.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self.path.exists():
                return False
            self.path.write_text("{}", encoding="utf-8")
        except OSError as exc:
            raise IOFailure(f"cannot create {self.path}: {exc}") from exc
        return True

    def load(self) -> dict:
        """Read and parse the document, returning ``{}`` if it is corrupt."""
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise IOFailure(f"cannot read {self.path}: {exc}") from exc
        try:
            data = json.loads(
                raw.decode("utf-8"),
                parse_constant=_reject_constant,
                parse_float=_parse_float,
            )
        except ValueError:
            logger.warning(
                "corrupt JSON in %s, starting with an empty store",
                self.path,
                exc_info=True,
            )
            return {}
        if not isinstance(data, dict):
            logger.warning(
                "%s holds a %s instead of an object, starting with an empty store",
                self.path,
                type(data).__name__,
            )
            return {}
        return data

    def save(self, data: dict) -> None:
        """Write *data* as pretty-printed JSON, creating parents as needed."""
        try:
            text = json.dumps(data, indent=self.indent, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise IOFailure(f"cannot serialize data for {self.path}: {exc}") from exc
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise IOFailure(f"cannot write {self.path}: {exc}") from exc
        logger.debug("wrote %d keys to %s", len(data), self.path)
