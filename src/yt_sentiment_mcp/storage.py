"""File-based JSON snapshot store for raw and analyzed pipeline data."""

from __future__ import annotations

import asyncio
import logging
import os
import re
from pathlib import Path

from .config import ServerConfig, get_config
from .errors import InvalidInputError, SnapshotNotFoundError, TransportError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def raw_snapshot_key(tracking_id: str) -> str:
    """Key of the fetched video + comments snapshot."""
    return f"{tracking_id}.json"


def analysis_snapshot_key(tracking_id: str) -> str:
    """Key of the finalized analysis record."""
    return f"{tracking_id}_analyzed.json"


class LocalSnapshotStore:
    """Stores snapshots as files under one root directory.

    Writes go to a temporary sibling first and are renamed into place, so
    a reader never observes a partially written snapshot.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser()

    @classmethod
    def from_config(cls, cfg: ServerConfig | None = None) -> LocalSnapshotStore:
        return cls((cfg or get_config()).snapshot_dir)

    def path_for(self, key: str) -> Path:
        """Return the file path for *key*.

        Raises:
            InvalidInputError: If *key* is not a plain file name.
        """
        if not _SAFE_KEY.match(key):
            raise InvalidInputError(f"Invalid snapshot key: {key!r}")
        return self.root / key

    async def store(self, key: str, data: bytes) -> None:
        path = self.path_for(key)

        def _write() -> None:
            self.root.mkdir(parents=True, exist_ok=True)
            tmp = path.with_name(f".{path.name}.tmp")
            tmp.write_bytes(data)
            os.replace(tmp, path)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise TransportError(f"Failed to write snapshot {key}: {exc}") from exc
        logger.info("Stored snapshot %s (%d bytes)", path, len(data))

    async def load(self, key: str) -> bytes:
        path = self.path_for(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as exc:
            raise SnapshotNotFoundError(f"Snapshot not found: {key}") from exc
        except OSError as exc:
            raise TransportError(f"Failed to read snapshot {key}: {exc}") from exc
