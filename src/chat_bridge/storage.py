"""Durable storage for session history and statistics.

Any object with the four coroutine methods of :class:`Storage` can back the
session core. :class:`FileStorage` keeps one JSON document per identity and
kind in a directory.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable
from urllib.parse import quote

from .errors import StorageError
from .history import History, SessionID
from .statistics import Statistics

log = logging.getLogger(__name__)


@runtime_checkable
class Storage(Protocol):
    """Persistence contract consumed by :class:`~chat_bridge.session.Session`.

    Loading an identity that was never saved must return an empty history or
    zeroed statistics, not raise.
    """

    async def save_history(self, history: History) -> None: ...

    async def load_history(self, session_id: SessionID) -> History: ...

    async def save_statistics(self, statistics: Statistics) -> None: ...

    async def load_statistics(self, session_id: SessionID) -> Statistics: ...


class FileStorage:
    """Stores each document as tab-indented JSON under ``base_dir``."""

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)

    def _path(self, kind: str, session_id: SessionID) -> Path:
        model = quote(session_id.model, safe="")
        return self.base_dir / f"{kind}-{session_id.user}-{session_id.chat}-{model}.json"

    async def save_history(self, history: History) -> None:
        await asyncio.to_thread(self._write, self._path("history", history.id), history.to_dict())

    async def load_history(self, session_id: SessionID) -> History:
        data = await asyncio.to_thread(self._read, self._path("history", session_id))
        if data is None:
            return History(id=session_id)
        try:
            return History.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"malformed history for {session_id}: {e}") from e

    async def save_statistics(self, statistics: Statistics) -> None:
        await asyncio.to_thread(
            self._write, self._path("statistics", statistics.id), statistics.to_dict()
        )

    async def load_statistics(self, session_id: SessionID) -> Statistics:
        data = await asyncio.to_thread(self._read, self._path("statistics", session_id))
        if data is None:
            return Statistics(id=session_id)
        try:
            return Statistics.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"malformed statistics for {session_id}: {e}") from e

    def _write(self, path: Path, data: dict[str, Any]) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent="\t", ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"could not write {path.name}: {e}") from e
        log.debug("Wrote %s", path)

    def _read(self, path: Path) -> dict[str, Any] | None:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"could not read {path.name}: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StorageError(f"could not decode {path.name}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"unexpected document in {path.name}")
        return data
