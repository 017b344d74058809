"""Registry of live sessions with idle expiry."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from .cost import CostPer1k
from .history import SessionID
from .llm_client import CompletionClient, RequestParams
from .session import Session
from .storage import Storage

log = logging.getLogger(__name__)


@dataclass
class _Entry:
    session: Session
    last_access: float


class SessionProvider:
    """Hands out exactly one live :class:`Session` per identity.

    Sessions idle for longer than ``ttl`` seconds are dropped by a periodic
    sweep started with :meth:`start`. A dropped session keeps its durable
    state; the next request for that identity builds a fresh object that
    reloads from storage.

    All lookups go through one lock, including cache hits, because a hit
    updates the entry's last access time.
    """

    def __init__(
        self,
        client: CompletionClient,
        storage: Storage,
        params: RequestParams | None = None,
        ttl: float = 3600.0,
        cleanup_interval: float | None = None,
        prices: dict[str, CostPer1k] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.ttl = ttl
        self.cleanup_interval = ttl / 2 if cleanup_interval is None else cleanup_interval
        if self.cleanup_interval <= 0:
            raise ValueError("cleanup_interval must be positive")

        self._client = client
        self._storage = storage
        self._params = params or RequestParams()
        self._prices = prices
        self._clock = clock

        self._sessions: dict[SessionID, _Entry] = {}
        self._lock = asyncio.Lock()
        self._sweeper: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    async def __aenter__(self) -> SessionProvider:
        self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def provide_session(self, session_id: SessionID) -> Session:
        return await self.get_or_create(session_id)

    async def get_or_create(self, session_id: SessionID) -> Session:
        async with self._lock:
            now = self._clock()
            entry = self._sessions.get(session_id)
            if entry is None:
                session = Session(
                    session_id,
                    self._client,
                    self._storage,
                    params=self._params,
                    prices=self._prices,
                )
                entry = _Entry(session=session, last_access=now)
                self._sessions[session_id] = entry
                log.info(
                    "Session created (user=%d, chat=%d, model=%s), live=%d",
                    session_id.user,
                    session_id.chat,
                    session_id.model,
                    len(self._sessions),
                )
            else:
                entry.last_access = now
            return entry.session

    async def clear(self) -> None:
        """Forget every live session. Durable state is not touched."""
        async with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
        log.info("Cleared %d session(s)", count)

    async def cleanup_expired(self) -> int:
        """Drop sessions idle for longer than the TTL; return how many went."""
        async with self._lock:
            now = self._clock()
            expired = [
                sid for sid, entry in self._sessions.items() if now - entry.last_access > self.ttl
            ]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            log.info("Evicted %d idle session(s), live=%d", len(expired), len(self._sessions))
        return len(expired)

    def start(self) -> None:
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.create_task(self._sweep_loop(), name="session-sweep")
        log.info("Session sweep every %.0fs (ttl=%.0fs)", self.cleanup_interval, self.ttl)

    async def close(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._sweeper
        self._sweeper = None

    @property
    def running(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.cleanup_interval)
            await self.cleanup_expired()
