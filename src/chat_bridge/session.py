"""One conversation: lazily loaded history and statistics behind a lock."""

from __future__ import annotations

import asyncio
import enum
import logging

from .cost import CostPer1k, calculate_cost_by_model
from .errors import CompletionError, CostLookupError, StorageError
from .history import History, Message, SessionID
from .llm_client import (
    ROLE_ASSISTANT,
    ROLE_SYSTEM,
    ROLE_USER,
    ChatMessage,
    CompletionClient,
    RequestParams,
)
from .locks import ReadWriteLock
from .statistics import Statistics
from .storage import Storage

log = logging.getLogger(__name__)


class LoadState(enum.Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"
    FAILED = "failed"


class Session:
    """Conversation state for a single :class:`SessionID`.

    History and statistics are read from storage on the first operation and
    served from memory afterwards. Mutating operations hold the write lock for
    their whole duration, including the model round trip, so exchanges on the
    same session never interleave. ``history()`` and ``statistics()`` share the
    read lock and return copies.
    """

    def __init__(
        self,
        session_id: SessionID,
        client: CompletionClient,
        storage: Storage,
        params: RequestParams | None = None,
        prices: dict[str, CostPer1k] | None = None,
    ) -> None:
        self.id = session_id
        self._client = client
        self._storage = storage
        self._params = params or RequestParams()
        self._prices = prices

        self._history: History | None = None
        self._statistics: Statistics | None = None
        self._state = LoadState.UNLOADED

        self._lock = ReadWriteLock()
        self._load_lock = asyncio.Lock()

    @property
    def load_state(self) -> LoadState:
        return self._state

    @property
    def request_params(self) -> RequestParams:
        return self._params

    async def set_request_params(self, params: RequestParams) -> None:
        async with self._lock.write():
            self._params = params

    async def set_prompt(self, prompt: str) -> None:
        async with self._lock.write():
            history, _ = await self._load_if_needed()
            if not history.set_prompt(prompt):
                return
            await self._save_history(history)

    async def ask(self, message: str, reset: bool = False) -> str:
        """Send ``message`` with the conversation so far and record the exchange.

        With ``reset`` the prior log is left out of the request and the log is
        cleared afterwards instead of recording the new exchange. The model
        call happens before any state changes; if it or the price lookup
        fails, history and statistics stay untouched.
        """
        async with self._lock.write():
            history, statistics = await self._load_if_needed()

            messages = self._build_messages(history, message, reset)
            try:
                completion = await self._client.complete(self.id.model, messages, self._params)
            except Exception as e:
                raise CompletionError(f"error creating chat completion: {e}") from e

            try:
                cost = calculate_cost_by_model(completion.usage, self.id.model, self._prices)
            except CostLookupError as e:
                log.warning(
                    "Cost lookup failed after completion (user=%d, chat=%d, model=%s, in=%d, out=%d)",
                    self.id.user,
                    self.id.chat,
                    self.id.model,
                    completion.usage.input_tokens,
                    completion.usage.output_tokens,
                )
                raise CostLookupError(f"error calculating the cost: {e}") from e

            if reset:
                history.clear()
            else:
                history.add(Message(user=message, assistant=completion.text))
            statistics.add_cost(cost)

            await self._save_history(history)
            await self._save_statistics(statistics)
            return completion.text

    async def reset(self) -> None:
        """Clear the log. The prompt and statistics are kept."""
        async with self._lock.write():
            history, _ = await self._load_if_needed()
            history.clear()
            await self._save_history(history)

    async def history(self) -> History:
        async with self._lock.read():
            history, _ = await self._load_if_needed()
            return history.clone()

    async def statistics(self) -> Statistics:
        async with self._lock.read():
            _, statistics = await self._load_if_needed()
            return statistics.clone()

    @staticmethod
    def _build_messages(history: History, message: str, reset: bool) -> list[ChatMessage]:
        messages: list[ChatMessage] = []
        if history.prompt:
            messages.append(ChatMessage(role=ROLE_SYSTEM, content=history.prompt))
        if not reset:
            for exchange in history.log:
                messages.append(ChatMessage(role=ROLE_USER, content=exchange.user))
                messages.append(ChatMessage(role=ROLE_ASSISTANT, content=exchange.assistant))
        messages.append(ChatMessage(role=ROLE_USER, content=message))
        return messages

    async def _load_if_needed(self) -> tuple[History, Statistics]:
        if self._state is LoadState.LOADED:
            return self._history, self._statistics  # type: ignore[return-value]

        # readers may race here on a fresh session; only one of them loads
        async with self._load_lock:
            if self._state is not LoadState.LOADED:
                try:
                    history = await self._storage.load_history(self.id)
                    statistics = await self._storage.load_statistics(self.id)
                except Exception as e:
                    self._state = LoadState.FAILED
                    raise StorageError(f"error loading session from storage: {e}") from e
                self._history = history
                self._statistics = statistics
                self._state = LoadState.LOADED
                log.debug("Loaded session (user=%d, chat=%d)", self.id.user, self.id.chat)
        return self._history, self._statistics  # type: ignore[return-value]

    async def _save_history(self, history: History) -> None:
        try:
            await self._storage.save_history(history)
        except Exception as e:
            raise StorageError(f"error saving history to storage: {e}") from e

    async def _save_statistics(self, statistics: Statistics) -> None:
        try:
            await self._storage.save_statistics(statistics)
        except Exception as e:
            raise StorageError(f"error saving statistics to storage: {e}") from e
