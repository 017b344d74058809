"""In-memory collaborators for the session core."""

from __future__ import annotations

import asyncio

from chat_bridge.cost import Usage
from chat_bridge.history import History, SessionID
from chat_bridge.llm_client import ChatMessage, Completion, RequestParams
from chat_bridge.statistics import Statistics


class MemoryStorage:
    """In-memory storage that counts reads and writes and can be told to fail."""

    def __init__(self) -> None:
        self.histories: dict[SessionID, dict] = {}
        self.statistics: dict[SessionID, dict] = {}
        self.loads = 0
        self.saves = 0
        self.fail_load: Exception | None = None
        self.fail_save_history: Exception | None = None
        self.fail_save_statistics: Exception | None = None

    async def save_history(self, history: History) -> None:
        if self.fail_save_history:
            raise self.fail_save_history
        self.saves += 1
        self.histories[history.id] = history.to_dict()

    async def load_history(self, session_id: SessionID) -> History:
        if self.fail_load:
            raise self.fail_load
        self.loads += 1
        data = self.histories.get(session_id)
        return History.from_dict(data) if data else History(id=session_id)

    async def save_statistics(self, statistics: Statistics) -> None:
        if self.fail_save_statistics:
            raise self.fail_save_statistics
        self.saves += 1
        self.statistics[statistics.id] = statistics.to_dict()

    async def load_statistics(self, session_id: SessionID) -> Statistics:
        if self.fail_load:
            raise self.fail_load
        self.loads += 1
        data = self.statistics.get(session_id)
        return Statistics.from_dict(data) if data else Statistics(id=session_id)


class FakeClient:
    """Completion client returning numbered replies and recording every request."""

    def __init__(self, usage: Usage | None = None) -> None:
        self.usage = usage or Usage(input_tokens=1000, output_tokens=1000)
        self.calls: list[tuple[str, list[ChatMessage], RequestParams]] = []
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def complete(
        self, model: str, messages: list[ChatMessage], params: RequestParams
    ) -> Completion:
        self.calls.append((model, list(messages), params))
        if self.gate is not None:
            await self.gate.wait()
        if self.error:
            raise self.error
        return Completion(text=f"reply {len(self.calls)}", usage=self.usage)
