"""Conversation history: system prompt plus an append-only exchange log."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SessionID:
    """Names one conversation: who is talking, where, and to which model."""

    user: int
    chat: int
    model: str

    def to_dict(self) -> dict[str, Any]:
        return {"user": self.user, "chat": self.chat, "model": self.model}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionID:
        return cls(user=int(data["user"]), chat=int(data["chat"]), model=str(data["model"]))


@dataclass(frozen=True)
class Message:
    user: str
    assistant: str


@dataclass
class History:
    id: SessionID
    prompt: str = ""
    log: list[Message] = field(default_factory=list)

    def add(self, message: Message) -> None:
        self.log.append(message)

    def clear(self) -> None:
        """Drop every exchange; the prompt is kept."""
        self.log = []

    def set_prompt(self, prompt: str) -> bool:
        """Replace the system prompt. Returns False if it was already set to ``prompt``."""
        if self.prompt == prompt:
            return False
        self.prompt = prompt
        return True

    def clone(self) -> History:
        return History(id=self.id, prompt=self.prompt, log=list(self.log))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id.to_dict(),
            "prompt": self.prompt,
            "log": [{"user": m.user, "assistant": m.assistant} for m in self.log],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> History:
        return cls(
            id=SessionID.from_dict(data["id"]),
            prompt=data.get("prompt") or "",
            log=[
                Message(user=m.get("user", ""), assistant=m.get("assistant", ""))
                for m in data.get("log") or []
            ],
        )
