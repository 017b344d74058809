"""Running cost aggregates for one session."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .history import SessionID

EPOCH = datetime(1, 1, 1, tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Statistics:
    id: SessionID
    last_message: float = 0.0
    daily: float = 0.0
    monthly: dict[int, float] = field(default_factory=dict)
    """Cost per calendar month, keyed 1-12."""
    total: float = 0.0
    last_update: datetime = EPOCH

    def add_cost(self, cost: float, now: datetime | None = None) -> None:
        """Record one exchange's cost.

        The daily figure restarts from zero when ``now`` falls on a different
        calendar day than the previous update. Not safe for concurrent use;
        the owning session serializes calls.
        """
        if cost < 0:
            raise ValueError(f"cost must not be negative: {cost}")
        now = now or utcnow()

        if now.date() != self.last_update.date():
            self.daily = 0.0

        self.last_message = cost
        self.daily += cost
        self.total += cost
        self.monthly[now.month] = self.monthly.get(now.month, 0.0) + cost
        self.last_update = now

    def month(self, month: int) -> float:
        return self.monthly.get(month, 0.0)

    def clone(self) -> Statistics:
        return Statistics(
            id=self.id,
            last_message=self.last_message,
            daily=self.daily,
            monthly=dict(self.monthly),
            total=self.total,
            last_update=self.last_update,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id.to_dict(),
            "last_message": self.last_message,
            "daily": self.daily,
            "monthly": {str(month): cost for month, cost in sorted(self.monthly.items())},
            "total": self.total,
            "last_update": self.last_update.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Statistics:
        last_update = EPOCH
        if data.get("last_update"):
            last_update = datetime.fromisoformat(data["last_update"])
            if last_update.tzinfo is None:
                last_update = last_update.replace(tzinfo=timezone.utc)
        return cls(
            id=SessionID.from_dict(data["id"]),
            last_message=float(data.get("last_message", 0.0)),
            daily=float(data.get("daily", 0.0)),
            monthly={int(k): float(v) for k, v in (data.get("monthly") or {}).items()},
            total=float(data.get("total", 0.0)),
            last_update=last_update,
        )
