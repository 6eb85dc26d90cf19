"""In-memory event log with pandas export."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import pandas as pd

from .models import StrategyEvent


class EventLog:
    """Append-only collection of :class:`StrategyEvent` rows."""

    def __init__(self, events: Iterable[StrategyEvent] | None = None) -> None:
        self._events: list[StrategyEvent] = list(events) if events else []

    def record(
        self,
        kind: str,
        *,
        asset: str = "",
        amount: int = 0,
        shares: int = 0,
        recipient: str = "",
    ) -> StrategyEvent:
        event = StrategyEvent(
            sequence=len(self._events),
            kind=kind,
            asset=asset,
            amount=amount,
            shares=shares,
            recipient=recipient,
        )
        self._events.append(event)
        return event

    def filter(self, *, kinds: list[str] | None = None, asset: str | None = None) -> "EventLog":
        res: list[StrategyEvent] = []
        for event in self._events:
            if kinds and event.kind not in kinds:
                continue
            if asset is not None and event.asset != asset:
                continue
            res.append(event)
        return EventLog(res)

    def truncate(self, length: int) -> None:
        del self._events[length:]

    def to_dataframe(self) -> pd.DataFrame:
        # object dtype keeps 256-bit integers exact
        return pd.DataFrame([event.to_dict() for event in self._events], dtype=object)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[StrategyEvent]:
        return iter(self._events)


__all__ = ["EventLog"]
