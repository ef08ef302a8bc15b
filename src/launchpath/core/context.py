"""Request-scoped state shared by the conversation engine and its tools."""

from __future__ import annotations

import asyncio
import re
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

from launchpath.core import events
from launchpath.core.events import Event
from launchpath.core.types import CardType, EventType, StepStatus
from launchpath.log import get_logger
from launchpath.storage.models import ProfileRecord, SystemRecord
from launchpath.storage.system_repo import SystemRepository

logger = get_logger(__name__)

_CLOSE = object()
_STATUS_RANK = {StepStatus.PENDING: 0, StepStatus.ACTIVE: 1, StepStatus.DONE: 2}
_SLUG_RE = re.compile(r"[^a-z0-9]+")


class EventChannel:
    """Ordered, single-producer event queue backing one SSE response.

    Accepts at most one terminal event (``done`` or ``error`` by default);
    anything emitted afterwards is dropped. With ``track_progress`` set,
    progress events are checked against the trackers already emitted on this
    channel: unknown card ids and status regressions are dropped rather than
    forwarded. Standalone workflow streams pass their own terminal set and
    turn tracking off, since their progress events carry no card id.
    """

    def __init__(
        self,
        terminal: frozenset[str] = events.TERMINAL_EVENTS,
        track_progress: bool = True,
    ) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False
        self._terminal = terminal
        self._track_progress = track_progress
        self._trackers: dict[str, dict[str, StepStatus]] = {}

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, event: Event) -> None:
        if self._closed:
            logger.debug("event_after_close", event_type=event.get("type"))
            return

        if self._track_progress:
            match event["type"]:
                case EventType.CARD:
                    card = event["card"]
                    if card["type"] == CardType.PROGRESS_TRACKER:
                        self._trackers[card["id"]] = {s["id"]: StepStatus(s["status"]) for s in card["steps"]}
                case EventType.PROGRESS:
                    if not self._accept_progress(event):
                        return

        self._queue.put_nowait(event)
        if event["type"] in self._terminal:
            self.close()

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSE)

    def _accept_progress(self, event: Event) -> bool:
        steps = self._trackers.get(event["cardId"])
        if steps is None or event["stepId"] not in steps:
            logger.warning("progress_for_unknown_card", card_id=event["cardId"], step_id=event["stepId"])
            return False
        new_status = StepStatus(event["status"])
        if _STATUS_RANK[new_status] <= _STATUS_RANK[steps[event["stepId"]]]:
            return False
        steps[event["stepId"]] = new_status
        return True

    async def __aiter__(self) -> AsyncIterator[Event]:
        while True:
            item = await self._queue.get()
            if item is _CLOSE:
                return
            yield item


class CardIdAllocator:
    """Hands out conversation-unique card ids.

    Ids take the form ``<base>-t<turn>``; a base requested twice in the same
    turn gets a ``-2``, ``-3``... suffix. The turn index is claimed from the
    system's persisted turn counter, so ids never repeat across turns, even
    when a failed turn is retried against the same history.
    """

    def __init__(self, turn: int):
        self.turn = turn
        self._counts: dict[str, int] = {}

    def allocate(self, base: str) -> str:
        count = self._counts.get(base, 0) + 1
        self._counts[base] = count
        card_id = f"{base}-t{self.turn}"
        return card_id if count == 1 else f"{card_id}-{count}"

    def dynamic(self, requested_id: str) -> tuple[str, str]:
        """Namespace a model-chosen id. Returns ``(card_id, field)``."""
        slug = _SLUG_RE.sub("-", requested_id.lower()).strip("-") or "question"
        field_name = f"dyn-{slug}"
        return self.allocate(field_name), field_name


@dataclass
class ToolContext:
    """Everything a tool may touch during one conversation turn."""

    system_id: str
    repo: SystemRepository
    profile: ProfileRecord
    system: SystemRecord
    channel: EventChannel
    cards: CardIdAllocator
    tools_used: list[str] = field(default_factory=list)

    def emit(self, event: Event) -> None:
        self.channel.emit(event)

    def emit_card(self, card: dict[str, Any]) -> None:
        self.channel.emit(events.card_event(card))

    async def refresh(self) -> SystemRecord:
        """Re-read the system; earlier tools in this turn may have saved fields."""
        self.system = await self.repo.require(self.system_id)
        return self.system
