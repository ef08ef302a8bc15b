"""Timer-driven progress for generation calls that report no progress of their own."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable

from launchpath.core import events
from launchpath.core.events import Event
from launchpath.core.types import StepStatus
from launchpath.log import get_logger

logger = get_logger(__name__)


class ProgressTicker:
    """Walks a tracker card's steps on a fixed budget.

    Every ``budget / len(steps)`` seconds the previous step is marked done and
    the next one active. ``finish()`` stops the timer and marks everything
    that is left done; ``cancel()`` just stops it.
    """

    def __init__(
        self,
        emit: Callable[[Event], None],
        card_id: str,
        step_ids: list[str],
        budget_seconds: float,
    ):
        self._emit = emit
        self._card_id = card_id
        self._steps = step_ids
        self._interval = budget_seconds / max(len(step_ids), 1)
        self._index = 0
        self._task: asyncio.Task | None = None

    @property
    def index(self) -> int:
        return self._index

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        while self._index < len(self._steps):
            await asyncio.sleep(self._interval)
            self.advance()

    def advance(self) -> None:
        if self._index >= len(self._steps):
            return
        if self._index > 0:
            self._emit(events.progress(self._card_id, self._steps[self._index - 1], StepStatus.DONE))
        self._emit(events.progress(self._card_id, self._steps[self._index], StepStatus.ACTIVE))
        self._index += 1

    async def _stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def finish(self) -> None:
        await self._stop()
        for step_id in self._steps[max(self._index - 1, 0):]:
            self._emit(events.progress(self._card_id, step_id, StepStatus.DONE))
        logger.debug("progress_finished", card_id=self._card_id, ticks=self._index)

    async def cancel(self) -> None:
        await self._stop()
