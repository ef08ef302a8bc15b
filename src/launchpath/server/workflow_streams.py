"""Standalone offer and demo generation streams.

These back the ``/api/systems/{id}/offer`` and ``/demo`` endpoints. Each
request validates up front, then runs its workflow as a background task
that outlives the HTTP response.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

from launchpath.core import events
from launchpath.core.context import EventChannel
from launchpath.core.guards import ensure, missing_for_offer, missing_for_system, offer_is_complete
from launchpath.core.types import StepStatus, SystemStatus
from launchpath.errors import PersistenceError, WorkflowError
from launchpath.log import get_logger
from launchpath.storage.models import ProfileRecord, SystemRecord
from launchpath.storage.system_repo import SystemRepository
from launchpath.workflows.demo import DEMO_STEPS, DemoWorkflow, demo_url_for
from launchpath.workflows.offer import OFFER_STEPS, OfferWorkflow, save_offer

logger = get_logger(__name__)

OFFER_FAILED = "Offer generation failed. Please try again."
SYSTEM_FAILED = "System generation failed. Please try again."
SAVE_FAILED = "Failed to save your system."
LOADING_OFFER = "Loading your offer..."


class WorkflowStreams:
    def __init__(self, repo: SystemRepository, offer_workflow: OfferWorkflow, demo_workflow: DemoWorkflow):
        self._repo = repo
        self._offer_workflow = offer_workflow
        self._demo_workflow = demo_workflow
        self._tasks: set[asyncio.Task] = set()

    @staticmethod
    def _new_channel() -> EventChannel:
        return EventChannel(terminal=events.WORKFLOW_TERMINAL_EVENTS, track_progress=False)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @staticmethod
    def _reporter(channel: EventChannel, steps: list[tuple[str, str]]):
        labels = dict(steps)

        def report(step_id: str, status: StepStatus) -> None:
            if status == StepStatus.ACTIVE:
                channel.emit(events.workflow_progress(step_id, labels.get(step_id, f"{step_id}...")))
            elif status == StepStatus.DONE:
                channel.emit(events.workflow_step_complete(step_id))

        return report

    async def open_offer(self, system_id: str) -> EventChannel:
        """Raises ``SystemNotFoundError`` or ``PreconditionError`` before streaming."""
        system = await self._repo.require(system_id)
        ensure(missing_for_offer(system), "generate the offer")

        channel = self._new_channel()
        if offer_is_complete(system.offer):
            logger.info("offer_stream_reused", system_id=system_id)
            channel.emit(events.workflow_progress("load-offer", LOADING_OFFER))
            channel.emit(events.workflow_complete(offer=system.offer))
            return channel

        profile = await self._repo.get_profile(system.profile_id) or ProfileRecord(id=system.profile_id)
        self._spawn(self._run_offer(system, profile, channel))
        return channel

    async def _run_offer(self, system: SystemRecord, profile: ProfileRecord, channel: EventChannel) -> None:
        try:
            offer = await self._offer_workflow.run(
                system.chosen_recommendation, profile, system, self._reporter(channel, OFFER_STEPS)
            )
            await save_offer(self._repo, system.id, offer)
            channel.emit(events.workflow_complete(offer=offer.model_dump()))
        except WorkflowError as e:
            logger.error("offer_stream_failed", system_id=system.id, reason=e.reason, step=e.step_id)
            channel.emit(events.workflow_error(OFFER_FAILED))
        except Exception as e:
            logger.error("offer_stream_crashed", system_id=system.id, error=str(e))
            channel.emit(events.workflow_error(OFFER_FAILED))
        finally:
            channel.close()

    async def open_demo(self, system_id: str) -> EventChannel:
        system = await self._repo.require(system_id)
        ensure(missing_for_system(system), "build the system")

        channel = self._new_channel()
        self._spawn(self._run_demo(system, channel))
        return channel

    async def _run_demo(self, system: SystemRecord, channel: EventChannel) -> None:
        try:
            config = await self._demo_workflow.run(
                system.chosen_recommendation, system.offer, self._reporter(channel, DEMO_STEPS)
            )
            demo_url = demo_url_for(system.id)
            try:
                await self._repo.patch(
                    system.id,
                    {"demo_config": config.model_dump(), "demo_url": demo_url, "status": SystemStatus.COMPLETE},
                )
            except PersistenceError as e:
                logger.error("demo_save_failed", system_id=system.id, error=str(e))
                channel.emit(events.workflow_error(SAVE_FAILED))
                return
            logger.info("demo_stream_complete", system_id=system.id, slug=config.niche_slug)
            channel.emit(events.workflow_complete(demo_config=config.model_dump(), demo_url=demo_url))
        except WorkflowError as e:
            logger.error("demo_stream_failed", system_id=system.id, reason=e.reason, step=e.step_id)
            channel.emit(events.workflow_error(SYSTEM_FAILED))
        except Exception as e:
            logger.error("demo_stream_crashed", system_id=system.id, error=str(e))
            channel.emit(events.workflow_error(SYSTEM_FAILED))
        finally:
            channel.close()

    async def wait_idle(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def shutdown(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.wait_idle()
