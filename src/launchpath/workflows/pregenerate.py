"""Background offer generation started as soon as a niche is chosen."""

from __future__ import annotations

import asyncio

from launchpath.core.guards import offer_is_complete
from launchpath.errors import LaunchPathError
from launchpath.log import get_logger
from launchpath.storage.models import ProfileRecord
from launchpath.storage.system_repo import SystemRepository
from launchpath.workflows.offer import OfferWorkflow, save_offer

logger = get_logger(__name__)


class OfferPregenerator:
    """Fire-and-forget offer generation.

    Runs are keyed by system id; a second request for the same system while
    one is in flight is ignored. Failures are logged and otherwise dropped,
    since ``generate_offer`` will simply run the workflow itself.
    """

    def __init__(self, repo: SystemRepository, workflow: OfferWorkflow):
        self._repo = repo
        self._workflow = workflow
        self._tasks: dict[str, asyncio.Task] = {}

    def schedule(self, system_id: str) -> bool:
        if system_id in self._tasks:
            return False
        task = asyncio.create_task(self._run(system_id))
        self._tasks[system_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(system_id, None))
        logger.info("offer_pregeneration_scheduled", system_id=system_id)
        return True

    def in_flight(self, system_id: str) -> bool:
        return system_id in self._tasks

    async def _run(self, system_id: str) -> None:
        try:
            system = await self._repo.require(system_id)
            if not system.chosen_recommendation or offer_is_complete(system.offer):
                return
            profile = await self._repo.get_profile(system.profile_id) or ProfileRecord(id=system.profile_id)
            offer = await self._workflow.run(system.chosen_recommendation, profile, system)

            # generate_offer may have finished first; keep whichever landed first
            latest = await self._repo.require(system_id)
            if offer_is_complete(latest.offer):
                logger.info("offer_pregeneration_superseded", system_id=system_id)
                return
            if latest.chosen_recommendation != system.chosen_recommendation:
                logger.info("offer_pregeneration_stale", system_id=system_id)
                return
            if await save_offer(self._repo, system_id, offer):
                logger.info("offer_pregenerated", system_id=system_id)
        except LaunchPathError as e:
            logger.warning("offer_pregeneration_failed", system_id=system_id, error=str(e))

    async def wait_idle(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks.values(), return_exceptions=True)

    async def shutdown(self) -> None:
        for task in list(self._tasks.values()):
            task.cancel()
        await self.wait_idle()
