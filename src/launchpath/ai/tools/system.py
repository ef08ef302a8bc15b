"""generate_system: build the demo page and mark the system complete."""

from __future__ import annotations

from typing import Any

from launchpath.ai.tools.base import Tool, ToolCategory
from launchpath.core import events
from launchpath.core.context import ToolContext
from launchpath.core.guards import ensure, missing_for_system
from launchpath.core.types import StepStatus, SystemStatus
from launchpath.errors import PersistenceError, PreconditionError, WorkflowError
from launchpath.log import get_logger
from launchpath.workflows.demo import DEMO_STEPS, DEMO_TRACKER_TITLE, DemoWorkflow, demo_url_for

logger = get_logger(__name__)

SYSTEM_FAILED = "System generation failed. Please try again."


class GenerateSystemTool(Tool):
    category = ToolCategory.ACTION

    def __init__(self, workflow: DemoWorkflow):
        self._workflow = workflow

    @property
    def name(self) -> str:
        return "generate_system"

    @property
    def description(self) -> str:
        return (
            "Build the user's live demo page from their confirmed offer and show the system-ready "
            "card. Requires a complete offer."
        )

    async def execute(self, ctx: ToolContext, **kwargs: Any) -> dict[str, Any]:
        system = await ctx.refresh()
        try:
            ensure(missing_for_system(system), "build the system")
        except PreconditionError as e:
            return {"error": str(e), "missing": e.missing}

        card_id = ctx.cards.allocate("system-progress")
        ctx.emit_card(events.progress_tracker_card(card_id, DEMO_TRACKER_TITLE, DEMO_STEPS))

        def on_progress(step_id: str, status: StepStatus) -> None:
            ctx.emit(events.progress(card_id, step_id, status))

        try:
            config = await self._workflow.run(system.chosen_recommendation, system.offer, on_progress)
        except WorkflowError as e:
            logger.error("system_tool_failed", system_id=ctx.system_id, reason=e.reason, step=e.step_id)
            return {"error": SYSTEM_FAILED}

        demo_url = demo_url_for(ctx.system_id)
        try:
            await ctx.repo.patch(
                ctx.system_id,
                {"demo_config": config.model_dump(), "demo_url": demo_url, "status": SystemStatus.COMPLETE},
            )
        except PersistenceError as e:
            logger.error("demo_save_failed", system_id=ctx.system_id, error=str(e))

        ctx.emit_card(events.system_ready_card(ctx.cards.allocate("system-ready"), demo_url, system.offer or {}))
        logger.info("system_generated", system_id=ctx.system_id, demo_url=demo_url)
        return {"success": True, "demoUrl": demo_url}
