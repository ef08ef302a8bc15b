"""run_niche_analysis: scored niche recommendations with a timed progress card."""

from __future__ import annotations

from typing import Any

from launchpath.ai.tools.base import Tool, ToolCategory
from launchpath.core import events
from launchpath.core.context import ToolContext
from launchpath.core.guards import ensure, missing_for_analysis
from launchpath.errors import GenerationError, PersistenceError, PreconditionError
from launchpath.log import get_logger
from launchpath.workflows.niche import NICHE_STEPS, NICHE_TRACKER_TITLE, NicheAnalyzer
from launchpath.workflows.progress import ProgressTicker

logger = get_logger(__name__)

ANALYSIS_FAILED = "Analysis failed. Try again."
NO_RECOMMENDATIONS = "Analysis returned no recommendations."
SCORE_CARDS_NOTE = "Score cards are displayed to the user. Do NOT list recommendation details in text."


class RunNicheAnalysisTool(Tool):
    category = ToolCategory.ACTION

    def __init__(self, analyzer: NicheAnalyzer, progress_seconds: float = 10.0):
        self._analyzer = analyzer
        self._progress_seconds = progress_seconds

    @property
    def name(self) -> str:
        return "run_niche_analysis"

    @property
    def description(self) -> str:
        return (
            "Analyse the user's profile and answers and show scored niche recommendations as cards. "
            "Only call once every required answer is saved."
        )

    async def execute(self, ctx: ToolContext, **kwargs: Any) -> dict[str, Any]:
        system = await ctx.refresh()
        try:
            ensure(missing_for_analysis(ctx.profile, system), "run niche analysis")
        except PreconditionError as e:
            logger.info("analysis_blocked", system_id=ctx.system_id, missing=e.missing)
            return {"error": str(e), "missing": e.missing}

        card_id = ctx.cards.allocate("niche-analysis")
        ctx.emit_card(events.progress_tracker_card(card_id, NICHE_TRACKER_TITLE, NICHE_STEPS))
        ticker = ProgressTicker(ctx.emit, card_id, [s for s, _ in NICHE_STEPS], self._progress_seconds)
        ticker.start()

        try:
            recommendations = await self._analyzer.run(ctx.profile, system)
        except GenerationError as e:
            logger.error("niche_analysis_failed", system_id=ctx.system_id, error=str(e))
            return {"error": ANALYSIS_FAILED}
        finally:
            await ticker.cancel()
        await ticker.finish()

        if not recommendations:
            return {"error": NO_RECOMMENDATIONS}

        payload = [r.model_dump() for r in recommendations]
        try:
            await ctx.repo.patch(ctx.system_id, {"ai_recommendations": payload})
        except PersistenceError as e:
            logger.error("recommendations_save_failed", system_id=ctx.system_id, error=str(e))

        ctx.emit_card(events.score_cards_card(ctx.cards.allocate("score-cards"), payload))
        return {
            "success": True,
            "count": len(recommendations),
            "niches": [{"niche": r.niche, "score": r.score} for r in recommendations],
            "note": SCORE_CARDS_NOTE,
        }
