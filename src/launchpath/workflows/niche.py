"""Niche analysis: one structured generation producing scored recommendations."""

from __future__ import annotations

from launchpath.ai.client import AIClient
from launchpath.ai.prompts.niche import NICHE_SYSTEM_PROMPT, build_niche_context, recommendation_count
from launchpath.ai.schemas import AIRecommendation, NicheAnalysisOutput
from launchpath.log import get_logger
from launchpath.storage.models import ProfileRecord, SystemRecord
from launchpath.workflows.generation import DEFAULT_MAX_RETRIES, GenerationStep

logger = get_logger(__name__)

NICHE_STEPS: list[tuple[str, str]] = [
    ("profile", "Analysing your profile"),
    ("scan", "Scanning 70+ validated niches"),
    ("score", "Scoring market opportunities"),
    ("bottleneck", "Identifying bottlenecks"),
    ("segment", "Evaluating segment fit"),
    ("revenue", "Calculating revenue potential"),
    ("build", "Building recommendations"),
]
NICHE_TRACKER_TITLE = "Finding your opportunity..."


class NicheAnalyzer:
    def __init__(
        self,
        ai_client: AIClient,
        max_retries: int = DEFAULT_MAX_RETRIES,
        model: str | None = None,
    ):
        self._ai = ai_client
        self._max_retries = max_retries
        self._model = model

    async def run(self, profile: ProfileRecord, system: SystemRecord) -> list[AIRecommendation]:
        """Return at most ``recommendation_count`` recommendations with reconciled scores."""
        count = recommendation_count(profile)
        step = GenerationStep(
            "niche-analysis",
            self._ai,
            NICHE_SYSTEM_PROMPT,
            NicheAnalysisOutput,
            max_retries=self._max_retries,
            model=self._model,
        )
        output = await step.run(build_niche_context(profile, system, count))
        recommendations = [r.reconciled() for r in output.recommendations[:count]]
        logger.info(
            "niche_analysis_complete",
            system_id=system.id,
            count=len(recommendations),
            niches=[r.niche for r in recommendations],
        )
        return recommendations
