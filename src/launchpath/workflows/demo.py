"""Demo page workflow: generate-demo-config -> validate-demo-config."""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any, Optional

from pydantic import ValidationError

from launchpath.ai.client import AIClient
from launchpath.ai.prompts.demo import DEMO_BUILDER_SYSTEM_PROMPT, build_demo_context
from launchpath.ai.schemas import AssembledOffer, DemoConfig
from launchpath.core.types import StepStatus
from launchpath.errors import GenerationError, WorkflowError
from launchpath.log import get_logger
from launchpath.workflows.generation import DEFAULT_MAX_RETRIES, GenerationStep
from launchpath.workflows.offer import WORKFLOW_FAILED, parse_recommendation
from launchpath.workflows.quality import check_demo_config
from launchpath.workflows.references import find_reference

logger = get_logger(__name__)

DEMO_STEPS: list[tuple[str, str]] = [
    ("generate-demo-config", "Designing your demo page..."),
    ("validate-demo-config", "Finalising your unique URL..."),
]
DEMO_TRACKER_TITLE = "Building your system..."

MISSING_OFFER = "offer incomplete"

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def demo_url_for(system_id: str) -> str:
    return f"/demo/{system_id}"


def normalize_slug(slug: str, fallback: str) -> str:
    cleaned = _SLUG_RE.sub("-", slug.lower()).strip("-")
    return cleaned or _SLUG_RE.sub("-", fallback.lower()).strip("-") or "demo"


def validate_demo_config(config: DemoConfig, niche: str) -> DemoConfig:
    # Pass-through apart from slug normalisation; further checks slot in here.
    return config.model_copy(update={"niche_slug": normalize_slug(config.niche_slug, niche)})


class DemoWorkflow:
    def __init__(
        self,
        ai_client: AIClient,
        max_retries: int = DEFAULT_MAX_RETRIES,
        model: str | None = None,
    ):
        self._ai = ai_client
        self._max_retries = max_retries
        self._model = model

    async def run(
        self,
        recommendation: Optional[dict[str, Any]],
        offer: Optional[dict[str, Any]],
        on_progress: Callable[[str, StepStatus], None] | None = None,
    ) -> DemoConfig:
        def report(step_id: str, status: StepStatus) -> None:
            if on_progress is not None:
                on_progress(step_id, status)

        chosen = parse_recommendation(recommendation)
        try:
            assembled = AssembledOffer.model_validate(offer or {})
        except ValidationError as e:
            logger.warning("offer_invalid_for_demo", niche=chosen.niche, error=str(e))
            raise WorkflowError(MISSING_OFFER) from e

        reference = find_reference(chosen.niche)
        logger.info("demo_generation_started", niche=chosen.niche, reference=reference.slug if reference else None)

        step = GenerationStep(
            "generate-demo-config",
            self._ai,
            DEMO_BUILDER_SYSTEM_PROMPT,
            DemoConfig,
            validators=[lambda c: check_demo_config(c, assembled.transformation_to)],
            max_retries=self._max_retries,
            model=self._model,
        )
        report("generate-demo-config", StepStatus.ACTIVE)
        try:
            config = await step.run(build_demo_context(chosen, assembled, reference))
        except GenerationError as e:
            logger.error("demo_generation_failed", niche=chosen.niche, error=str(e))
            raise WorkflowError(WORKFLOW_FAILED, step_id=step.step_id) from e
        report("generate-demo-config", StepStatus.DONE)

        report("validate-demo-config", StepStatus.ACTIVE)
        config = validate_demo_config(config, chosen.niche)
        report("validate-demo-config", StepStatus.DONE)

        logger.info("demo_generation_complete", niche=chosen.niche, slug=config.niche_slug)
        return config
