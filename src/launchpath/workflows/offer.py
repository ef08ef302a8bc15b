"""Offer generation workflow.

prepare-prompts -> {generate-transformation, generate-guarantee, generate-pricing}
-> assemble-offer -> validate-offer. The three generators run concurrently
from one frozen brief and all must succeed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError

from launchpath.ai.client import AIClient
from launchpath.ai.prompts.offer import (
    GUARANTEE_SYSTEM_PROMPT,
    PRICING_SYSTEM_PROMPT,
    TRANSFORMATION_SYSTEM_PROMPT,
    OfferBrief,
    build_guarantee_context,
    build_pricing_context,
    build_transformation_context,
)
from launchpath.ai.schemas import (
    AIRecommendation,
    AssembledOffer,
    GuaranteeOutput,
    OfferTransformation,
    PricingOutput,
)
from launchpath.core.types import StepStatus
from launchpath.errors import PersistenceError, WorkflowError
from launchpath.log import get_logger
from launchpath.storage.models import ProfileRecord, SystemRecord
from launchpath.storage.system_repo import SystemRepository
from launchpath.workflows.generation import DEFAULT_MAX_RETRIES, GenerationStep
from launchpath.workflows.quality import check_guarantee, check_pricing, check_transformation

logger = get_logger(__name__)

OFFER_STEPS: list[tuple[str, str]] = [
    ("prepare-prompts", "Reading your niche and profile..."),
    ("generate-transformation", "Writing your transformation story..."),
    ("generate-guarantee", "Crafting your guarantee..."),
    ("generate-pricing", "Setting your pricing..."),
    ("assemble-offer", "Assembling your offer..."),
    ("validate-offer", "Final review..."),
]
OFFER_TRACKER_TITLE = "Building your offer..."

NO_NICHE = "no niche selected"
WORKFLOW_FAILED = "workflow failed"

ProgressCallback = Callable[[str, StepStatus], None]


@dataclass(frozen=True)
class PreparedPrompts:
    brief: OfferBrief
    transformation: str
    guarantee: str
    pricing: str


def _noop(step_id: str, status: StepStatus) -> None:
    pass


def parse_recommendation(raw: Optional[dict[str, Any]]) -> AIRecommendation:
    if not raw:
        raise WorkflowError(NO_NICHE)
    try:
        return AIRecommendation.model_validate(raw)
    except ValidationError as e:
        logger.warning("chosen_recommendation_invalid", error=str(e))
        raise WorkflowError(NO_NICHE) from e


def prepare_prompts(recommendation: AIRecommendation, profile: ProfileRecord, system: SystemRecord) -> PreparedPrompts:
    brief = OfferBrief.build(recommendation, profile, system)
    return PreparedPrompts(
        brief=brief,
        transformation=build_transformation_context(brief),
        guarantee=build_guarantee_context(brief),
        pricing=build_pricing_context(brief),
    )


def assemble_offer(
    segment: str,
    transformation: OfferTransformation,
    guarantee: GuaranteeOutput,
    pricing: PricingOutput,
) -> AssembledOffer:
    return AssembledOffer(
        segment=segment,
        transformation_from=transformation.transformation_from,
        transformation_to=transformation.transformation_to,
        system_description=transformation.system_description,
        guarantee_text=guarantee.guarantee_text,
        guarantee_type=guarantee.guarantee_type,
        guarantee_confidence=guarantee.confidence_notes,
        pricing_setup=pricing.pricing_setup,
        pricing_monthly=pricing.pricing_monthly,
        pricing_rationale=pricing.rationale,
        pricing_comparables=pricing.comparable_services,
        revenue_projection=pricing.revenue_projection,
        delivery_model="build_once",
        validation_status="passed",
    )


def validate_offer(offer: AssembledOffer) -> AssembledOffer:
    # Extension point for grounding or compliance review; accepts as-is for now.
    return offer


class OfferWorkflow:
    def __init__(
        self,
        ai_client: AIClient,
        max_retries: int = DEFAULT_MAX_RETRIES,
        model: str | None = None,
    ):
        self._ai = ai_client
        self._max_retries = max_retries
        self._model = model

    def _step(self, step_id: str, system_prompt: str, schema: type, validators: list) -> GenerationStep:
        return GenerationStep(
            step_id,
            self._ai,
            system_prompt,
            schema,
            validators=validators,
            max_retries=self._max_retries,
            model=self._model,
        )

    async def _tracked(self, step: GenerationStep, context: str, on_progress: ProgressCallback) -> Any:
        on_progress(step.step_id, StepStatus.ACTIVE)
        result = await step.run(context)
        on_progress(step.step_id, StepStatus.DONE)
        return result

    async def run(
        self,
        recommendation: Optional[dict[str, Any]],
        profile: ProfileRecord,
        system: SystemRecord,
        on_progress: ProgressCallback | None = None,
    ) -> AssembledOffer:
        on_progress = on_progress or _noop
        chosen = parse_recommendation(recommendation)

        on_progress("prepare-prompts", StepStatus.ACTIVE)
        prompts = prepare_prompts(chosen, profile, system)
        on_progress("prepare-prompts", StepStatus.DONE)

        bottleneck = prompts.brief.bottleneck
        steps = [
            (
                self._step(
                    "generate-transformation",
                    TRANSFORMATION_SYSTEM_PROMPT,
                    OfferTransformation,
                    [lambda r: check_transformation(r, bottleneck)],
                ),
                prompts.transformation,
            ),
            (self._step("generate-guarantee", GUARANTEE_SYSTEM_PROMPT, GuaranteeOutput, [check_guarantee]), prompts.guarantee),
            (self._step("generate-pricing", PRICING_SYSTEM_PROMPT, PricingOutput, [check_pricing]), prompts.pricing),
        ]

        logger.info("offer_generation_started", niche=chosen.niche)
        results = await asyncio.gather(
            *(self._tracked(step, context, on_progress) for step, context in steps),
            return_exceptions=True,
        )
        for (step, _), result in zip(steps, results):
            if isinstance(result, BaseException):
                logger.error("offer_step_failed", step=step.step_id, niche=chosen.niche, error=str(result))
                raise WorkflowError(WORKFLOW_FAILED, step_id=step.step_id) from result
        transformation, guarantee, pricing = results

        on_progress("assemble-offer", StepStatus.ACTIVE)
        offer = assemble_offer(chosen.target_segment.description, transformation, guarantee, pricing)
        on_progress("assemble-offer", StepStatus.DONE)

        on_progress("validate-offer", StepStatus.ACTIVE)
        offer = validate_offer(offer)
        on_progress("validate-offer", StepStatus.DONE)

        logger.info("offer_generation_complete", niche=chosen.niche)
        return offer


async def save_offer(repo: SystemRepository, system_id: str, offer: AssembledOffer) -> bool:
    """Persist a generated offer. Failures are logged and reported, never raised."""
    try:
        await repo.patch(system_id, {"offer": offer.model_dump()})
    except PersistenceError as e:
        logger.error("offer_save_failed", system_id=system_id, error=str(e))
        return False
    return True
