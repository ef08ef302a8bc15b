"""Offer tools: generation plus the three review-exchange cards."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from launchpath.ai.schemas import AssembledOffer
from launchpath.ai.tools.base import Tool, ToolCategory
from launchpath.core import events
from launchpath.core.context import ToolContext
from launchpath.core.guards import ensure, missing_for_offer, offer_is_complete
from launchpath.core.types import StepStatus
from launchpath.errors import PreconditionError, WorkflowError
from launchpath.log import get_logger
from launchpath.workflows.offer import (
    NO_NICHE,
    OFFER_STEPS,
    OFFER_TRACKER_TITLE,
    OfferWorkflow,
    save_offer,
)

logger = get_logger(__name__)

NO_NICHE_SELECTED = "No niche selected."
OFFER_FAILED = "Offer generation failed. Please try again."
REVIEW_UNAVAILABLE = "Could not load offer for review."
STORY_CARD_NOTE = "The offer story card is displayed to the user. Do NOT repeat its contents in text."


def story_card(card_id: str, offer: dict[str, Any]) -> dict[str, Any]:
    def value(key: str) -> str:
        return str(offer.get(key) or "")

    return events.editable_content_card(
        card_id,
        "offer-story",
        "Your Business Story",
        [
            {"name": "segment", "label": "Target Segment", "value": value("segment"), "type": "textarea"},
            {"name": "transformation_from", "label": "Where they are now", "value": value("transformation_from"), "type": "textarea"},
            {"name": "transformation_to", "label": "Where they'll be", "value": value("transformation_to"), "type": "textarea"},
            {"name": "system_description", "label": "What you deliver", "value": value("system_description"), "type": "textarea"},
        ],
        subtitle="Edit anything that doesn't feel right",
        confirm_label="Looks good",
    )


def pricing_card(card_id: str, offer: dict[str, Any]) -> dict[str, Any]:
    return events.editable_content_card(
        card_id,
        "offer-pricing",
        "The Commitment",
        [
            {"name": "pricing_setup", "label": "Setup Fee", "value": str(offer.get("pricing_setup") or 0), "type": "number", "prefix": "£"},
            {"name": "pricing_monthly", "label": "Monthly Fee", "value": str(offer.get("pricing_monthly") or 0), "type": "number", "prefix": "£"},
            {"name": "guarantee_text", "label": "Guarantee", "value": str(offer.get("guarantee_text") or ""), "type": "textarea"},
        ],
        subtitle="Your pricing and guarantee",
        confirm_label="Confirm pricing",
    )


class GenerateOfferTool(Tool):
    category = ToolCategory.ACTION

    def __init__(self, workflow: OfferWorkflow):
        self._workflow = workflow

    @property
    def name(self) -> str:
        return "generate_offer"

    @property
    def description(self) -> str:
        return (
            "Build the user's offer (transformation story, guarantee, pricing) for the chosen niche "
            "and show the story card. Requires a saved niche choice."
        )

    async def execute(self, ctx: ToolContext, **kwargs: Any) -> dict[str, Any]:
        system = await ctx.refresh()
        if offer_is_complete(system.offer):
            logger.info("offer_reused", system_id=ctx.system_id)
            ctx.emit_card(story_card(ctx.cards.allocate("offer-story"), system.offer))
            return {"success": True, "reused": True, "note": STORY_CARD_NOTE}

        try:
            ensure(missing_for_offer(system), "generate the offer")
        except PreconditionError as e:
            return {"error": NO_NICHE_SELECTED, "missing": e.missing}

        card_id = ctx.cards.allocate("offer-progress")
        ctx.emit_card(events.progress_tracker_card(card_id, OFFER_TRACKER_TITLE, OFFER_STEPS))

        def on_progress(step_id: str, status: StepStatus) -> None:
            ctx.emit(events.progress(card_id, step_id, status))

        try:
            offer = await self._workflow.run(system.chosen_recommendation, ctx.profile, system, on_progress)
        except WorkflowError as e:
            logger.error("offer_tool_failed", system_id=ctx.system_id, reason=e.reason, step=e.step_id)
            return {"error": NO_NICHE_SELECTED if e.reason == NO_NICHE else OFFER_FAILED}

        await save_offer(ctx.repo, ctx.system_id, offer)
        ctx.emit_card(story_card(ctx.cards.allocate("offer-story"), offer.model_dump()))
        return {"success": True, "reused": False, "note": STORY_CARD_NOTE}


class ShowOfferStoryTool(Tool):
    category = ToolCategory.DISPLAY

    @property
    def name(self) -> str:
        return "show_offer_story"

    @property
    def description(self) -> str:
        return "Show the editable business story card again (segment, before, after, what you deliver)."

    async def execute(self, ctx: ToolContext, **kwargs: Any) -> dict[str, Any]:
        system = await ctx.refresh()
        ctx.emit_card(story_card(ctx.cards.allocate("offer-story"), system.offer or {}))
        return {"displayed": True, "section": "story"}


class ShowOfferPricingTool(Tool):
    category = ToolCategory.DISPLAY

    @property
    def name(self) -> str:
        return "show_offer_pricing"

    @property
    def description(self) -> str:
        return "Show the editable pricing and guarantee card. Call after the story is confirmed."

    async def execute(self, ctx: ToolContext, **kwargs: Any) -> dict[str, Any]:
        system = await ctx.refresh()
        ctx.emit_card(pricing_card(ctx.cards.allocate("offer-pricing"), system.offer or {}))
        return {"displayed": True, "section": "pricing"}


class ShowOfferReviewTool(Tool):
    category = ToolCategory.DISPLAY

    @property
    def name(self) -> str:
        return "show_offer_review"

    @property
    def description(self) -> str:
        return "Show the full offer summary with the 'Build My System' button. Call after pricing is confirmed."

    async def execute(self, ctx: ToolContext, **kwargs: Any) -> dict[str, Any]:
        system = await ctx.refresh()
        try:
            offer = AssembledOffer.model_validate(system.offer or {})
        except ValidationError:
            return {"error": REVIEW_UNAVAILABLE}
        ctx.emit_card(events.offer_summary_card(ctx.cards.allocate("offer-review"), offer.model_dump()))
        return {"displayed": True, "section": "review"}
