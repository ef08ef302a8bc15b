"""Save tools: single persistence writes, no UI events."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from launchpath.ai.schemas import OfferSectionUpdate
from launchpath.ai.tools.base import Tool, ToolCategory
from launchpath.core.context import ToolContext
from launchpath.errors import PersistenceError
from launchpath.log import get_logger
from launchpath.storage.models import ANSWER_FIELDS, EDITABLE_OFFER_FIELDS
from launchpath.workflows.pregenerate import OfferPregenerator

logger = get_logger(__name__)

SAVE_FAILED = "Failed to save. Please try again."


def _normalize_answer(key: str, value: Any) -> Any:
    if key == "industry_interests":
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        return [str(v) for v in value or []]
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class SaveCollectedAnswersTool(Tool):
    category = ToolCategory.SAVE

    @property
    def name(self) -> str:
        return "save_collected_answers"

    @property
    def description(self) -> str:
        return (
            "Save answers the user has given. Pass only the fields you learned this turn. "
            f"Allowed fields: {', '.join(sorted(ANSWER_FIELDS))}."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "updates": {
                    "type": "object",
                    "description": "Field name to value. industry_interests is a list of strings.",
                    "additionalProperties": True,
                },
            },
            "required": ["updates"],
        }

    async def execute(self, ctx: ToolContext, updates: dict[str, Any] | None = None, **kwargs: Any) -> dict[str, Any]:
        updates = updates or {}
        accepted = {k: _normalize_answer(k, v) for k, v in updates.items() if k in ANSWER_FIELDS}
        ignored = sorted(set(updates) - ANSWER_FIELDS)
        if not accepted:
            return {"saved": False, "error": "No recognised fields to save.", "ignored": ignored}

        try:
            await ctx.repo.patch(ctx.system_id, accepted)
        except PersistenceError:
            return {"saved": False, "error": SAVE_FAILED}

        logger.info("answers_saved", system_id=ctx.system_id, fields=sorted(accepted))
        result: dict[str, Any] = {"saved": True, "fields": sorted(accepted)}
        if ignored:
            result["ignored"] = ignored
        return result


class SaveNicheChoiceTool(Tool):
    category = ToolCategory.SAVE

    def __init__(self, pregenerator: OfferPregenerator | None = None):
        self._pregenerator = pregenerator

    @property
    def name(self) -> str:
        return "save_niche_choice"

    @property
    def description(self) -> str:
        return (
            "Save the niche the user picked from the score cards. Pass the niche name exactly as "
            "shown. Starts preparing their offer in the background."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"niche": {"type": "string"}},
            "required": ["niche"],
        }

    async def execute(self, ctx: ToolContext, niche: str = "", **kwargs: Any) -> dict[str, Any]:
        system = await ctx.refresh()
        wanted = niche.strip().lower()
        chosen = next(
            (r for r in system.ai_recommendations or [] if str(r.get("niche", "")).strip().lower() == wanted),
            None,
        )
        if chosen is None:
            return {"saved": False, "error": f"'{niche}' is not one of the analysed niches."}

        fields: dict[str, Any] = {"chosen_recommendation": chosen}
        # An offer built for a different niche no longer applies
        previous = system.chosen_recommendation or {}
        if system.offer and previous.get("niche") != chosen.get("niche"):
            fields["offer"] = None
        try:
            await ctx.repo.patch(ctx.system_id, fields)
        except PersistenceError:
            return {"saved": False, "error": SAVE_FAILED}

        logger.info("niche_chosen", system_id=ctx.system_id, niche=chosen.get("niche"))
        if self._pregenerator is not None:
            self._pregenerator.schedule(ctx.system_id)
        return {"saved": True, "niche": chosen.get("niche")}


class SaveOfferSectionTool(Tool):
    category = ToolCategory.SAVE

    @property
    def name(self) -> str:
        return "save_offer_section"

    @property
    def description(self) -> str:
        return (
            "Save edits the user confirmed on an offer review card. Pass the confirmed JSON as "
            f"updates. Editable fields: {', '.join(sorted(EDITABLE_OFFER_FIELDS))}."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"updates": {"type": "object", "additionalProperties": True}},
            "required": ["updates"],
        }

    async def execute(self, ctx: ToolContext, updates: dict[str, Any] | None = None, **kwargs: Any) -> dict[str, Any]:
        raw = {k: v for k, v in (updates or {}).items() if k in EDITABLE_OFFER_FIELDS}
        try:
            section = OfferSectionUpdate.model_validate(raw)
        except ValidationError as e:
            return {"saved": False, "error": f"Invalid offer values: {e.error_count()} field(s) rejected."}

        values = section.model_dump(exclude_none=True)
        if not values:
            return {"saved": False, "error": "No editable offer fields to save."}
        try:
            await ctx.repo.merge_offer(ctx.system_id, values)
        except PersistenceError:
            return {"saved": False, "error": SAVE_FAILED}

        logger.info("offer_section_saved", system_id=ctx.system_id, fields=sorted(values))
        return {"saved": True, "updatedFields": sorted(values)}
