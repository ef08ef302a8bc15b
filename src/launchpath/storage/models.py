"""Data models for storage layer."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Optional

# Answers collected by save_collected_answers; the only keys the model may write directly.
ANSWER_FIELDS: frozenset[str] = frozenset({
    "intent",
    "direction_path",
    "industry_interests",
    "own_idea",
    "tried_niche",
    "what_went_wrong",
    "growth_direction",
    "current_niche",
    "current_clients",
    "current_pricing",
    "delivery_model",
    "pricing_direction",
    "location_city",
    "location_target",
})

# Offer keys a user can edit through the review cards.
EDITABLE_OFFER_FIELDS: frozenset[str] = frozenset({
    "segment",
    "transformation_from",
    "transformation_to",
    "system_description",
    "pricing_setup",
    "pricing_monthly",
    "guarantee_text",
})

SYSTEM_FIELDS: frozenset[str] = ANSWER_FIELDS | {
    "ai_recommendations",
    "chosen_recommendation",
    "offer",
    "demo_config",
    "demo_url",
    "conversation_history",
    "display_messages",
    "status",
    "turn_count",
}

PROFILE_FIELDS: frozenset[str] = frozenset({
    "current_situation",
    "time_availability",
    "outreach_comfort",
    "technical_comfort",
    "revenue_goal",
    "blockers",
})


@dataclass
class ProfileRecord:
    id: str
    current_situation: Optional[str] = None
    time_availability: Optional[str] = None
    outreach_comfort: Optional[str] = None
    technical_comfort: Optional[str] = None
    revenue_goal: Optional[str] = None
    blockers: list[str] = field(default_factory=list)

    @classmethod
    def from_document(cls, profile_id: str, doc: dict[str, Any]) -> ProfileRecord:
        known = {k: v for k, v in doc.items() if k in PROFILE_FIELDS}
        if known.get("blockers") is None:
            known["blockers"] = []
        return cls(id=profile_id, **known)

    def to_document(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "id"}


@dataclass
class SystemRecord:
    id: str
    profile_id: str
    intent: Optional[str] = None
    direction_path: Optional[str] = None
    industry_interests: list[str] = field(default_factory=list)
    own_idea: Optional[str] = None
    tried_niche: Optional[str] = None
    what_went_wrong: Optional[str] = None
    growth_direction: Optional[str] = None
    current_niche: Optional[str] = None
    current_clients: Optional[str] = None
    current_pricing: Optional[str] = None
    delivery_model: Optional[str] = None
    pricing_direction: Optional[str] = None
    location_city: Optional[str] = None
    location_target: Optional[str] = None
    ai_recommendations: Optional[list[dict[str, Any]]] = None
    chosen_recommendation: Optional[dict[str, Any]] = None
    offer: Optional[dict[str, Any]] = None
    demo_config: Optional[dict[str, Any]] = None
    demo_url: Optional[str] = None
    conversation_history: list[dict[str, Any]] = field(default_factory=list)
    display_messages: list[dict[str, Any]] = field(default_factory=list)
    status: str = "in_progress"
    turn_count: int = 0
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_document(
        cls,
        system_id: str,
        profile_id: str,
        doc: dict[str, Any],
        created_at: str = "",
        updated_at: str = "",
    ) -> SystemRecord:
        known = {k: v for k, v in doc.items() if k in SYSTEM_FIELDS}
        # Columns stored as JSON null come back as None; keep list defaults
        for list_field in ("industry_interests", "conversation_history", "display_messages"):
            if known.get(list_field) is None:
                known.pop(list_field, None)
        for scalar_field in ("status", "turn_count"):
            if known.get(scalar_field) is None:
                known.pop(scalar_field, None)
        return cls(id=system_id, profile_id=profile_id, created_at=created_at, updated_at=updated_at, **known)

    def answers(self) -> dict[str, Any]:
        """The collected branching-path answers, including empty ones."""
        return {name: getattr(self, name) for name in sorted(ANSWER_FIELDS)}
