"""Server-side preconditions for the action tools.

Analysis needs every field the user's path requires, offer generation needs
a chosen niche, and the demo build needs a complete offer. Each check
returns the names of what is missing; ``ensure`` turns a non-empty result
into a ``PreconditionError``.
"""

from __future__ import annotations

from typing import Any

from launchpath.core.types import DirectionPath
from launchpath.errors import PreconditionError
from launchpath.storage.models import ProfileRecord, SystemRecord

_SITUATION_PATHS = {
    "complete_beginner": DirectionPath.BEGINNER,
    "consumed_content": DirectionPath.BEGINNER,
    "tried_no_clients": DirectionPath.STUCK,
    "has_clients": DirectionPath.HAS_CLIENTS,
}

_PATH_REQUIRED = {
    DirectionPath.BEGINNER: ["intent", "industry_interests", "own_idea"],
    DirectionPath.STUCK: ["intent", "tried_niche", "what_went_wrong", "growth_direction"],
    DirectionPath.HAS_CLIENTS: ["intent", "current_niche", "growth_direction"],
}

HIGH_REVENUE_GOALS = frozenset({"3k_5k", "5k_10k_plus"})

REQUIRED_OFFER_FIELDS = (
    "transformation_from",
    "transformation_to",
    "guarantee_text",
    "pricing_setup",
    "pricing_monthly",
)


def _is_missing(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def resolve_path(profile: ProfileRecord, system: SystemRecord) -> DirectionPath:
    if system.direction_path in DirectionPath.__members__.values():
        return DirectionPath(system.direction_path)
    return _SITUATION_PATHS.get(profile.current_situation or "", DirectionPath.BEGINNER)


def required_for_analysis(profile: ProfileRecord, system: SystemRecord) -> list[str]:
    path = resolve_path(profile, system)
    required = list(_PATH_REQUIRED[path])

    if path == DirectionPath.STUCK and system.growth_direction == "pivot":
        required.append("industry_interests")
    if path == DirectionPath.HAS_CLIENTS and system.growth_direction == "new_niche":
        required.append("industry_interests")

    if profile.time_availability and profile.time_availability != "under_5":
        required.append("delivery_model")
    if profile.revenue_goal in HIGH_REVENUE_GOALS:
        required.append("pricing_direction")

    required.extend(["location_city", "location_target"])
    return required


def missing_for_analysis(profile: ProfileRecord, system: SystemRecord) -> list[str]:
    return [name for name in required_for_analysis(profile, system) if _is_missing(getattr(system, name))]


def missing_for_offer(system: SystemRecord) -> list[str]:
    return ["chosen_recommendation"] if _is_missing(system.chosen_recommendation) else []


def missing_for_system(system: SystemRecord) -> list[str]:
    missing = missing_for_offer(system)
    offer = system.offer or {}
    missing.extend(f"offer.{name}" for name in REQUIRED_OFFER_FIELDS if _is_missing(offer.get(name)))
    return missing


def offer_is_complete(offer: dict[str, Any] | None) -> bool:
    """An offer counts as already generated once its story and guarantee exist."""
    return bool(offer) and not _is_missing(offer.get("transformation_from")) and not _is_missing(
        offer.get("guarantee_text")
    )


def ensure(missing: list[str], action: str) -> None:
    if missing:
        raise PreconditionError(f"Cannot {action} yet: missing {', '.join(missing)}", missing=missing)
