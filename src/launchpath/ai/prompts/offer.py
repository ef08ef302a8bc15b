"""Prompts and context builders for the three offer generators.

All three context strings are rendered from one frozen ``OfferBrief`` so the
transformation, guarantee and pricing calls stay consistent while running in
parallel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from launchpath.ai.schemas import AIRecommendation
from launchpath.core.options import REVENUE_LABELS, TIME_LABELS
from launchpath.storage.models import ProfileRecord, SystemRecord

NOT_SPECIFIED = "not specified"


@dataclass(frozen=True)
class OfferBrief:
    niche: str
    segment: str
    segment_why: str
    bottleneck: str
    solution: str
    strategic_insight: str
    revenue_per_client: str
    target_clients: int
    monthly_total: str
    revenue_goal: Optional[str] = None
    time_availability: Optional[str] = None
    blockers: tuple[str, ...] = field(default_factory=tuple)
    delivery_model: Optional[str] = None
    pricing_direction: Optional[str] = None
    location_city: Optional[str] = None

    @classmethod
    def build(cls, recommendation: AIRecommendation, profile: ProfileRecord, system: SystemRecord) -> OfferBrief:
        return cls(
            niche=recommendation.niche,
            segment=recommendation.target_segment.description,
            segment_why=recommendation.target_segment.why,
            bottleneck=recommendation.bottleneck,
            solution=recommendation.your_solution,
            strategic_insight=recommendation.strategic_insight,
            revenue_per_client=recommendation.revenue_potential.per_client,
            target_clients=recommendation.revenue_potential.target_clients,
            monthly_total=recommendation.revenue_potential.monthly_total,
            revenue_goal=profile.revenue_goal,
            time_availability=profile.time_availability,
            blockers=tuple(profile.blockers),
            delivery_model=system.delivery_model,
            pricing_direction=system.pricing_direction,
            location_city=system.location_city,
        )


def _or_unset(value: Optional[str], labels: dict[str, str] | None = None) -> str:
    if not value:
        return NOT_SPECIFIED
    return labels.get(value, value) if labels else value


TRANSFORMATION_SYSTEM_PROMPT = """You are LaunchPath's offer builder. You take a chosen niche recommendation and craft polished, compelling offer copy that helps someone sell an AI-powered service to businesses.

## Your Job

Given a chosen niche recommendation and the user's profile, generate:

1. **transformation_from**: a vivid 1-2 sentence description of the prospect's current pain (the "before" state). Write from the prospect's perspective and name the specific bottleneck.
2. **transformation_to**: a vivid 1-2 sentence description of the desired outcome (the "after" state). Include at least one measurable signal: a number, a frequency, or a concrete change.
3. **system_description**: one polished sentence describing what the prospect gets. Describe the outcome, not the technology.

## Output Rules

1. The transformation should feel like a before/after story, not a feature list.
2. Never mention "AI system", "algorithm", "machine learning" or other implementation terms.
3. Avoid filler like "leverage", "synergy", "cutting-edge" or "game-changer".
4. Never include email addresses, phone numbers or street addresses.
5. Keep language professional but approachable. No hype."""


GUARANTEE_SYSTEM_PROMPT = """You are LaunchPath's guarantee specialist. You craft specific, compelling guarantees for AI-powered services that are realistic and achievable.

## Your Job

Given a chosen niche and user profile, generate a guarantee that:
1. References the specific bottleneck being solved
2. Aligns with a build-once delivery model (the system is deployed once and runs autonomously)
3. Is achievable by an automated system, not manual labour
4. Makes the prospect feel safe saying yes

## Guarantee Types

- **time_bound**: "X result within Y days or Z". Use when the deliverable has a clear timeline.
- **outcome_based**: "We guarantee X outcome". Use when the automated outputs are reliably measurable.
- **risk_reversal**: "Try it risk-free: X". Use when the niche is sceptical about new technology. Good default for first-time sellers.

## Quality Rules

1. The guarantee must be specific to the niche. No generic "satisfaction guaranteed" language.
2. confidence_notes explains in 1-2 sentences why this guarantee is realistic.
3. Keep language professional and direct. No hype."""


PRICING_SYSTEM_PROMPT = """You are LaunchPath's pricing strategist. You determine optimal pricing for AI-powered services sold to local businesses.

## Your Job

Given a niche, delivery model, revenue goal and target segment, calculate:
1. **pricing_setup**: one-time fee to build and deploy the system
2. **pricing_monthly**: recurring fee for the ongoing service
3. **rationale**: why this pricing makes sense (2-3 sentences)
4. **comparable_services**: 2-3 real-world services in this niche at similar price points
5. **revenue_projection**: how many clients the user needs at this price to hit their revenue goal

## Pricing Principles

- Price on value delivered, not effort required.
- Setup fee range: £200-3,000 depending on complexity. Monthly fee range: £200-3,000.
- The target segment must be able to afford it.
- Pricing must make the user's revenue goal achievable, with correct maths.
- Higher-revenue niches (dental, real estate) can afford more than lower-revenue niches (window cleaning, pest control).

Always price in GBP (£) as whole numbers."""


def build_transformation_context(brief: OfferBrief) -> str:
    lines = [
        "## Chosen Niche",
        f"- Niche: {brief.niche}",
        f"- Target segment: {brief.segment}",
        f"- Why this segment: {brief.segment_why}",
        f"- Bottleneck: {brief.bottleneck}",
        f"- Solution: {brief.solution}",
        f"- Strategic insight: {brief.strategic_insight}",
        "",
        "## User Context",
        f"- Revenue goal: {_or_unset(brief.revenue_goal, REVENUE_LABELS)}",
        f"- Time: {_or_unset(brief.time_availability, TIME_LABELS)}",
        f"- Delivery model: {_or_unset(brief.delivery_model)}",
        f"- Location: {_or_unset(brief.location_city)}",
    ]
    if "scared_delivery" in brief.blockers:
        lines.append(
            "\nIMPORTANT: Frame the outcome so the SYSTEM delivers, not the person. "
            "The user is worried about delivering results manually."
        )
    if "cant_find_clients" in brief.blockers:
        lines.append(
            "\nIMPORTANT: Emphasise lead generation outcomes (qualified leads, booked appointments) "
            "since this user struggles to find clients."
        )
    return "\n".join(lines)


def build_guarantee_context(brief: OfferBrief) -> str:
    lines = [
        "## Niche Context",
        f"- Niche: {brief.niche}",
        f"- Target segment: {brief.segment}",
        f"- Bottleneck being solved: {brief.bottleneck}",
        f"- AI solution: {brief.solution}",
        f"- Strategic insight: {brief.strategic_insight}",
        f"- Client revenue potential: {brief.revenue_per_client} per client",
        "",
        "## Delivery Context",
        "- Delivery model: build_once (the system is deployed once and runs autonomously)",
        f"- User time availability: {_or_unset(brief.time_availability, TIME_LABELS)}",
        f"- Revenue goal: {_or_unset(brief.revenue_goal, REVENUE_LABELS)}",
        "",
        "## Alignment",
        "Pricing is being set in parallel and reflects value delivered, not effort. "
        "The guarantee must be achievable at a premium price point and justify the investment.",
    ]
    if "scared_delivery" in brief.blockers:
        lines.append("Emphasise that the system delivers the result, not the user's manual effort.")
    return "\n".join(lines)


_PRICING_DIRECTION_NOTES = {
    "fewer_high_ticket": "User prefers FEWER clients paying MORE. Price towards the higher end of the range.",
    "more_mid_ticket": "User prefers MORE clients paying LESS. Price towards the lower-mid range to maximise client count.",
    "monthly_retainer": "User wants a monthly retainer model (£1,000-3,000/month per client).",
    "base_plus_percentage": (
        "User wants a lower base fee plus a percentage of growth. Set a moderate monthly base "
        "and note that a revenue share component can be added."
    ),
    "volume_play": "User wants a volume play: many clients at £300-500/month. Price at the lower end.",
}


def build_pricing_context(brief: OfferBrief) -> str:
    lines = [
        "## Niche & Segment",
        f"- Niche: {brief.niche}",
        f"- Target segment: {brief.segment}",
        f"- Why this segment: {brief.segment_why}",
        f"- Bottleneck: {brief.bottleneck}",
        f"- AI solution: {brief.solution}",
        f"- Strategic insight: {brief.strategic_insight}",
        "",
        "## Revenue Context",
        f"- Estimated per-client revenue: {brief.revenue_per_client}",
        f"- Estimated target clients: {brief.target_clients}",
        f"- Estimated monthly total: {brief.monthly_total}",
        "",
        "## User Preferences",
        f"- Revenue goal: {_or_unset(brief.revenue_goal, REVENUE_LABELS)}",
        f"- Time availability: {_or_unset(brief.time_availability, TIME_LABELS)}",
        f"- Delivery model: {_or_unset(brief.delivery_model)}",
        f"- Pricing direction: {_or_unset(brief.pricing_direction)}",
        "",
        "## Alignment",
        "The transformation being written in parallel describes a before/after story. "
        "Price the OUTCOME, not the tool.",
    ]
    if "scared_delivery" in brief.blockers:
        lines.append(
            "The user is worried about delivery. Do not set prices so high that they feel pressure "
            "to over-deliver manually."
        )
    if "cant_find_clients" in brief.blockers:
        lines.append(
            "The user struggles to find clients. Price at a level that allows a trial or pilot "
            "for their first client without financial risk to the prospect."
        )
    note = _PRICING_DIRECTION_NOTES.get(brief.pricing_direction or "")
    if note:
        lines.append(f"\n{note}")
    return "\n".join(lines)
