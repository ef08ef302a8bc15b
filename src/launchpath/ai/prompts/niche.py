"""Niche analysis prompt and per-user context."""

from __future__ import annotations

from launchpath.core.options import REVENUE_LABELS, SITUATION_LABELS, TIME_LABELS
from launchpath.storage.models import ProfileRecord, SystemRecord

NICHE_SYSTEM_PROMPT = """You are LaunchPath's niche analysis engine. You help people find the best AI-powered service business to start.

## Your Framework

You evaluate niches on 4 criteria, each worth up to 25 points (total 100):

### 1. ROI from Service (roi_from_service, 0-25)
Would the business owner see clear, measurable ROI from this service?
- 20-25: directly increases revenue or saves significant measurable time/money
- 15-19: clear benefit but harder to measure precisely
- 10-14: nice to have but not critical
- 0-9: unclear value proposition

### 2. Can Afford It (can_afford_it, 0-25)
Can the target segment realistically pay the recommended monthly price?
- 20-25: the monthly fee is under 2% of their revenue
- 15-19: affordable but needs budget consideration
- 10-14: significant expense relative to their size
- 0-9: a stretch for most in this segment

### 3. Can Guarantee Results (guarantee_results, 0-25)
Can specific outcomes be guaranteed within 30 days?
- 20-25: measurable output (leads, appointments, quotes) that automation reliably produces
- 15-19: results are likely but timing may vary
- 10-14: some results but hard to commit to specifics
- 0-9: too many external factors

### 4. Easy to Find (easy_to_find, 0-25)
How easy is it to find and contact these businesses?
- 20-25: visible on maps and directories, plentiful
- 15-19: findable with some research
- 10-14: requires effort (conferences, referrals, paid lists)
- 0-9: hard to identify or reach

The recommendation's score and segment_scores.total MUST equal the sum of the four sub-scores.

## Bottleneck Constraint

ONLY recommend niches whose primary bottleneck is solvable by a demo page plus an AI agent: lead qualification, lead generation, appointment booking, quote generation, client intake, FAQ automation or lead reactivation. If the real bottleneck is something else (brand awareness, supply chain, hiring, compliance), do NOT recommend it.

## Niche Knowledge Base

**Home Services:** roofing, window cleaning, HVAC, landscaping, plumbing, pest control, pool service, electrical, painting, flooring, fencing, garage doors, pressure washing, gutter cleaning, tree service
**Health & Wellness:** dental practices, physiotherapy, chiropractic, med spas, veterinary clinics, optometry, dermatology
**Professional Services:** real estate agents, law firms, accounting firms, financial advisors, mortgage brokers, recruitment agencies
**Automotive:** auto repair shops, detailing, tyre shops, body shops
**Food & Hospitality:** catering, event venues, bakeries

Deprioritise restaurants, insurance agents and car dealerships unless the user explicitly asks for them.

## Output Rules

1. why_for_you MUST reference the user's specific profile answers (time, goals, situation).
2. Score honestly. A realistic spread is 65-92.
3. strategic_insight should reveal something non-obvious about the niche.
4. Revenue estimates must be realistic for the segment size and location.
5. reasoning briefly explains why these were chosen over other options."""


def recommendation_count(profile: ProfileRecord) -> int:
    """Users who keep switching niches get one focused recommendation."""
    return 1 if "keep_switching" in profile.blockers else 3


def build_niche_context(profile: ProfileRecord, system: SystemRecord, count: int) -> str:
    lines = [
        "## User Profile",
        f"- Current situation: {SITUATION_LABELS.get(profile.current_situation or '', 'not specified')}",
        f"- Time availability: {TIME_LABELS.get(profile.time_availability or '', 'not specified')}",
        f"- Revenue goal: {REVENUE_LABELS.get(profile.revenue_goal or '', 'not specified')}",
        "",
        "## Start Business Answers",
        f"- Direction path: {system.direction_path or 'not specified'}",
    ]
    if system.industry_interests:
        lines.append(f"- Industry interests: {', '.join(system.industry_interests)}")
    if system.own_idea and not system.own_idea.startswith("__"):
        lines.append(f'- Their own idea: "{system.own_idea}"')
    if system.tried_niche:
        lines.append(f'- Previously tried niche: "{system.tried_niche}"')
    if system.what_went_wrong:
        lines.append(f"- What went wrong: {system.what_went_wrong}")
    if system.current_niche:
        lines.append(f'- Current niche: "{system.current_niche}"')
    if system.current_clients:
        lines.append(f"- Current clients: {system.current_clients}")
    if system.current_pricing:
        lines.append(f"- Current pricing: {system.current_pricing}")
    if system.growth_direction:
        lines.append(f"- Growth direction: {system.growth_direction}")
    if system.delivery_model:
        lines.append(f"- Delivery model: {system.delivery_model}")
    if system.pricing_direction:
        lines.append(f"- Pricing direction: {system.pricing_direction}")
    if system.location_city:
        lines.append(f"- Location: {system.location_city}")
    if system.location_target:
        lines.append(f"- Target area: {system.location_target}")

    lines.extend(["", "## Instructions", f"Return exactly {count} recommendation(s)."])

    went_wrong = system.what_went_wrong or "not specified"
    if system.direction_path == "stuck" and system.tried_niche:
        if system.growth_direction == "fix":
            lines.append(
                f'\nThe user previously attempted "{system.tried_niche}" and reported their biggest '
                f'challenge was "{went_wrong}". Do NOT treat this as a blank-slate analysis. Your first '
                f'recommendation MUST be a revised approach to "{system.tried_niche}" that addresses what '
                "went wrong. If the niche is genuinely unviable, say so directly, then offer alternatives."
            )
        elif system.growth_direction == "pivot":
            lines.append(
                f'\nThe user previously tried "{system.tried_niche}" and has decided to move on. Avoid '
                "niches or approaches that would trigger the same failure pattern "
                f'(they reported: "{went_wrong}").'
            )
    if system.direction_path == "has_clients" and system.current_niche and system.growth_direction != "new_niche":
        lines.append(
            f'\nThe user already serves "{system.current_niche}". Recommend how to grow within it '
            "before suggesting anything adjacent."
        )
    return "\n".join(lines)
