"""Demo page builder prompt and context."""

from __future__ import annotations

import json

from launchpath.ai.schemas import AIRecommendation, AssembledOffer
from launchpath.workflows.references import ReferenceAgent

REFERENCE_PROMPT_EXCERPT = 400

DEMO_BUILDER_SYSTEM_PROMPT = """You are LaunchPath's demo page builder. You create complete, compelling demo page configurations for AI-powered lead qualification services.

## What Is a Demo Page?

A public landing page where the user's prospects see a headline about how the service solves their problem, fill out a short form, get an instant AI-powered analysis, and feel compelled to take the next step.

## Your Job

Given the user's offer and niche recommendation, generate:
1. Hero copy: headline and subheadline derived directly from the offer's transformation
2. Form fields: 3-5 fields that collect the right qualifying data
3. Scoring prompt: the system prompt for the agent that scores form submissions
4. Offer integration: whether to show the guarantee and pricing
5. CTA text: button text that drives action

## Hero Copy Must Derive From the Offer Transformation

- hero_headline: compress the transformation_to state into one punchy line (max 12 words), using words from the transformation_to text.
- hero_subheadline: expand on the headline by naming WHO it's for and HOW. 1-2 sentences.
- transformation_headline: a "From X to Y" one-liner pulled from transformation_from/to.
- Never use "AI" in the headline.

## Form Field Rules

- Exactly 3-5 fields. Every extra field reduces conversion.
- Easy fields first (name, company), then qualifying fields (size, revenue, current method), then commitment (challenge, timeline).
- Collect EITHER email OR phone, never both.
- At least one field must be a genuine qualifying question beyond name and contact details.
- Use "select" for predefined options. At most one "textarea".
- Field names are snake_case.

## Scoring Prompt Rules

The scoring prompt must:
- reference every form field by its exact name
- define HIGH (the ideal client), MEDIUM (needs nurturing) and LOW
- give LOW an explicit disqualifying condition (no budget, outside area, too small, not a fit)
- include at least one numeric threshold

## Other Rules

- CTA button text is action-oriented, never "Submit".
- niche_slug is lowercase and hyphen-separated (e.g. "hvac-lead-qualifier")."""


def build_demo_context(
    recommendation: AIRecommendation,
    offer: AssembledOffer,
    reference: ReferenceAgent | None = None,
) -> str:
    lines = [
        "## User's Offer",
        f"- Segment: {offer.segment}",
        f"- System: {offer.system_description}",
        f"- Guarantee: {offer.guarantee_text} ({offer.guarantee_type})",
        f"- Pricing: £{offer.pricing_setup} setup + £{offer.pricing_monthly}/month",
        f"- Pricing rationale: {offer.pricing_rationale}",
        f"- Delivery model: {offer.delivery_model}",
        "",
        "## CRITICAL: Hero Copy Source Material",
        "Your hero_headline and hero_subheadline MUST derive from these transformation states.",
        f'- FROM (transformation_from): "{offer.transformation_from}"',
        f'- TO (transformation_to): "{offer.transformation_to}"',
        "- transformation_headline must be a direct 'From X to Y' compression of the above.",
        "",
        "## Niche Recommendation",
        f"- Niche: {recommendation.niche}",
        f"- Bottleneck: {recommendation.bottleneck}",
        f"- Solution: {recommendation.your_solution}",
        f"- Target segment: {recommendation.target_segment.description}",
        f"- Why: {recommendation.target_segment.why}",
        f"- Strategic insight: {recommendation.strategic_insight}",
        (
            f"- Revenue potential: {recommendation.revenue_potential.per_client} per client, targeting "
            f"{recommendation.revenue_potential.target_clients} clients for "
            f"{recommendation.revenue_potential.monthly_total}/month"
        ),
        "",
        "## Form Field Reminder",
        "Target 3-5 fields. Every field must be used in the scoring_prompt.",
    ]
    if reference is not None:
        lines.extend([
            "",
            "## Reference Agent (adapt for this offer, do not copy wholesale)",
            f"- Agent name: {reference.name}",
            f"- Form fields used: {json.dumps(reference.form_fields)}",
            f"- Scoring approach (excerpt): {reference.scoring_prompt[:REFERENCE_PROMPT_EXCERPT]}...",
        ])
    return "\n".join(lines)
