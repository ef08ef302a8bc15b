"""Option catalogs for the named input-request cards and the profile label maps."""

from __future__ import annotations

from typing import Any

Option = dict[str, str]


def _opt(value: str, label: str, description: str | None = None) -> Option:
    option = {"value": value, "label": label}
    if description:
        option["description"] = description
    return option


INTENT_OPTIONS: list[Option] = [
    _opt("first_client", "Land my first paying client"),
    _opt("side_income", "Build a reliable side income"),
    _opt("replace_income", "Replace my full-time income"),
    _opt("scale_existing", "Scale what I already have"),
]

INDUSTRY_OPTIONS: list[Option] = [
    _opt("home_services", "Home services", "Roofing, cleaning, plumbing, HVAC, landscaping, pest control, pool"),
    _opt("health_wellness", "Health & wellness", "Dental, physio, chiropractic, med spa"),
    _opt("professional_services", "Professional services", "Real estate, legal, accounting, insurance"),
    _opt("automotive", "Automotive", "Repair shops, detailing, dealerships"),
    _opt("food_hospitality", "Food & hospitality", "Restaurants, catering, cafes, events"),
    _opt("no_preference", "I genuinely have no preference", "Surprise me"),
]

OWN_IDEA_OPTIONS: list[Option] = [
    _opt("__find_for_me__", "Find me the best opportunity", "I'll analyse your profile and surface the strongest match"),
    _opt("__has_idea__", "I have an idea", "Tell me what you're thinking and I'll evaluate it"),
]

WHAT_WENT_WRONG_OPTIONS: list[Option] = [
    _opt("cant_find_prospects", "Couldn't find anyone to sell to"),
    _opt("cant_close", "Had no clear offer or pricing"),
    _opt("cant_deliver", "Didn't know how to build the tech"),
    _opt("overwhelmed", "Got overwhelmed and stopped"),
]

GROWTH_DIRECTION_OPTIONS: list[Option] = [
    _opt("more_clients", "Get more clients in my current niche"),
    _opt("raise_prices", "Charge more for what I already do"),
    _opt("productise", "Turn my service into a repeatable system"),
    _opt("new_niche", "Expand into a new niche"),
]

DELIVERY_MODEL_SIMPLE_OPTIONS: list[Option] = [
    _opt("build_once", "Build it once and let it run", "Set up the system, hand it over, minimal upkeep"),
    _opt("light_touch", "Build it, then check in monthly", "A short monthly review keeps results on track"),
]

DELIVERY_MODEL_FULL_OPTIONS: list[Option] = [
    _opt("build_once", "Build once, hand over", "One-off setup with the system running on its own"),
    _opt("done_for_you", "Done for you, ongoing", "You run and optimise the system every month"),
    _opt("hybrid", "Hybrid", "Build it, then offer optional monthly optimisation"),
    _opt("self_serve", "Self-serve", "Clients configure a template you maintain"),
]

PRICING_STANDARD_OPTIONS: list[Option] = [
    _opt("fewer_high_ticket", "Fewer clients paying more"),
    _opt("more_mid_ticket", "More clients at a mid price"),
]

PRICING_EXPANDED_OPTIONS: list[Option] = [
    _opt("fewer_high_ticket", "Fewer clients paying more"),
    _opt("monthly_retainer", "Monthly retainer (£1,000-3,000 per client)"),
    _opt("base_plus_percentage", "Lower base fee plus a share of growth"),
    _opt("volume_play", "Volume play: many clients at £300-500/month"),
]

LOCATION_TARGET_OPTIONS: list[Option] = [
    _opt("local", "My local area", "Within 50 miles"),
    _opt("national", "Anywhere in my country", "Nationwide"),
    _opt("international", "International / English-speaking countries", "Global reach"),
    _opt("anywhere", "Doesn't matter", "Open to any location"),
]


TIME_LABELS = {
    "under_5": "under 5 hours per week",
    "5_to_15": "5 to 15 hours per week",
    "15_to_30": "15 to 30 hours per week",
    "30_plus": "30+ hours per week (near full-time)",
}

REVENUE_LABELS = {
    "500_1k": "£500–1,000/month",
    "1k_3k": "£1,000–3,000/month",
    "3k_5k": "£3,000–5,000/month",
    "5k_10k_plus": "£5,000–10,000+/month",
}

SITUATION_LABELS = {
    "complete_beginner": "a complete beginner",
    "consumed_content": "someone who's studied this but not started",
    "tried_no_clients": "someone who tried but couldn't get clients",
    "has_clients": "someone with existing clients looking to scale",
}

OUTREACH_LABELS = {
    "never_done": "has never done outreach before",
    "nervous_willing": "is nervous but willing to try",
    "fairly_comfortable": "is fairly comfortable with sales",
    "love_sales": "loves sales and outreach",
}

BLOCKER_LABELS = {
    "no_offer": "doesn't have a clear offer",
    "cant_find_clients": "struggles to find prospects",
    "scared_delivery": "worried about delivering results",
    "cant_build": "doesn't know how to build the tech",
    "overwhelmed": "feels overwhelmed",
    "keep_switching": "keeps switching niches",
}


def label_for(labels: dict[str, str], value: Any) -> str:
    if value is None or value == "":
        return "unknown"
    return labels.get(str(value), str(value))
