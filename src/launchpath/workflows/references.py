"""Pre-built niche agents used as style references for demo generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ReferenceAgent:
    slug: str
    niche: str
    name: str
    form_fields: list[dict[str, Any]]
    scoring_prompt: str


def _field(name: str, label: str, type: str = "text", options: list[str] | None = None, required: bool = True) -> dict[str, Any]:
    field: dict[str, Any] = {"name": name, "label": label, "type": type, "required": required}
    if options:
        field["options"] = options
    return field


def _scoring(role: str, signals: list[str], high: str, medium: str, low: str) -> str:
    body = "\n".join(f"- {s}" for s in signals)
    return (
        f"You are a {role}. Analyse each enquiry and decide lead quality, estimated value and priority.\n\n"
        f"## How to Score\n{body}\n\n"
        f"## Priority Rules\n- HIGH (80-100): {high}\n- MEDIUM (50-79): {medium}\n- LOW (0-49): {low}"
    )


REFERENCE_AGENTS: dict[str, ReferenceAgent] = {
    agent.slug: agent
    for agent in [
        ReferenceAgent(
            "roofing",
            "Roofing",
            "Roofing Lead Qualifier",
            [
                _field("name", "Your name"),
                _field("location", "Job location"),
                _field("job_type", "Type of work needed", "select", ["Re-roof", "Repair", "Inspection", "New build"]),
                _field("roof_size_sqft", "Approximate roof size (sq ft)", "number"),
                _field("timeline", "When do you need this done?", "select", ["ASAP / active leak", "This month", "Next 1-3 months", "Just getting quotes"]),
            ],
            _scoring(
                "roofing lead qualification agent",
                ["job_type: re-roofs are worth £8,000+, repairs under £5,000", "roof_size_sqft: larger roofs mean higher value", "timeline: an active leak is urgent", "location: inside the service area is a bonus"],
                "large job, urgent timeline, inside the service area",
                "decent job size or moderate urgency",
                "small repair with no urgency, or the location is outside the service area",
            ),
        ),
        ReferenceAgent(
            "window_cleaning",
            "Window Cleaning",
            "Window Cleaning Appointment Setter",
            [
                _field("name", "Your name"),
                _field("property_type", "Property type", "select", ["Residential", "Commercial"]),
                _field("window_count", "Roughly how many windows?", "number"),
                _field("frequency", "How often?", "select", ["One-off", "Monthly", "Weekly"]),
                _field("email", "Email", "email"),
            ],
            _scoring(
                "window cleaning appointment qualification agent",
                ["property_type: commercial work is worth more", "window_count: more windows mean a bigger job", "frequency: recurring work has the highest lifetime value"],
                "commercial or 30+ windows on a recurring schedule",
                "residential one-off clean of a typical home",
                "fewer than 10 windows with no budget, or outside the service area",
            ),
        ),
        ReferenceAgent(
            "hvac",
            "HVAC",
            "HVAC Service Qualifier",
            [
                _field("name", "Your name"),
                _field("system_age", "How old is your system?", "select", ["Under 5 years", "5-15 years", "15+ years"]),
                _field("issue_type", "What's the issue?", "select", ["No heat / no cooling", "Strange noise", "Service", "Replacement quote"]),
                _field("urgency", "How urgent is this?", "select", ["Emergency", "This week", "Flexible"]),
                _field("location", "Location"),
            ],
            _scoring(
                "HVAC service qualification agent",
                ["system_age: 15+ years suggests a replacement worth £4,000+", "issue_type: no heat or cooling is urgent", "urgency and location decide dispatch priority"],
                "emergency or replacement quote on an old system inside the area",
                "non-urgent repair or routine service",
                "outside the service area, or price shopping with no budget for repair",
            ),
        ),
        ReferenceAgent(
            "landscaping",
            "Landscaping",
            "Landscaping Quote Generator",
            [
                _field("name", "Your name"),
                _field("yard_size_sqft", "Yard size (sq ft)", "number"),
                _field("service_type", "What do you need?", "select", ["Lawn care", "Full redesign", "Hard landscaping", "Maintenance"]),
                _field("frequency", "How often?", "select", ["One-off", "Monthly", "Weekly"]),
                _field("location", "Location"),
            ],
            _scoring(
                "landscaping quote agent",
                ["yard_size_sqft: above 5,000 sq ft is a large job", "service_type: redesigns and hard landscaping are worth the most", "frequency: recurring maintenance adds lifetime value"],
                "large yard with a redesign or recurring contract",
                "standard lawn care or a one-off tidy",
                "very small yard with minimal budget, or outside the service area",
            ),
        ),
        ReferenceAgent(
            "plumbing",
            "Plumbing",
            "Plumbing Emergency Prioritizer",
            [
                _field("name", "Your name"),
                _field("issue_type", "What's the issue?", "select", ["Burst pipe", "Leak", "Blocked drain", "Boiler", "Installation"]),
                _field("severity", "How severe?", "select", ["Flooding now", "Getting worse", "Minor"]),
                _field("property_type", "Property type", "select", ["Residential", "Commercial"]),
                _field("phone", "Phone number", "tel"),
            ],
            _scoring(
                "plumbing emergency prioritisation agent",
                ["issue_type: burst pipes and boilers are urgent", "severity: active flooding is top priority", "property_type: commercial call-outs are worth more"],
                "active flooding or a burst pipe",
                "worsening leak or boiler issue",
                "minor drip with no urgency, or outside the service area",
            ),
        ),
        ReferenceAgent(
            "pest_control",
            "Pest Control",
            "Pest Control Service Qualifier",
            [
                _field("name", "Your name"),
                _field("pest_type", "What type of pest?", "select", ["Rodents", "Insects", "Wasps", "Termites", "Other"]),
                _field("infestation_level", "How bad is it?", "select", ["Severe", "Moderate", "Just spotted one"]),
                _field("property_type", "Property type", "select", ["Home", "Business"]),
                _field("location", "Location"),
            ],
            _scoring(
                "pest control qualification agent",
                ["pest_type: termites and rodents need multi-visit treatment", "infestation_level: severe cases convert fastest", "property_type: businesses need contracts"],
                "severe infestation or a business needing a contract",
                "moderate residential problem",
                "a single sighting with no budget, or outside the service area",
            ),
        ),
        ReferenceAgent(
            "dental",
            "Dental",
            "Dental Appointment Qualifier",
            [
                _field("name", "Your name"),
                _field("treatment_type", "What do you need?", "select", ["Check-up", "Emergency", "Cosmetic", "Implants", "Orthodontics"]),
                _field("urgency", "How urgent is your need?", "select", ["In pain now", "This month", "Planning ahead"]),
                _field("patient_type", "New or existing patient?", "select", ["New", "Existing"]),
                _field("phone", "Phone number", "tel"),
            ],
            _scoring(
                "dental appointment qualification agent",
                ["treatment_type: implants and cosmetic work are worth £2,000+", "urgency: patients in pain book immediately", "patient_type: new patients carry lifetime value"],
                "new patient wanting high-value treatment or in pain now",
                "routine check-up or planning ahead",
                "price shopping only, or not a fit for the practice's services",
            ),
        ),
        ReferenceAgent(
            "real_estate",
            "Real Estate",
            "Real Estate Showing Scheduler",
            [
                _field("name", "Your name"),
                _field("budget_range", "Budget range", "select", ["Under £200k", "£200k-400k", "£400k-750k", "£750k+"]),
                _field("timeline", "When are you looking to buy?", "select", ["Within 30 days", "1-3 months", "6+ months"]),
                _field("pre_approved", "Are you pre-approved for a mortgage?", "select", ["Yes", "In progress", "No"]),
                _field("preferred_location", "Preferred area"),
            ],
            _scoring(
                "real estate showing qualification agent",
                ["pre_approved: approval means ready to act", "timeline: within 30 days is hot", "budget_range must match the preferred_location market"],
                "pre-approved, buying within 30 days, budget aligns with the market",
                "interested but 1-3 months out or not yet pre-approved",
                "just browsing, 6+ months out, or an unrealistic budget for the area",
            ),
        ),
        ReferenceAgent(
            "auto_repair",
            "Auto Repair",
            "Auto Repair Quote Estimator",
            [
                _field("name", "Your name"),
                _field("vehicle_make_model", "Make and model"),
                _field("mileage", "Current mileage", "number"),
                _field("issue_description", "What's the issue?", "select", ["Brakes", "Engine", "Transmission", "Service", "MOT"]),
                _field("phone", "Phone number", "tel"),
            ],
            _scoring(
                "auto repair quote agent",
                ["issue_description: engine and transmission work is worth £1,000+", "mileage above 80,000 suggests more work", "vehicle_make_model sets parts cost"],
                "major repair on a vehicle worth fixing",
                "routine service or minor repair",
                "vehicle not worth repairing or no budget, outside what the shop services",
            ),
        ),
        ReferenceAgent(
            "pool_service",
            "Pool Service",
            "Pool Service Route Planner",
            [
                _field("name", "Your name"),
                _field("pool_size", "Pool size", "select", ["Small", "Medium", "Large"]),
                _field("condition", "Current pool condition", "select", ["Green", "Cloudy", "Clear"]),
                _field("service_frequency", "What service do you need?", "select", ["Weekly", "Fortnightly", "One-off clean"]),
                _field("location", "Location"),
            ],
            _scoring(
                "pool service route planning agent",
                ["service_frequency: weekly contracts are the most valuable", "condition: green pools need a recovery visit first", "location: on an existing route is a bonus"],
                "weekly contract on or near an existing route",
                "fortnightly service or one-off recovery clean",
                "one-off small job outside the route area, or no budget",
            ),
        ),
    ]
}

KEYWORD_MAP: dict[str, list[str]] = {
    "roofing": ["roof", "roofing"],
    "window_cleaning": ["window", "glass cleaning"],
    "hvac": ["hvac", "heating", "air conditioning", "furnace"],
    "landscaping": ["landscap", "lawn", "garden", "yard"],
    "plumbing": ["plumb", "pipe", "drain", "leak"],
    "pest_control": ["pest", "exterminator", "termite", "rodent", "bug"],
    "dental": ["dental", "dentist", "teeth", "oral"],
    "real_estate": ["real estate", "property", "realtor", "housing"],
    "auto_repair": ["auto repair", "car repair", "mechanic", "vehicle"],
    "pool_service": ["pool", "swimming"],
}


def find_reference(niche: str) -> ReferenceAgent | None:
    """Map a free-text niche name to a reference agent by keyword."""
    lower = niche.lower()
    for slug, keywords in KEYWORD_MAP.items():
        if any(kw in lower for kw in keywords):
            return REFERENCE_AGENTS.get(slug)
    return None
