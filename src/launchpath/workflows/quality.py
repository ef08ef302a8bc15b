"""Quality gates applied to generated offer and demo output.

Each check returns a list of human-readable violations; an empty list means
the output is accepted. Violations are fed back to the model verbatim on
retry, so they are phrased as instructions.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel

from launchpath.ai.schemas import DemoConfig, GuaranteeOutput, OfferTransformation, PricingOutput

PII_PATTERNS = [
    re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b"),  # email
    re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b"),  # US phone
    re.compile(r"\b0\d{3,4}\s?\d{6,7}\b"),  # UK phone
    re.compile(r"\b\d{1,5}\s\w+\s(?:Street|St|Avenue|Ave|Road|Rd|Drive|Dr|Lane|Ln)\b", re.IGNORECASE),
]

GENERIC_FILLER = [
    "they have problems",
    "businesses struggle",
    "many companies",
    "various challenges",
    "improve their business",
    "better results",
    "lorem ipsum",
]

TECH_LANGUAGE = [
    "ai system",
    "machine learning",
    "algorithm",
    "neural network",
    "language model",
    "llm",
    "gpt",
    "claude",
    "artificial intelligence",
]

MEASURABLE_OUTCOME_PATTERN = re.compile(
    r"\d+|\bmore\b|\bless\b|\bfaster\b|\bfewer\b|\bno more\b|\bconsistent\b|\breliable\b"
    r"|\bautomatic\b|\bguaranteed\b|\bevery\b|\bdaily\b|\bweekly\b|\bmonthly\b",
    re.IGNORECASE,
)

MIN_FIELD_LENGTH = 20
TRANSFORMATION_FIELDS = ("transformation_from", "transformation_to", "system_description")

BASIC_FORM_FIELDS = frozenset({
    "business_name",
    "company_name",
    "name",
    "email",
    "phone",
    "contact_email",
    "contact_phone",
    "full_name",
})
MIN_FORM_FIELDS = 3
MAX_FORM_FIELDS = 5
MAX_HEADLINE_WORDS = 12

LOW_DISQUALIFIER_PATTERN = re.compile(
    r"LOW.*(?:outside|no budget|too small|disqualif|not a fit|avoid|small|minimal|low revenue)",
    re.IGNORECASE,
)

OUTCOME_STOPWORDS = frozenset({
    "their", "with", "that", "from", "this", "they", "have", "will", "your",
    "more", "been", "when", "what", "into", "than", "over", "some", "also",
    "the", "and", "for", "are", "you",
})
MIN_KEYWORD_LENGTH = 3
MAX_OUTCOME_KEYWORDS = 10

Validator = Callable[[Any], list[str]]


def format_feedback(violations: Iterable[str]) -> str:
    body = "\n".join(f"- {v}" for v in violations)
    return f"Quality check failed:\n{body}\n\nPlease fix these issues and regenerate."


def _string_fields(model: BaseModel) -> dict[str, str]:
    return {k: v for k, v in model.model_dump().items() if isinstance(v, str)}


def check_no_pii(output: BaseModel) -> list[str]:
    violations = []
    for name, value in _string_fields(output).items():
        if any(p.search(value) for p in PII_PATTERNS):
            violations.append(f"{name} contains potential personal information. Remove it.")
    return violations


def extract_bottleneck_keywords(bottleneck: str) -> list[str]:
    """Bigrams of the first six words, plus any of those words longer than four letters."""
    words = bottleneck.lower().split()[:6]
    keywords = [f"{a} {b}" for a, b in zip(words, words[1:])]
    keywords.extend(w for w in words if len(w) > 4)
    return keywords


def extract_outcome_keywords(text: str) -> list[str]:
    words = re.sub(r"[^a-z\s]", " ", text.lower()).split()
    keywords = [w for w in words if len(w) >= MIN_KEYWORD_LENGTH and w not in OUTCOME_STOPWORDS]
    return keywords[:MAX_OUTCOME_KEYWORDS]


def check_transformation(output: OfferTransformation, bottleneck: str | None = None) -> list[str]:
    violations: list[str] = []
    fields = _string_fields(output)

    for name in TRANSFORMATION_FIELDS:
        value = fields.get(name, "")
        if len(value) < MIN_FIELD_LENGTH:
            violations.append(
                f"{name} is too short ({len(value)} chars). Must be at least {MIN_FIELD_LENGTH} chars "
                "and specific to the niche."
            )

    violations.extend(check_no_pii(output))

    for name in TRANSFORMATION_FIELDS:
        lower = fields.get(name, "").lower()
        filler = next((f for f in GENERIC_FILLER if f in lower), None)
        if filler:
            violations.append(f'{name} contains generic filler ("{filler}"). Be specific to the niche and segment.')

    if bottleneck:
        keywords = extract_bottleneck_keywords(bottleneck)
        from_text = output.transformation_from.lower()
        if keywords and not any(kw in from_text for kw in keywords):
            violations.append(
                f'transformation_from does not reference the specific bottleneck ("{bottleneck}"). '
                "The 'before' state must describe the exact problem being solved."
            )

    if not MEASURABLE_OUTCOME_PATTERN.search(output.transformation_to):
        violations.append(
            "transformation_to lacks a measurable outcome. Include a number, a frequency or a clear "
            'change in state (e.g. "5 qualified leads per week", "no missed calls").'
        )

    description = output.system_description.lower()
    if any(term in description for term in TECH_LANGUAGE):
        violations.append(
            "system_description uses technology language. Describe what the system PRODUCES, "
            "not what it IS."
        )
    return violations


def check_guarantee(output: GuaranteeOutput) -> list[str]:
    violations = check_no_pii(output)
    if len(output.guarantee_text.strip()) < MIN_FIELD_LENGTH:
        violations.append(f"guarantee_text is too short. Must be at least {MIN_FIELD_LENGTH} chars.")
    return violations


def check_pricing(output: PricingOutput) -> list[str]:
    violations = check_no_pii(output)
    if output.pricing_setup == 0 and output.pricing_monthly == 0:
        violations.append("pricing_setup and pricing_monthly cannot both be zero.")
    return violations


def check_demo_config(config: DemoConfig, transformation_to: str | None = None) -> list[str]:
    violations: list[str] = []
    names = [f.name for f in config.form_fields]
    prompt = config.scoring_prompt

    unreferenced = [n for n in names if n not in prompt]
    if unreferenced:
        violations.append(
            f"Scoring prompt doesn't reference these form fields: {', '.join(unreferenced)}. "
            "Every field collected must be used in scoring."
        )

    has_tiers = all(re.search(tier, prompt, re.IGNORECASE) for tier in ("HIGH", "MEDIUM", "LOW"))
    if not has_tiers:
        violations.append("Scoring prompt must define criteria for HIGH, MEDIUM, and LOW priority leads.")
    if re.search("LOW", prompt, re.IGNORECASE) and not LOW_DISQUALIFIER_PATTERN.search(prompt):
        violations.append(
            "LOW priority definition must include at least one specific disqualifying signal "
            "(e.g. 'outside service area', 'no budget', 'too small')."
        )

    if not any(n not in BASIC_FORM_FIELDS for n in names):
        violations.append(
            "Form must include at least one qualifying field beyond name and contact info "
            "(e.g. revenue range, team size, current challenge)."
        )

    if len(names) > MAX_FORM_FIELDS:
        violations.append(
            f"Form has {len(names)} fields, too many for conversion. Reduce to {MAX_FORM_FIELDS} fields maximum."
        )
    if len(names) < MIN_FORM_FIELDS:
        violations.append(
            f"Form has only {len(names)} fields, not enough to qualify leads. Use at least {MIN_FORM_FIELDS}."
        )

    word_count = len(config.hero_headline.split())
    if word_count > MAX_HEADLINE_WORDS:
        violations.append(
            f"Hero headline is too long ({word_count} words). Keep it to {MAX_HEADLINE_WORDS} words or fewer."
        )

    if transformation_to:
        keywords = extract_outcome_keywords(transformation_to)
        headline = config.hero_headline.lower()
        if keywords and not any(kw in headline for kw in keywords):
            violations.append(
                "Hero headline does not reflect the offer's transformation. It must derive from: "
                f'"{transformation_to[:120]}". Use outcome words from that text.'
            )
    return violations
