from fakes import demo_config, guarantee, pricing, transformation

from launchpath.ai.schemas import DemoConfig, GuaranteeOutput, OfferTransformation, PricingOutput
from launchpath.workflows.quality import (
    check_demo_config,
    check_guarantee,
    check_pricing,
    check_transformation,
    extract_bottleneck_keywords,
    extract_outcome_keywords,
    format_feedback,
)

BOTTLENECK = "missed calls from storm damage leads"
OUTCOME = "a full calendar of booked jobs every week"


def _demo(**overrides):
    return DemoConfig.model_validate(demo_config(**overrides))


def test_outcome_keywords_drop_short_words_and_stopwords():
    assert extract_outcome_keywords(OUTCOME) == ["full", "calendar", "booked", "jobs", "every", "week"]
    assert extract_outcome_keywords("Their clients will have more jobs") == ["clients", "jobs"]


def test_bottleneck_keywords():
    keywords = extract_bottleneck_keywords("Missed calls from storm damage leads at night")
    assert "missed calls" in keywords
    assert "damage leads" in keywords
    assert "storm" in keywords
    # only the first six words count
    assert "night" not in keywords


def test_valid_transformation_passes():
    output = OfferTransformation.model_validate(transformation())
    assert check_transformation(output, BOTTLENECK) == []


def test_transformation_violations():
    output = OfferTransformation.model_validate(
        transformation(
            transformation_from="Many companies have issues",
            transformation_to="They will be happier with their situation",
            system_description="An AI system that uses machine learning to help",
        )
    )
    violations = check_transformation(output, BOTTLENECK)
    text = "\n".join(violations)
    assert "transformation_from does not reference the specific bottleneck" in text
    assert "transformation_to lacks a measurable outcome" in text
    assert "system_description uses technology language" in text
    assert "generic filler" in text


def test_pii_is_rejected():
    output = GuaranteeOutput.model_validate(guarantee(guarantee_text="Call me on 555-123-4567 for your refund guarantee"))
    assert any("personal information" in v for v in check_guarantee(output))


def test_zero_pricing_is_rejected():
    output = PricingOutput.model_validate(pricing(pricing_setup=0, pricing_monthly=0))
    assert check_pricing(output) == ["pricing_setup and pricing_monthly cannot both be zero."]


def test_valid_demo_config_passes():
    assert check_demo_config(_demo(), OUTCOME) == []


def test_headline_must_echo_transformation():
    violations = check_demo_config(_demo(hero_headline="Grow your roofing business today"), OUTCOME)
    assert len(violations) == 1
    assert violations[0].startswith("Hero headline does not reflect the offer's transformation")


def test_headline_word_limit():
    headline = "Get a full calendar of booked jobs and never again lose a single storm lead"
    violations = check_demo_config(_demo(hero_headline=headline), OUTCOME)
    assert any("too long" in v for v in violations)


def test_form_field_count_bounds():
    two_fields = demo_config()["form_fields"][:2]
    violations = check_demo_config(_demo(form_fields=two_fields), OUTCOME)
    assert any("at least 3" in v for v in violations)

    six_fields = [{"name": f"q{i}", "label": f"Q{i}"} for i in range(6)]
    prompt = " ".join(f["name"] for f in six_fields) + " HIGH MEDIUM LOW: no budget"
    violations = check_demo_config(_demo(form_fields=six_fields, scoring_prompt=prompt), OUTCOME)
    assert any("too many" in v for v in violations)


def test_scoring_prompt_rules():
    violations = check_demo_config(
        _demo(scoring_prompt="Use business_name and email. HIGH: lots of calls. MEDIUM: some. LOW: low score."),
        OUTCOME,
    )
    text = "\n".join(violations)
    assert "monthly_calls" in text
    assert "disqualifying signal" in text


def test_form_needs_a_qualifying_field():
    fields = [{"name": "name", "label": "Name"}, {"name": "email", "label": "Email"}, {"name": "phone", "label": "Phone"}]
    prompt = "name email phone HIGH MEDIUM LOW: outside area"
    violations = check_demo_config(_demo(form_fields=fields, scoring_prompt=prompt), OUTCOME)
    assert any("qualifying field" in v for v in violations)


def test_feedback_is_an_instruction():
    feedback = format_feedback(["a is wrong", "b is wrong"])
    assert feedback.startswith("Quality check failed:\n- a is wrong\n- b is wrong")
    assert feedback.endswith("Please fix these issues and regenerate.")
