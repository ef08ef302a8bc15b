import pytest
from fakes import demo_config, transformation

from launchpath.ai.client import StructuredOutputError
from launchpath.ai.schemas import DemoConfig, OfferTransformation
from launchpath.errors import QualityGateError
from launchpath.workflows.generation import GenerationStep
from launchpath.workflows.quality import check_demo_config, check_transformation

BOTTLENECK = "missed calls from storm damage leads"


def _transformation_step(fake_ai, max_retries=2):
    return GenerationStep(
        "generate-transformation",
        fake_ai,
        "system prompt",
        OfferTransformation,
        validators=[lambda r: check_transformation(r, BOTTLENECK)],
        max_retries=max_retries,
    )


async def test_accepts_first_valid_result(fake_ai):
    fake_ai.queue_structured(OfferTransformation, transformation())
    result = await _transformation_step(fake_ai).run("context")
    assert result.transformation_to == "A full calendar of booked jobs every week"
    assert len(fake_ai.structured_calls) == 1


async def test_retries_with_violations_as_feedback(fake_ai):
    fake_ai.queue_structured(
        OfferTransformation,
        transformation(transformation_to="They will feel happier about their business"),
        transformation(),
    )
    result = await _transformation_step(fake_ai).run("context")

    assert result.transformation_to == "A full calendar of booked jobs every week"
    retry_messages = fake_ai.calls_for(OfferTransformation)[1]
    assert [m["role"] for m in retry_messages] == ["user", "assistant", "user"]
    assert "transformation_to lacks a measurable outcome" in retry_messages[2]["content"]
    assert retry_messages[2]["content"].endswith("Please fix these issues and regenerate.")


async def test_schema_failure_is_retried_from_context(fake_ai):
    fake_ai.queue_structured(
        OfferTransformation,
        StructuredOutputError("OfferTransformation", ["transformation_to: field required"]),
        transformation(),
    )
    await _transformation_step(fake_ai).run("context")

    retry_messages = fake_ai.calls_for(OfferTransformation)[1]
    assert len(retry_messages) == 1
    assert retry_messages[0]["content"].startswith("context\n\nQuality check failed:")


async def test_gives_up_after_max_retries(fake_ai):
    bad = transformation(transformation_from="Roofers have a hard time with the phones")
    fake_ai.queue_structured(OfferTransformation, bad, bad, bad, transformation())

    with pytest.raises(QualityGateError) as exc_info:
        await _transformation_step(fake_ai).run("context")

    assert exc_info.value.step_id == "generate-transformation"
    assert len(fake_ai.structured_calls) == 3


async def test_headline_misalignment_triggers_retry(fake_ai):
    outcome = "a full calendar of booked jobs every week"
    fake_ai.queue_structured(
        DemoConfig,
        demo_config(hero_headline="Grow your roofing business today"),
        demo_config(),
    )
    step = GenerationStep(
        "generate-demo-config",
        fake_ai,
        "system prompt",
        DemoConfig,
        validators=[lambda c: check_demo_config(c, outcome)],
    )
    result = await step.run("context")

    assert result.hero_headline == "Get a full calendar of booked roofing jobs"
    assert "Hero headline does not reflect" in fake_ai.calls_for(DemoConfig)[1][2]["content"]
