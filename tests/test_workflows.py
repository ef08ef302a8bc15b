import pytest
from fakes import demo_config, guarantee, offer, pricing, recommendation, transformation

from launchpath.ai.schemas import (
    DemoConfig,
    GuaranteeOutput,
    NicheAnalysisOutput,
    OfferTransformation,
    PricingOutput,
)
from launchpath.core.types import StepStatus
from launchpath.errors import GenerationError, WorkflowError
from launchpath.storage.models import ProfileRecord, SystemRecord
from launchpath.workflows.demo import DemoWorkflow, normalize_slug
from launchpath.workflows.niche import NicheAnalyzer
from launchpath.workflows.offer import NO_NICHE, WORKFLOW_FAILED, OfferWorkflow
from launchpath.workflows.pregenerate import OfferPregenerator


def _queue_offer(fake_ai):
    fake_ai.queue_structured(OfferTransformation, transformation())
    fake_ai.queue_structured(GuaranteeOutput, guarantee())
    fake_ai.queue_structured(PricingOutput, pricing())


def _profile(**fields):
    return ProfileRecord(id="p1", **fields)


def _system(**fields):
    return SystemRecord(id="s1", profile_id="p1", **fields)


# -- offer -------------------------------------------------------------------


async def test_offer_workflow_assembles_all_three_parts(fake_ai):
    _queue_offer(fake_ai)
    progress = []

    result = await OfferWorkflow(fake_ai).run(
        recommendation(), _profile(revenue_goal="3k_5k"), _system(), lambda s, st: progress.append((s, st))
    )

    assert result.segment == "Owner-operated roofing firms with 3-10 staff"
    assert result.transformation_from.startswith("Owners lose storm damage jobs")
    assert result.guarantee_type == "outcome_based"
    assert result.pricing_setup == 1500
    assert result.delivery_model == "build_once"
    assert result.validation_status == "passed"

    assert progress[:2] == [("prepare-prompts", StepStatus.ACTIVE), ("prepare-prompts", StepStatus.DONE)]
    assert progress[-2:] == [("validate-offer", StepStatus.ACTIVE), ("validate-offer", StepStatus.DONE)]
    for step in ("generate-transformation", "generate-guarantee", "generate-pricing"):
        assert progress.index((step, StepStatus.ACTIVE)) < progress.index((step, StepStatus.DONE))


async def test_offer_generators_share_one_brief(fake_ai):
    _queue_offer(fake_ai)
    await OfferWorkflow(fake_ai).run(recommendation(), _profile(), _system(location_city="Leeds"))

    transformation_prompt = fake_ai.calls_for(OfferTransformation)[0][0]["content"]
    guarantee_prompt = fake_ai.calls_for(GuaranteeOutput)[0][0]["content"]
    assert "- Bottleneck: missed calls from storm damage leads" in transformation_prompt
    assert "- Bottleneck being solved: missed calls from storm damage leads" in guarantee_prompt


async def test_offer_fails_when_any_generator_fails(fake_ai):
    fake_ai.queue_structured(OfferTransformation, transformation())
    fake_ai.queue_structured(GuaranteeOutput, guarantee())
    fake_ai.queue_structured(PricingOutput, *[pricing(pricing_setup=0, pricing_monthly=0)] * 3)

    with pytest.raises(WorkflowError) as exc_info:
        await OfferWorkflow(fake_ai).run(recommendation(), _profile(), _system())

    assert exc_info.value.reason == WORKFLOW_FAILED
    assert exc_info.value.step_id == "generate-pricing"


async def test_offer_requires_a_recommendation(fake_ai):
    with pytest.raises(WorkflowError) as exc_info:
        await OfferWorkflow(fake_ai).run(None, _profile(), _system())
    assert exc_info.value.reason == NO_NICHE
    assert fake_ai.structured_calls == []


# -- demo --------------------------------------------------------------------


async def test_demo_workflow_normalises_slug(fake_ai):
    fake_ai.queue_structured(DemoConfig, demo_config())
    progress = []

    config = await DemoWorkflow(fake_ai).run(recommendation(), offer(), lambda s, st: progress.append((s, st)))

    assert config.niche_slug == "roofing-contractors"
    assert [s for s, _ in progress] == [
        "generate-demo-config",
        "generate-demo-config",
        "validate-demo-config",
        "validate-demo-config",
    ]
    context = fake_ai.calls_for(DemoConfig)[0][0]["content"]
    assert '- TO (transformation_to): "A full calendar of booked jobs every week"' in context


async def test_demo_workflow_failure_is_generic(fake_ai):
    fake_ai.queue_structured(DemoConfig, *[demo_config(hero_headline="Grow today")] * 3)
    with pytest.raises(WorkflowError) as exc_info:
        await DemoWorkflow(fake_ai).run(recommendation(), offer())
    assert exc_info.value.reason == WORKFLOW_FAILED


async def test_demo_workflow_rejects_incomplete_offer(fake_ai):
    with pytest.raises(WorkflowError):
        await DemoWorkflow(fake_ai).run(recommendation(), {"segment": "x"})
    assert fake_ai.structured_calls == []


def test_normalize_slug_falls_back_to_niche():
    assert normalize_slug("!!!", "Dental Practices") == "dental-practices"
    assert normalize_slug("", "") == "demo"


# -- niche analysis ----------------------------------------------------------


async def test_niche_analysis_requests_three_by_default(fake_ai):
    fake_ai.queue_structured(
        NicheAnalysisOutput,
        {"recommendations": [recommendation("A"), recommendation("B"), recommendation("C")], "reasoning": "r"},
    )
    result = await NicheAnalyzer(fake_ai).run(_profile(), _system())

    assert [r.niche for r in result] == ["A", "B", "C"]
    assert fake_ai.calls_for(NicheAnalysisOutput)[0][0]["content"].endswith("Return exactly 3 recommendation(s).")


async def test_keep_switching_gets_one_recommendation(fake_ai):
    fake_ai.queue_structured(
        NicheAnalysisOutput,
        {"recommendations": [recommendation("A"), recommendation("B")], "reasoning": "r"},
    )
    result = await NicheAnalyzer(fake_ai).run(_profile(blockers=["keep_switching"]), _system())

    assert [r.niche for r in result] == ["A"]
    assert fake_ai.calls_for(NicheAnalysisOutput)[0][0]["content"].endswith("Return exactly 1 recommendation(s).")


async def test_scores_are_reconciled_to_sub_score_sum(fake_ai):
    rec = recommendation(score=95)
    rec["segment_scores"] = {**rec["segment_scores"], "total": 95}
    fake_ai.queue_structured(NicheAnalysisOutput, {"recommendations": [rec], "reasoning": "r"})

    [result] = await NicheAnalyzer(fake_ai).run(_profile(), _system())

    assert result.segment_scores.total == 82
    assert result.score == 82


async def test_niche_analysis_propagates_generation_errors(fake_ai):
    with pytest.raises(GenerationError):
        await NicheAnalyzer(fake_ai).run(_profile(), _system())


# -- pre-generation ----------------------------------------------------------


async def test_pregenerator_saves_offer(repo, system, fake_ai):
    await repo.patch(system.id, {"chosen_recommendation": recommendation()})
    _queue_offer(fake_ai)
    pregenerator = OfferPregenerator(repo, OfferWorkflow(fake_ai))

    assert pregenerator.schedule(system.id) is True
    assert pregenerator.schedule(system.id) is False
    await pregenerator.wait_idle()

    stored = await repo.require(system.id)
    assert stored.offer["guarantee_text"] == guarantee()["guarantee_text"]
    assert pregenerator.in_flight(system.id) is False


async def test_pregenerator_skips_when_offer_exists(repo, system, fake_ai):
    await repo.patch(system.id, {"chosen_recommendation": recommendation(), "offer": offer(segment="kept")})
    pregenerator = OfferPregenerator(repo, OfferWorkflow(fake_ai))

    pregenerator.schedule(system.id)
    await pregenerator.wait_idle()

    assert fake_ai.structured_calls == []
    assert (await repo.require(system.id)).offer["segment"] == "kept"


async def test_pregenerator_failure_is_swallowed_and_logged(repo, system, fake_ai):
    await repo.patch(system.id, {"chosen_recommendation": recommendation()})
    pregenerator = OfferPregenerator(repo, OfferWorkflow(fake_ai))

    pregenerator.schedule(system.id)
    await pregenerator.wait_idle()

    assert (await repo.require(system.id)).offer is None
