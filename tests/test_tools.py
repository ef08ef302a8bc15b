import asyncio

import pytest
from fakes import demo_config, drain, guarantee, offer, pricing, recommendation, transformation

from launchpath.ai.schemas import (
    DemoConfig,
    FreeformInterpretation,
    GuaranteeOutput,
    NicheAnalysisOutput,
    OfferTransformation,
    PricingOutput,
)
from launchpath.ai.tools.analysis import RunNicheAnalysisTool
from launchpath.ai.tools.base import ToolCategory
from launchpath.ai.tools.dynamic import PresentChoicesTool, RequestInputTool
from launchpath.ai.tools.input_request import input_request_tools
from launchpath.ai.tools.interpret import InterpretFreeformTool
from launchpath.ai.tools.offer import GenerateOfferTool, ShowOfferPricingTool, ShowOfferReviewTool
from launchpath.ai.tools.registry import ToolDependencies, ToolRegistry
from launchpath.ai.tools.save import SaveCollectedAnswersTool, SaveNicheChoiceTool, SaveOfferSectionTool
from launchpath.ai.tools.system import GenerateSystemTool
from launchpath.config import AppConfig
from launchpath.workflows.demo import DemoWorkflow
from launchpath.workflows.niche import NicheAnalyzer
from launchpath.workflows.offer import OfferWorkflow
from launchpath.workflows.pregenerate import OfferPregenerator

BEGINNER_ANSWERS = {
    "intent": "first_client",
    "industry_interests": ["home_services"],
    "own_idea": "find_for_me",
    "location_city": "Leeds",
    "location_target": "local",
    "delivery_model": "build_once",
}


def _tool(name):
    return next(t for t in input_request_tools() if t.name == name)


def _cards(events_):
    return [e["card"] for e in events_ if e["type"] == "card"]


# -- registry ----------------------------------------------------------------


def test_registry_registers_every_tool(repo, fake_ai):
    offer_workflow = OfferWorkflow(fake_ai)
    registry = ToolRegistry()
    registry.discover_and_register(
        ToolDependencies(
            config=AppConfig(),
            ai_client=fake_ai,
            niche_analyzer=NicheAnalyzer(fake_ai),
            offer_workflow=offer_workflow,
            demo_workflow=DemoWorkflow(fake_ai),
            pregenerator=OfferPregenerator(repo, offer_workflow),
        )
    )

    names = {t.name for t in registry.all_tools()}
    assert {
        "request_intent_selection",
        "request_location",
        "present_choices",
        "request_input",
        "save_collected_answers",
        "save_niche_choice",
        "save_offer_section",
        "interpret_freeform_response",
        "run_niche_analysis",
        "generate_offer",
        "show_offer_story",
        "show_offer_pricing",
        "show_offer_review",
        "generate_system",
    } <= names
    assert len(registry.by_category(ToolCategory.INPUT_REQUEST)) == 12
    definitions = registry.api_definitions()
    assert all({"name", "description", "input_schema"} <= set(d) for d in definitions)


def test_duplicate_registration_is_rejected():
    registry = ToolRegistry()
    registry.register(PresentChoicesTool())
    try:
        registry.register(PresentChoicesTool())
    except ValueError as e:
        assert "present_choices" in str(e)
    else:
        raise AssertionError("duplicate tool accepted")


# -- input requests ----------------------------------------------------------


async def test_input_request_emits_one_card(system, make_ctx, channel):
    ctx = await make_ctx(system.id, turn=2)
    result = await _tool("request_industry_interests").execute(ctx)

    assert result == {"awaiting_user_input": True, "field": "industry_interests"}
    [card] = _cards(await drain(channel))
    assert card["id"] == "industry-interests-t2"
    assert card["field"] == "industry_interests"
    assert card["multiSelect"] is True
    assert card["maxSelect"] == 2


async def test_mode_tool_switches_options(system, make_ctx, channel):
    ctx = await make_ctx(system.id)
    await _tool("request_delivery_model").execute(ctx, mode="simple")
    await _tool("request_delivery_model").execute(ctx, mode="full")

    simple, full = _cards(await drain(channel))
    assert simple["id"] == "delivery-model-t0"
    assert full["id"] == "delivery-model-t0-2"
    assert simple["options"] != full["options"]


async def test_location_card(system, make_ctx, channel):
    ctx = await make_ctx(system.id)
    result = await _tool("request_location").execute(ctx)

    assert result["field"] == "location"
    [card] = _cards(await drain(channel))
    assert card["type"] == "location"
    assert card["targetOptions"]


async def test_present_choices_validates_option_count(system, make_ctx, channel):
    ctx = await make_ctx(system.id)
    tool = PresentChoicesTool()

    result = await tool.execute(ctx, id="budget", question="Budget?", options=[{"value": "a", "label": "A"}])
    assert "error" in result

    result = await tool.execute(
        ctx,
        id="budget",
        question="Budget?",
        options=[{"value": "low", "label": "Low"}, {"value": "high", "label": "High"}],
    )
    assert result == {"awaiting_user_input": True, "field": "dyn-budget"}
    [card] = _cards(await drain(channel))
    assert card["id"] == "dyn-budget-t0"


async def test_request_input_card(system, make_ctx, channel):
    ctx = await make_ctx(system.id)
    result = await RequestInputTool().execute(ctx, id="team size", question="How big is your team?")
    assert result["field"] == "dyn-team-size"
    [card] = _cards(await drain(channel))
    assert card["type"] == "text-input"


# -- saves -------------------------------------------------------------------


async def test_save_answers_filters_unknown_fields(repo, system, make_ctx):
    ctx = await make_ctx(system.id)
    result = await SaveCollectedAnswersTool().execute(
        ctx, updates={"intent": "first_client", "industry_interests": "home_services", "offer": {"x": 1}}
    )

    assert result == {"saved": True, "fields": ["industry_interests", "intent"], "ignored": ["offer"]}
    stored = await repo.require(system.id)
    assert stored.intent == "first_client"
    assert stored.industry_interests == ["home_services"]
    assert stored.offer is None


async def test_save_answers_is_idempotent(repo, system, make_ctx):
    ctx = await make_ctx(system.id)
    tool = SaveCollectedAnswersTool()
    await tool.execute(ctx, updates=BEGINNER_ANSWERS)
    once = (await repo.require(system.id)).answers()
    await tool.execute(ctx, updates=BEGINNER_ANSWERS)
    assert (await repo.require(system.id)).answers() == once


async def test_save_niche_choice_schedules_pregeneration(repo, system, make_ctx, fake_ai):
    await repo.patch(system.id, {"ai_recommendations": [recommendation("Roofers"), recommendation("Dentists")]})
    pregenerator = OfferPregenerator(repo, OfferWorkflow(fake_ai))
    ctx = await make_ctx(system.id)

    result = await SaveNicheChoiceTool(pregenerator).execute(ctx, niche="  dentists ")

    assert result == {"saved": True, "niche": "Dentists"}
    assert pregenerator.in_flight(system.id)
    await pregenerator.wait_idle()
    assert (await repo.require(system.id)).chosen_recommendation["niche"] == "Dentists"


async def test_save_niche_choice_rejects_unknown_niche(repo, system, make_ctx):
    await repo.patch(system.id, {"ai_recommendations": [recommendation("Roofers")]})
    ctx = await make_ctx(system.id)
    result = await SaveNicheChoiceTool().execute(ctx, niche="Bakers")
    assert result["saved"] is False


async def test_changing_niche_clears_offer(repo, system, make_ctx):
    await repo.patch(
        system.id,
        {
            "ai_recommendations": [recommendation("Roofers"), recommendation("Dentists")],
            "chosen_recommendation": recommendation("Roofers"),
            "offer": offer(),
        },
    )
    ctx = await make_ctx(system.id)
    await SaveNicheChoiceTool().execute(ctx, niche="Dentists")
    assert (await repo.require(system.id)).offer is None


async def test_save_offer_section_merges(repo, system, make_ctx):
    await repo.patch(system.id, {"offer": offer()})
    ctx = await make_ctx(system.id)

    result = await SaveOfferSectionTool().execute(
        ctx, updates={"pricing_setup": "2000", "segment": "Roofers in Leeds", "validation_status": "failed"}
    )

    assert result == {"saved": True, "updatedFields": ["pricing_setup", "segment"]}
    stored = (await repo.require(system.id)).offer
    assert stored["pricing_setup"] == 2000
    assert stored["segment"] == "Roofers in Leeds"
    assert stored["guarantee_text"] == offer()["guarantee_text"]
    assert stored["validation_status"] == "passed"


# -- interpret ---------------------------------------------------------------


async def test_interpret_only_returns_valid_values(system, make_ctx, fake_ai):
    ctx = await make_ctx(system.id)
    tool = InterpretFreeformTool(fake_ai)
    fake_ai.queue_structured(
        FreeformInterpretation,
        {"field": "intent", "value": "first_client"},
        {"field": "intent", "value": "world_domination"},
    )
    values = ["first_client", "replace_income"]

    assert (await tool.execute(ctx, expected_field="intent", user_text="my first client", valid_values=values))["value"] == "first_client"
    assert (await tool.execute(ctx, expected_field="intent", user_text="everything", valid_values=values))["value"] is None
    assert (await tool.execute(ctx, expected_field="intent", user_text="??", valid_values=values))["value"] is None


# -- niche analysis ----------------------------------------------------------


async def test_analysis_guard_blocks_incomplete_answers(system, make_ctx, channel, fake_ai):
    ctx = await make_ctx(system.id)
    result = await RunNicheAnalysisTool(NicheAnalyzer(fake_ai)).execute(ctx)

    assert "industry_interests" in result["missing"]
    assert "location_city" in result["missing"]
    assert fake_ai.structured_calls == []
    assert await drain(channel) == []


async def test_analysis_emits_tracker_then_score_cards(repo, system, make_ctx, channel, fake_ai):
    await repo.patch(system.id, BEGINNER_ANSWERS)
    fake_ai.queue_structured(
        NicheAnalysisOutput,
        {"recommendations": [recommendation("A"), recommendation("B"), recommendation("C")], "reasoning": "r"},
    )
    ctx = await make_ctx(system.id, turn=4)

    result = await RunNicheAnalysisTool(NicheAnalyzer(fake_ai), progress_seconds=30).execute(ctx)

    assert result["success"] is True
    assert result["count"] == 3
    emitted = await drain(channel)
    tracker, scores = _cards(emitted)
    assert tracker["id"] == "niche-analysis-t4"
    assert scores["type"] == "score-cards"
    assert [r["niche"] for r in scores["recommendations"]] == ["A", "B", "C"]

    progress = [e for e in emitted if e["type"] == "progress"]
    assert {e["stepId"] for e in progress if e["status"] == "done"} == {s["id"] for s in tracker["steps"]}
    assert emitted[-1]["type"] == "card"
    assert len((await repo.require(system.id)).ai_recommendations) == 3


async def test_analysis_failure_returns_error(repo, system, make_ctx, fake_ai):
    await repo.patch(system.id, BEGINNER_ANSWERS)
    ctx = await make_ctx(system.id)
    result = await RunNicheAnalysisTool(NicheAnalyzer(fake_ai), progress_seconds=30).execute(ctx)
    assert result == {"error": "Analysis failed. Try again."}


class _BrokenAnalyzer:
    async def run(self, profile, system):
        raise RuntimeError("connection reset")


async def test_analysis_stops_ticking_on_unexpected_errors(repo, system, make_ctx, channel):
    await repo.patch(system.id, BEGINNER_ANSWERS)
    ctx = await make_ctx(system.id)

    with pytest.raises(RuntimeError):
        await RunNicheAnalysisTool(_BrokenAnalyzer(), progress_seconds=0.2).execute(ctx)
    await asyncio.sleep(0.3)

    emitted = await drain(channel)
    assert [e["card"]["type"] for e in emitted if e["type"] == "card"] == ["progress-tracker"]
    assert [e for e in emitted if e["type"] == "progress"] == []


# -- offer -------------------------------------------------------------------


async def test_generate_offer_requires_niche(system, make_ctx, fake_ai):
    ctx = await make_ctx(system.id)
    result = await GenerateOfferTool(OfferWorkflow(fake_ai)).execute(ctx)
    assert result["error"] == "No niche selected."
    assert result["missing"] == ["chosen_recommendation"]


async def test_generate_offer_reuses_existing_offer(repo, system, make_ctx, channel, fake_ai):
    await repo.patch(system.id, {"chosen_recommendation": recommendation(), "offer": offer()})
    ctx = await make_ctx(system.id)

    result = await GenerateOfferTool(OfferWorkflow(fake_ai)).execute(ctx)

    assert result["reused"] is True
    assert fake_ai.structured_calls == []
    [card] = _cards(await drain(channel))
    assert card["field"] == "offer-story"
    values = {f["name"]: f["value"] for f in card["fields"]}
    assert values["transformation_from"] == offer()["transformation_from"]


async def test_generate_offer_runs_workflow(repo, system, make_ctx, channel, fake_ai):
    await repo.patch(system.id, {"chosen_recommendation": recommendation()})
    fake_ai.queue_structured(OfferTransformation, transformation())
    fake_ai.queue_structured(GuaranteeOutput, guarantee())
    fake_ai.queue_structured(PricingOutput, pricing())
    ctx = await make_ctx(system.id, turn=6)

    result = await GenerateOfferTool(OfferWorkflow(fake_ai)).execute(ctx)

    assert result == {"success": True, "reused": False, "note": result["note"]}
    emitted = await drain(channel)
    tracker, story = _cards(emitted)
    assert tracker["id"] == "offer-progress-t6"
    assert story["id"] == "offer-story-t6"
    done_steps = {e["stepId"] for e in emitted if e["type"] == "progress" and e["status"] == "done"}
    assert done_steps == {s["id"] for s in tracker["steps"]}
    assert (await repo.require(system.id)).offer["pricing_monthly"] == 800


async def test_generate_offer_failure(repo, system, make_ctx, fake_ai):
    await repo.patch(system.id, {"chosen_recommendation": recommendation()})
    ctx = await make_ctx(system.id)
    result = await GenerateOfferTool(OfferWorkflow(fake_ai)).execute(ctx)
    assert result == {"error": "Offer generation failed. Please try again."}


async def test_review_cards(repo, system, make_ctx, channel):
    await repo.patch(system.id, {"offer": offer()})
    ctx = await make_ctx(system.id)

    await ShowOfferPricingTool().execute(ctx)
    await ShowOfferReviewTool().execute(ctx)

    pricing_card, summary = _cards(await drain(channel))
    assert pricing_card["field"] == "offer-pricing"
    assert {f["name"] for f in pricing_card["fields"]} == {"pricing_setup", "pricing_monthly", "guarantee_text"}
    assert summary["type"] == "offer-summary"
    assert summary["field"] == "build-system"


async def test_review_without_offer_errors(system, make_ctx):
    ctx = await make_ctx(system.id)
    assert await ShowOfferReviewTool().execute(ctx) == {"error": "Could not load offer for review."}


# -- system ------------------------------------------------------------------


async def test_generate_system_requires_complete_offer(repo, system, make_ctx, fake_ai):
    await repo.patch(system.id, {"chosen_recommendation": recommendation(), "offer": {"segment": "x"}})
    ctx = await make_ctx(system.id)
    result = await GenerateSystemTool(DemoWorkflow(fake_ai)).execute(ctx)
    assert "offer.transformation_from" in result["missing"]
    assert fake_ai.structured_calls == []


async def test_generate_system_completes_the_system(repo, system, make_ctx, channel, fake_ai):
    await repo.patch(system.id, {"chosen_recommendation": recommendation(), "offer": offer()})
    fake_ai.queue_structured(DemoConfig, demo_config())
    ctx = await make_ctx(system.id)

    result = await GenerateSystemTool(DemoWorkflow(fake_ai)).execute(ctx)

    assert result == {"success": True, "demoUrl": f"/demo/{system.id}"}
    tracker, ready = _cards(await drain(channel))
    assert [s["id"] for s in tracker["steps"]] == ["generate-demo-config", "validate-demo-config"]
    assert ready["type"] == "system-ready"
    assert ready["demoUrl"] == f"/demo/{system.id}"
    stored = await repo.require(system.id)
    assert stored.status == "complete"
    assert stored.demo_config["niche_slug"] == "roofing-contractors"
