import asyncio

from fakes import drain

from launchpath.core import events
from launchpath.core.context import CardIdAllocator, EventChannel
from launchpath.core.types import StepStatus
from launchpath.workflows.progress import ProgressTicker

STEPS = [("a", "A"), ("b", "B"), ("c", "C")]


def _tracker(card_id="t-t0"):
    return events.card_event(events.progress_tracker_card(card_id, "Working", STEPS))


async def test_channel_stops_after_terminal_event():
    channel = EventChannel()
    channel.emit(events.text_delta("hi"))
    channel.emit(events.done("hi"))
    channel.emit(events.text_delta("late"))
    channel.emit(events.error("late"))

    received = [e async for e in channel]
    assert [e["type"] for e in received] == ["text-delta", "done"]
    assert channel.closed


async def test_progress_requires_known_card_and_step():
    channel = EventChannel()
    channel.emit(events.progress("t-t0", "a", StepStatus.ACTIVE))
    channel.emit(_tracker())
    channel.emit(events.progress("t-t0", "zz", StepStatus.ACTIVE))
    channel.emit(events.progress("t-t0", "a", StepStatus.ACTIVE))

    received = await drain(channel)
    assert [e["type"] for e in received] == ["card", "progress"]
    assert received[1]["stepId"] == "a"


async def test_progress_never_regresses():
    channel = EventChannel()
    channel.emit(_tracker())
    channel.emit(events.progress("t-t0", "a", StepStatus.DONE))
    channel.emit(events.progress("t-t0", "a", StepStatus.ACTIVE))
    channel.emit(events.progress("t-t0", "a", StepStatus.DONE))
    channel.emit(events.progress("t-t0", "b", StepStatus.ACTIVE))

    received = await drain(channel)
    assert [(e["stepId"], e["status"]) for e in received if e["type"] == "progress"] == [
        ("a", "done"),
        ("b", "active"),
    ]


async def test_workflow_channel_passes_progress_through():
    channel = EventChannel(terminal=events.WORKFLOW_TERMINAL_EVENTS, track_progress=False)
    channel.emit(events.workflow_progress("generate-pricing", "Setting your pricing..."))
    channel.emit(events.workflow_step_complete("generate-pricing"))
    channel.emit(events.workflow_complete(offer={"a": 1}))
    channel.emit(events.workflow_error("late"))

    received = [e async for e in channel]
    assert [e["type"] for e in received] == ["progress", "step-complete", "complete"]
    assert received[2]["offer"] == {"a": 1}


def test_card_ids_are_unique_within_and_across_turns():
    first = CardIdAllocator(turn=0)
    assert first.allocate("intent") == "intent-t0"
    assert first.allocate("intent") == "intent-t0-2"
    assert first.allocate("location") == "location-t0"

    second = CardIdAllocator(turn=1)
    assert second.allocate("intent") == "intent-t1"


def test_dynamic_ids_are_namespaced():
    cards = CardIdAllocator(turn=3)
    assert cards.dynamic("Budget Range?") == ("dyn-budget-range-t3", "dyn-budget-range")
    assert cards.dynamic("budget range") == ("dyn-budget-range-t3-2", "dyn-budget-range")
    assert cards.dynamic("???") == ("dyn-question-t3", "dyn-question")


# -- progress ticker -----------------------------------------------------------


async def test_ticker_advances_then_finish_completes_remaining():
    channel = EventChannel()
    channel.emit(_tracker())
    ticker = ProgressTicker(channel.emit, "t-t0", ["a", "b", "c"], budget_seconds=30)

    ticker.advance()
    ticker.advance()
    await ticker.finish()

    received = await drain(channel)
    assert [(e["stepId"], e["status"]) for e in received if e["type"] == "progress"] == [
        ("a", "active"),
        ("a", "done"),
        ("b", "active"),
        ("b", "done"),
        ("c", "done"),
    ]


async def test_ticker_runs_on_its_own_clock():
    channel = EventChannel()
    channel.emit(_tracker())
    ticker = ProgressTicker(channel.emit, "t-t0", ["a", "b", "c"], budget_seconds=0.03)
    ticker.start()
    await asyncio.sleep(0.2)
    await ticker.finish()

    assert ticker.index == 3
    received = await drain(channel)
    statuses = [(e["stepId"], e["status"]) for e in received if e["type"] == "progress"]
    assert statuses[-1] == ("c", "done")
    assert ("c", "active") in statuses


async def test_cancelled_ticker_emits_nothing_more():
    channel = EventChannel()
    channel.emit(_tracker())
    ticker = ProgressTicker(channel.emit, "t-t0", ["a", "b", "c"], budget_seconds=30)
    ticker.start()
    ticker.advance()
    await ticker.cancel()

    received = await drain(channel)
    assert [e["stepId"] for e in received if e["type"] == "progress"] == ["a"]
