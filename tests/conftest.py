from __future__ import annotations

import pytest

from fakes import FakeAIClient

from launchpath.core.context import CardIdAllocator, EventChannel, ToolContext
from launchpath.storage.database import Database
from launchpath.storage.system_repo import SystemRepository


@pytest.fixture
async def db(tmp_path):
    database = Database(str(tmp_path / "launchpath.db"))
    await database.initialize()
    yield database
    await database.close()


@pytest.fixture
def repo(db):
    return SystemRepository(db)


@pytest.fixture
async def profile(repo):
    return await repo.create_profile(
        current_situation="complete_beginner",
        time_availability="5_to_15",
        outreach_comfort="somewhat",
        technical_comfort="comfortable",
        revenue_goal="1k_3k",
        blockers=[],
    )


@pytest.fixture
async def system(repo, profile):
    return await repo.create_system(profile.id)


@pytest.fixture
def fake_ai():
    return FakeAIClient()


@pytest.fixture
def channel():
    return EventChannel()


@pytest.fixture
def make_ctx(repo, profile, channel):
    """Build a ToolContext for a stored system, reading it fresh."""

    async def _make(system_id: str, turn: int = 0) -> ToolContext:
        return ToolContext(
            system_id=system_id,
            repo=repo,
            profile=profile,
            system=await repo.require(system_id),
            channel=channel,
            cards=CardIdAllocator(turn),
        )

    return _make
