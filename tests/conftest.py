"""
Pytest configuration and fixtures for Peechi tests.
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from peechi.configuration.app_configuration import AppConfig
from peechi.configuration.bot_settings import BotSettings, LocalEnv
from peechi.database.database import Database
from peechi.points.ledger import UserLedger
from peechi.reports.report_registry import ReportRegistry


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
async def database(tmp_path):
    """A fresh on-disk database with the schema applied."""
    db = Database(tmp_path / "peechi-test.db")
    assert await db.initialize()
    yield db
    await db.shutdown()


@pytest.fixture
def ledger(database):
    return UserLedger(database.connection)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def local_env():
    return LocalEnv(discord_token="token", guild_id=1, client_id=2)


@pytest.fixture
def app_config(tmp_path):
    """AppConfig pointed at a missing file, so every property returns its default."""
    return AppConfig(tmp_path / "missing.yml")


@pytest.fixture
async def settings(local_env, app_config, database):
    bot_settings = BotSettings(local_env, app_config, database.connection)
    await bot_settings.set_document("roles", {"verified": "500"})
    await bot_settings.set_document(
        "channels", {"verification": "600", "admin": "700", "error": "800"}
    )
    await bot_settings.load()
    return bot_settings


@pytest.fixture
def services(settings, ledger, clock):
    from peechi.bot.services import BotServices

    return BotServices(settings=settings, ledger=ledger, reports=ReportRegistry(clock=clock))


def make_interaction(
    *,
    data=None,
    interaction_type=None,
    user_id=42,
    user_name="tester",
    response_done=False,
    guild=None,
    client=None,
    channel=None,
):
    """Build a fake ``discord.Interaction`` with recording response/followup mocks."""
    import discord

    state = {"done": response_done}

    async def _mark_done(*args, **kwargs):
        state["done"] = True

    response = SimpleNamespace(
        is_done=lambda: state["done"],
        send_message=AsyncMock(side_effect=_mark_done),
        send_modal=AsyncMock(side_effect=_mark_done),
        defer=AsyncMock(side_effect=_mark_done),
    )
    user = MagicMock()
    user.id = user_id
    user.name = user_name
    user.display_name = user_name
    user.bot = False
    user.mention = f"<@{user_id}>"
    user.display_avatar.url = "https://cdn.example/avatar.png"

    data = data or {}
    return SimpleNamespace(
        id=1234567890123456789,
        type=interaction_type or discord.InteractionType.application_command,
        data=data,
        custom_id=data.get("custom_id"),
        user=user,
        guild=guild,
        guild_id=getattr(guild, "id", None),
        channel=channel,
        channel_id=getattr(channel, "id", None),
        client=client or MagicMock(),
        response=response,
        followup=SimpleNamespace(send=AsyncMock()),
        edit_original_response=AsyncMock(),
        original_response=AsyncMock(),
    )


@pytest.fixture
def interaction_factory():
    return make_interaction
