"""Tests for the handler table and command catalogue publishing."""

from unittest.mock import AsyncMock

from peechi.bot.community_bot import CommunityBot, build_intents
from peechi.handlers.handler_table import build_handler_registry
from peechi.routing.router import InteractionRouter


def test_every_handler_is_registered(services):
    registry = build_handler_registry(services)

    assert set(registry.commands) == {"ping", "points", "verify", "recache", "fail", "calendar-sync"}
    assert set(registry.context_menus) == {"Report Message"}
    assert set(registry.buttons) == {"report", "verify"}


def test_catalogue_schemas_are_well_formed(services):
    for schema in build_handler_registry(services).catalogue():
        assert schema["name"]
        assert schema["type"] in (1, 2, 3)
        if schema["type"] == 1:
            assert schema["description"]


def test_intents():
    intents = build_intents()
    assert intents.message_content
    assert intents.members
    assert intents.guilds


async def test_publish_catalogue_replaces_guild_commands(services):
    registry = build_handler_registry(services)
    bot = CommunityBot(InteractionRouter(registry))
    bot.http.bulk_upsert_guild_commands = AsyncMock(side_effect=lambda client_id, guild_id, payload: payload)

    published = await bot.publish_catalogue(2, 1, registry)

    assert published == 7
    client_id, guild_id, payload = bot.http.bulk_upsert_guild_commands.await_args.args
    assert (client_id, guild_id) == (2, 1)
    assert {entry["name"] for entry in payload} == {
        "ping", "points", "verify", "recache", "fail", "calendar-sync", "Report Message",
    }


async def test_interactions_go_to_router(services):
    router = InteractionRouter(build_handler_registry(services))
    router.dispatch = AsyncMock(return_value=True)
    bot = CommunityBot(router)
    interaction = object()

    await bot.on_interaction(interaction)

    router.dispatch.assert_awaited_once_with(interaction)
