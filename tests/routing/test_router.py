"""Tests for interaction classification, dispatch and error translation."""

from unittest.mock import AsyncMock

import discord
import pytest

from peechi.exceptions import ExternalServiceError, NotFoundError, PersistenceError, ValidationError
from peechi.routing.handler_registry import HandlerRegistry
from peechi.routing.router import (
    InteractionKind,
    InteractionRouter,
    classify_interaction,
    routing_key,
    send_ephemeral,
)

COMPONENT = discord.InteractionType.component
BUTTON = discord.ComponentType.button.value


@pytest.fixture
def registry():
    return HandlerRegistry()


@pytest.fixture
def router(registry):
    return InteractionRouter(registry)


def _slash(interaction_factory, name="ping", **kwargs):
    return interaction_factory(data={"type": 1, "name": name}, **kwargs)


def _button(interaction_factory, custom_id, **kwargs):
    return interaction_factory(
        data={"component_type": BUTTON, "custom_id": custom_id},
        interaction_type=COMPONENT,
        **kwargs,
    )


class TestClassification:
    def test_slash_command(self, interaction_factory):
        assert classify_interaction(_slash(interaction_factory)) is InteractionKind.SLASH_COMMAND

    @pytest.mark.parametrize("command_type", [2, 3])
    def test_context_menus(self, interaction_factory, command_type):
        interaction = interaction_factory(data={"type": command_type, "name": "Report Message"})
        assert classify_interaction(interaction) is InteractionKind.CONTEXT_MENU

    def test_button(self, interaction_factory):
        assert classify_interaction(_button(interaction_factory, "report/1/Other")) is InteractionKind.BUTTON

    def test_select_menu_is_ignored(self, interaction_factory):
        interaction = interaction_factory(
            data={"component_type": discord.ComponentType.string_select.value, "custom_id": "x"},
            interaction_type=COMPONENT,
        )
        assert classify_interaction(interaction) is None

    def test_modal_submit_is_ignored(self, interaction_factory):
        interaction = interaction_factory(data={"custom_id": "m"}, interaction_type=discord.InteractionType.modal_submit)
        assert classify_interaction(interaction) is None

    def test_button_key_is_prefix(self, interaction_factory):
        interaction = _button(interaction_factory, "report/abc/Spam & Ads")
        assert routing_key(InteractionKind.BUTTON, interaction) == "report"

    def test_button_key_without_separator(self, interaction_factory):
        interaction = _button(interaction_factory, "verify")
        assert routing_key(InteractionKind.BUTTON, interaction) == "verify"


class TestDispatch:
    async def test_invokes_matching_command(self, router, registry, interaction_factory):
        handler = AsyncMock()
        registry.register_command({"name": "ping", "description": "Ping"}, handler)
        interaction = _slash(interaction_factory)

        assert await router.dispatch(interaction) is True
        handler.assert_awaited_once_with(interaction)

    async def test_invokes_button_by_prefix(self, router, registry, interaction_factory):
        handler = AsyncMock()
        registry.register_button("report", handler)
        interaction = _button(interaction_factory, "report/abc/Other")

        assert await router.dispatch(interaction) is True
        handler.assert_awaited_once_with(interaction)

    async def test_unregistered_key_is_dropped_silently(self, router, interaction_factory):
        interaction = _slash(interaction_factory, name="unknown")

        assert await router.dispatch(interaction) is False
        interaction.response.send_message.assert_not_awaited()
        interaction.followup.send.assert_not_awaited()

    async def test_same_name_in_other_table_does_not_match(self, router, registry, interaction_factory):
        registry.register_button("ping", AsyncMock())
        assert await router.dispatch(_slash(interaction_factory)) is False

    async def test_unclassified_interaction_is_ignored(self, router, interaction_factory):
        interaction = interaction_factory(data={}, interaction_type=discord.InteractionType.modal_submit)
        assert await router.dispatch(interaction) is False


class TestErrorTranslation:
    async def test_unexpected_error_before_reply_uses_response(self, router, registry, interaction_factory):
        registry.register_command({"name": "ping", "description": "Ping"}, AsyncMock(side_effect=RuntimeError("boom")))
        interaction = _slash(interaction_factory)

        await router.dispatch(interaction)

        interaction.response.send_message.assert_awaited_once_with(
            "There was an error while executing this command!", ephemeral=True
        )
        interaction.followup.send.assert_not_awaited()

    async def test_error_after_reply_uses_followup(self, router, registry, interaction_factory):
        async def defer_then_fail(interaction):
            await interaction.response.defer()
            raise RuntimeError("boom")

        registry.register_command({"name": "ping", "description": "Ping"}, defer_then_fail)
        interaction = _slash(interaction_factory)

        await router.dispatch(interaction)

        interaction.response.send_message.assert_not_awaited()
        interaction.followup.send.assert_awaited_once_with(
            "There was an error while executing this command!", ephemeral=True
        )

    @pytest.mark.parametrize(
        "kind_data, expected",
        [
            ({"type": 3, "name": "Report Message"}, "There was an error while executing this context menu!"),
            ({"component_type": BUTTON, "custom_id": "report/x/Other"}, "There was an error while executing this button!"),
        ],
    )
    async def test_generic_message_names_the_interaction_kind(
        self, router, registry, interaction_factory, kind_data, expected
    ):
        failing = AsyncMock(side_effect=KeyError("x"))
        registry.register_context_menu({"name": "Report Message"}, failing)
        registry.register_button("report", failing)
        interaction_type = COMPONENT if "component_type" in kind_data else None
        interaction = interaction_factory(data=kind_data, interaction_type=interaction_type)

        await router.dispatch(interaction)

        interaction.response.send_message.assert_awaited_once_with(expected, ephemeral=True)

    @pytest.mark.parametrize(
        "exc, expected",
        [
            (ValidationError("bad", user_message="Bots don't earn points!"), "Bots don't earn points!"),
            (NotFoundError("gone", user_message="Report not found"), "Report not found"),
            (PersistenceError("disk on fire"), "Something went wrong saving your data. Please try again later."),
            (ExternalServiceError("api down", user_message="Calendar is down"), "Calendar is down"),
            (ValidationError("Malformed report button id: 'report:x'"), "That input is not valid."),
            (NotFoundError("Report 12 not found in registry"), "The requested item could not be found."),
            (
                ExternalServiceError("HTTP 503 from calendar API"),
                "An external service is unavailable right now. Please try again later.",
            ),
        ],
    )
    async def test_domain_errors_use_their_user_message(self, router, registry, interaction_factory, exc, expected):
        registry.register_command({"name": "ping", "description": "Ping"}, AsyncMock(side_effect=exc))
        interaction = _slash(interaction_factory)

        await router.dispatch(interaction)

        interaction.response.send_message.assert_awaited_once_with(expected, ephemeral=True)

    async def test_failure_while_replying_is_swallowed(self, router, registry, interaction_factory):
        registry.register_command({"name": "ping", "description": "Ping"}, AsyncMock(side_effect=RuntimeError("boom")))
        interaction = _slash(interaction_factory)
        interaction.response.send_message.side_effect = RuntimeError("reply failed")

        assert await router.dispatch(interaction) is True


async def test_send_ephemeral_passes_extra_arguments(interaction_factory):
    interaction = interaction_factory(response_done=True)
    embed = discord.Embed(title="x")

    await send_ephemeral(interaction, None, embed=embed)

    interaction.followup.send.assert_awaited_once_with(None, ephemeral=True, embed=embed)
