"""
Button rows and modals.

Button clicks are dispatched by the interaction router using the ``custom_id``
prefix, so the views here only carry components; they never run callbacks.
Modals are awaited directly by the handler that opened them.
"""

from __future__ import annotations

import discord

from peechi.reports.report_resolution import ReportCategory, build_report_button_id

VERIFY_BUTTON_ID = "verify/start"

NAME_MAX_LENGTH = 32
DETAILS_MAX_LENGTH = 1000


class RoutedView(discord.ui.View):
    """View whose clicks are handled by the interaction router, not py-cord."""

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        return False


def build_report_view(report_id: str, timeout: float | None = None) -> RoutedView:
    """One button per report category, each carrying ``report/<id>/<category>``."""
    view = RoutedView(timeout=timeout)
    for category in ReportCategory:
        view.add_item(
            discord.ui.Button(
                label=category.value,
                style=category.button_style,
                custom_id=build_report_button_id(report_id, category),
            )
        )
    return view


def build_verify_view() -> RoutedView:
    view = RoutedView(timeout=None)
    view.add_item(discord.ui.Button(label="Verify", style=discord.ButtonStyle.success, custom_id=VERIFY_BUTTON_ID))
    return view


class SubmissionModal(discord.ui.Modal):
    """
    Modal that acknowledges its submission silently and wakes the waiting handler.

    After ``await modal.wait()`` returns False, ``submitted`` is True and the
    input values can be read. A True return means the modal timed out.
    """

    def __init__(self, *children: discord.ui.InputText, title: str, timeout: float) -> None:
        super().__init__(*children, title=title, timeout=timeout)
        self.submitted = False

    async def callback(self, interaction: discord.Interaction) -> None:
        self.submitted = True
        await interaction.response.defer()
        self.stop()


class VerifyModal(SubmissionModal):
    def __init__(self, timeout: float) -> None:
        self.name_input = discord.ui.InputText(
            label="Name",
            placeholder="What should we call you?",
            max_length=NAME_MAX_LENGTH,
        )
        self.pronouns_input = discord.ui.InputText(
            label="Pronouns",
            placeholder="e.g. she/her, he/him, they/them",
            required=False,
            max_length=NAME_MAX_LENGTH,
        )
        super().__init__(self.name_input, self.pronouns_input, title="Verify", timeout=timeout)

    @property
    def name_text(self) -> str:
        return (self.name_input.value or "").strip()

    @property
    def pronouns_text(self) -> str:
        return (self.pronouns_input.value or "").strip()


class ReportDetailsModal(SubmissionModal):
    def __init__(self, timeout: float) -> None:
        self.details_input = discord.ui.InputText(
            label="What's wrong with this message?",
            style=discord.InputTextStyle.long,
            max_length=DETAILS_MAX_LENGTH,
        )
        super().__init__(self.details_input, title="Report details", timeout=timeout)

    @property
    def details_text(self) -> str:
        return (self.details_input.value or "").strip()
