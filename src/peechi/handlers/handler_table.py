"""
The static table of every slash command, context menu and button handler.

Adding a handler means adding one line here; nothing is discovered from the
filesystem.
"""

from __future__ import annotations

from functools import partial

from peechi.bot.services import BotServices
from peechi.handlers.buttons import report as report_button
from peechi.handlers.buttons import verify as verify_button
from peechi.handlers.commands import admin, calendar_sync, ping, points, verify
from peechi.handlers.context_menus import report_message
from peechi.routing.handler_registry import HandlerRegistry


def build_handler_registry(services: BotServices) -> HandlerRegistry:
    registry = HandlerRegistry()

    registry.register_command(ping.SCHEMA, ping.execute)
    registry.register_command(points.SCHEMA, partial(points.execute, services=services))
    registry.register_command(verify.SCHEMA, partial(verify.execute, services=services))
    registry.register_command(admin.RECACHE_SCHEMA, partial(admin.recache, services=services))
    registry.register_command(admin.FAIL_SCHEMA, admin.fail)
    registry.register_command(calendar_sync.SCHEMA, partial(calendar_sync.execute, services=services))

    registry.register_context_menu(report_message.SCHEMA, partial(report_message.execute, services=services))

    registry.register_button(report_button.BUTTON_PREFIX, partial(report_button.execute, services=services))
    registry.register_button(verify_button.BUTTON_PREFIX, partial(verify_button.execute, services=services))

    return registry
