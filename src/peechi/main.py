"""
Peechi Community Bot
====================

Discord bot for an engineering community: chat points, message reports,
member verification and Google Calendar sync.
"""

import os
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. PEECHI_HOME environment variable, if set.
    2. If running in a frozen/compiled context (e.g., PyInstaller, Nuitka), use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("PEECHI_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import signal

import discord
from dotenv import load_dotenv

from peechi.alerts.alert_forwarder import AlertForwarder
from peechi.bot.community_bot import CommunityBot
from peechi.bot.services import BotServices
from peechi.calendar.calendar_service import CalendarService
from peechi.cog.listener import events_listener, message_listener
from peechi.configuration.app_configuration import AppConfig
from peechi.configuration.bot_settings import BotSettings, ConfigurationError, LocalEnv
from peechi.database.database import Database
from peechi.handlers.handler_table import build_handler_registry
from peechi.points.ledger import UserLedger
from peechi.reports.report_registry import ReportRegistry
from peechi.routing.handler_registry import HandlerRegistry
from peechi.routing.router import InteractionRouter
from peechi.util.logger import get_logger, handle_exception

logger = get_logger("main")

# Pending bot.close() tasks started from signal handlers; the loop only keeps weak references.
_shutdown_tasks: set[asyncio.Task] = set()


def load_environment() -> LocalEnv:
    """Load ``.env`` and return the validated local environment.

    Raises
    ------
    ConfigurationError
        If a required variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    return LocalEnv.from_environ()


def build_services(env: LocalEnv, app_config: AppConfig, database: Database) -> BotServices:
    """Construct the components shared by handlers and cogs."""
    settings = BotSettings(env, app_config, database.connection)
    reports = ReportRegistry(
        ttl_seconds=app_config.report_ttl_seconds,
        sweep_interval_seconds=app_config.report_sweep_interval_seconds,
        max_reports=app_config.max_pending_reports,
    )

    calendar = None
    if env.calendar_api_key and env.calendar_id:
        calendar = CalendarService(env.calendar_api_key, env.calendar_id)
    else:
        logger.warning("CALENDAR_API_KEY/CALENDAR_ID not set; /calendar-sync will be unavailable.")

    return BotServices(settings=settings, ledger=UserLedger(database.connection), reports=reports, calendar=calendar)


def load_cogs(bot: discord.Bot, services: BotServices) -> None:
    """Register the listener cogs with the bot."""
    events_listener.setup(bot, services)
    message_listener.setup(bot, services)
    logger.info("All cogs loaded successfully.")


def create_bot(registry: HandlerRegistry, services: BotServices) -> CommunityBot:
    """Instantiate the Discord bot, wire the router and register all cogs."""
    bot = CommunityBot(InteractionRouter(registry))
    load_cogs(bot, services)
    return bot


def install_signal_handlers(bot: discord.Bot) -> None:
    """Close the gateway session on SIGINT/SIGTERM so ``connect()`` returns."""
    loop = asyncio.get_running_loop()

    def request_shutdown(signame: str) -> None:
        logger.info("Received %s, shutting down.", signame)
        task = loop.create_task(bot.close())
        _shutdown_tasks.add(task)
        task.add_done_callback(_shutdown_tasks.discard)

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_shutdown, sig.name)
        except (NotImplementedError, RuntimeError):
            # Windows event loops do not support signal handlers; Ctrl+C raises KeyboardInterrupt.
            logger.debug("Signal handler for %s not supported on this platform", sig.name)


async def start_bot(bot: CommunityBot, env: LocalEnv, registry: HandlerRegistry) -> None:
    """Log in, publish the command catalogue, then hold the gateway session open."""
    logger.info("Attempting to connect to Discord…")
    await bot.login(env.discord_token)
    await bot.publish_catalogue(env.client_id, env.guild_id, registry)
    await bot.connect()
    logger.info("Discord session closed.")


async def shutdown_runtime(
    bot: discord.Bot | None,
    services: BotServices | None,
    database: Database,
    forwarder: AlertForwarder | None = None,
) -> None:
    """Stop background tasks, close the bot and the database."""
    if forwarder is not None:
        await forwarder.shutdown()

    if services is not None:
        await services.reports.shutdown()

    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing the Discord client: %s", exc)

    await database.shutdown()
    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap configuration, database and bot, returning an exit code.

    Returns
    -------
    int
        0 after a requested shutdown, 1 if startup or the session failed.
    """
    try:
        env = load_environment()
    except ConfigurationError as exc:
        logger.critical("%s. Bot cannot start.", exc)
        return 1

    app_config = AppConfig()
    database = Database(app_config.database_path)

    logger.info("Initializing database...")
    if not await database.initialize():
        logger.critical("Failed to initialize database.")
        return 1

    services: BotServices | None = None
    bot: CommunityBot | None = None
    forwarder: AlertForwarder | None = None
    exit_code = 0

    try:
        services = build_services(env, app_config, database)
        await services.settings.load()

        registry = build_handler_registry(services)
        bot = create_bot(registry, services)

        forwarder = AlertForwarder(bot, services.settings)
        forwarder.start()
        services.reports.start()
        install_signal_handlers(bot)

        await start_bot(bot, env, registry)
    except ConfigurationError as exc:
        logger.critical("Configuration error: %s", exc)
        exit_code = 1
    except discord.LoginFailure as exc:
        logger.critical("Discord rejected the bot token: %s", exc)
        exit_code = 1
    except asyncio.CancelledError:
        logger.info("Bot start cancelled; proceeding to shutdown")
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc, exc_info=exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, services, database, forwarder)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process code."""
    logger.info("Starting Peechi…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    sys.exit(main())
