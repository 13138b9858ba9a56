"""
Runtime settings: local environment plus operational config from the database.

``BotSettings`` is created once by the orchestrator and passed to every
component that needs it. Role and channel ids live in the ``config`` table so
staff can change them without a redeploy; ``reload()`` re-fetches them.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass

from peechi.configuration.app_configuration import AppConfig
from peechi.database.db_connection import ConnectionManager
from peechi.util.logger import get_logger

logger = get_logger("bot_settings")

REQUIRED_ENV_VARS = ("DISCORD_TOKEN", "GUILD_ID", "CLIENT_ID")


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or malformed. Fatal at startup."""


@dataclass(frozen=True, slots=True)
class LocalEnv:
    """Secrets and ids read from the process environment (``.env``)."""

    discord_token: str
    guild_id: int
    client_id: int
    calendar_api_key: str | None = None
    calendar_id: str | None = None

    @classmethod
    def from_environ(cls, environ: dict[str, str] | None = None) -> LocalEnv:
        """
        Build the local environment from ``os.environ`` (or a given mapping).

        Raises:
            ConfigurationError: If a required variable is missing or an id is not numeric.
        """
        env = dict(os.environ if environ is None else environ)
        missing = [name for name in REQUIRED_ENV_VARS if not env.get(name)]
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

        try:
            guild_id = int(env["GUILD_ID"])
            client_id = int(env["CLIENT_ID"])
        except ValueError as exc:
            raise ConfigurationError("GUILD_ID and CLIENT_ID must be numeric Discord ids") from exc

        return cls(
            discord_token=env["DISCORD_TOKEN"],
            guild_id=guild_id,
            client_id=client_id,
            calendar_api_key=env.get("CALENDAR_API_KEY") or None,
            calendar_id=env.get("CALENDAR_ID") or None,
        )


@dataclass(frozen=True, slots=True)
class OperationalConfig:
    """Role and channel ids fetched from the ``config`` table."""

    verified_role_id: int | None = None
    verification_channel_id: int | None = None
    admin_channel_id: int | None = None
    error_channel_id: int | None = None

    @staticmethod
    def _as_id(value: object) -> int | None:
        if value in (None, ""):
            return None
        try:
            return int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            logger.warning("[BOT SETTINGS] Ignoring non-numeric id in config: %r", value)
            return None

    @classmethod
    def from_documents(cls, documents: dict[str, object]) -> OperationalConfig:
        roles = documents.get("roles") or {}
        channels = documents.get("channels") or {}
        if not isinstance(roles, dict):
            roles = {}
        if not isinstance(channels, dict):
            channels = {}

        return cls(
            verified_role_id=cls._as_id(roles.get("verified")),
            verification_channel_id=cls._as_id(channels.get("verification")),
            admin_channel_id=cls._as_id(channels.get("admin")),
            error_channel_id=cls._as_id(channels.get("error")),
        )


class BotSettings:
    """
    Combined view of local environment, YAML app config and remote config.

    Args:
        env: Local environment.
        app_config: YAML-backed application configuration.
        connection: Database connection holding the ``config`` table.
    """

    def __init__(self, env: LocalEnv, app_config: AppConfig, connection: ConnectionManager) -> None:
        self.env = env
        self.app_config = app_config
        self._connection = connection
        self._operational: OperationalConfig | None = None

    @property
    def operational(self) -> OperationalConfig:
        """
        The cached operational config.

        Raises:
            ConfigurationError: If ``load()`` has not completed yet.
        """
        if self._operational is None:
            raise ConfigurationError("Operational config not loaded. Call await load() first.")
        return self._operational

    async def _fetch_documents(self) -> dict[str, object]:
        async with self._connection.read() as conn:
            cursor = await conn.execute("SELECT key, value FROM config")
            rows = await cursor.fetchall()

        documents: dict[str, object] = {}
        for row in rows:
            try:
                documents[row["key"]] = json.loads(row["value"])
            except json.JSONDecodeError:
                logger.warning("[BOT SETTINGS] Config document %s is not valid JSON, skipping", row["key"])
        return documents

    async def load(self) -> OperationalConfig:
        """Fetch the operational config once; later calls return the cache."""
        if self._operational is not None:
            return self._operational
        return await self.reload()

    async def reload(self) -> OperationalConfig:
        """
        Re-fetch operational config from the database and re-read the YAML file.

        Raises:
            ConfigurationError: If the config table cannot be read.
        """
        try:
            documents = await self._fetch_documents()
        except Exception as exc:
            logger.error("[BOT SETTINGS] Failed to fetch operational config: %s", exc)
            raise ConfigurationError("Operational config could not be loaded") from exc

        self.app_config.reload()
        self._operational = OperationalConfig.from_documents(documents)
        logger.info("[BOT SETTINGS] Operational config loaded (%d documents)", len(documents))
        return self._operational

    async def set_document(self, key: str, value: object) -> None:
        """Write one config document. Used by administrators and tests."""
        async with self._connection.transaction() as conn:
            await conn.execute(
                "INSERT INTO config (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, json.dumps(value)),
            )
