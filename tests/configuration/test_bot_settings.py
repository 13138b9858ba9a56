import pytest

from peechi.configuration.bot_settings import BotSettings, ConfigurationError, LocalEnv, OperationalConfig


class TestLocalEnv:
    def test_from_environ(self):
        env = LocalEnv.from_environ(
            {
                "DISCORD_TOKEN": "secret",
                "GUILD_ID": "123",
                "CLIENT_ID": "456",
                "CALENDAR_API_KEY": "key",
                "CALENDAR_ID": "",
            }
        )
        assert env.discord_token == "secret"
        assert env.guild_id == 123
        assert env.client_id == 456
        assert env.calendar_api_key == "key"
        assert env.calendar_id is None

    def test_missing_variables_are_named(self):
        with pytest.raises(ConfigurationError) as exc_info:
            LocalEnv.from_environ({"DISCORD_TOKEN": "secret"})
        assert "GUILD_ID" in str(exc_info.value)
        assert "CLIENT_ID" in str(exc_info.value)

    def test_non_numeric_ids(self):
        with pytest.raises(ConfigurationError):
            LocalEnv.from_environ({"DISCORD_TOKEN": "secret", "GUILD_ID": "abc", "CLIENT_ID": "1"})


class TestOperationalConfig:
    def test_from_documents(self):
        config = OperationalConfig.from_documents(
            {"roles": {"verified": "10"}, "channels": {"verification": 20, "admin": "30", "error": None}}
        )
        assert config == OperationalConfig(
            verified_role_id=10, verification_channel_id=20, admin_channel_id=30, error_channel_id=None
        )

    def test_bad_values_become_none(self):
        config = OperationalConfig.from_documents({"roles": ["not", "a", "dict"], "channels": {"admin": "general"}})
        assert config.verified_role_id is None
        assert config.admin_channel_id is None


class TestBotSettings:
    async def test_operational_before_load_raises(self, local_env, app_config, database):
        settings = BotSettings(local_env, app_config, database.connection)
        with pytest.raises(ConfigurationError):
            settings.operational

    async def test_load_reads_documents(self, settings):
        operational = settings.operational
        assert operational.verified_role_id == 500
        assert operational.verification_channel_id == 600
        assert operational.admin_channel_id == 700
        assert operational.error_channel_id == 800

    async def test_load_is_cached_until_reload(self, settings):
        await settings.set_document("roles", {"verified": "501"})

        assert (await settings.load()).verified_role_id == 500
        assert (await settings.reload()).verified_role_id == 501

    async def test_invalid_json_document_is_skipped(self, settings, database):
        async with database.connection.transaction() as conn:
            await conn.execute("UPDATE config SET value = '{broken' WHERE key = 'channels'")

        operational = await settings.reload()

        assert operational.verified_role_id == 500
        assert operational.admin_channel_id is None

    async def test_reload_failure_raises_configuration_error(self, settings, database):
        await database.shutdown()
        with pytest.raises(ConfigurationError):
            await settings.reload()
