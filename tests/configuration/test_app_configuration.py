from pathlib import Path

from peechi.configuration.app_configuration import AppConfig


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "app_config.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_uses_defaults(tmp_path):
    config = AppConfig(tmp_path / "absent.yml")

    assert config.data == {}
    assert config.points_enabled is True
    assert config.report_ttl_seconds == 1800
    assert config.report_sweep_interval_seconds == 600
    assert config.max_pending_reports == 1000
    assert config.report_modal_timeout_seconds == 300
    assert config.verify_modal_timeout_seconds == 120
    assert config.presence_text == "engineers grow"
    assert config.database_path == Path("./data/peechi.db").resolve()


def test_values_from_file(tmp_path):
    path = _write(
        tmp_path,
        """
database:
  path: ./var/bot.db
points:
  enabled: false
reports:
  ttl_seconds: 60
  max_pending: 10
interactions:
  verify_modal_timeout_seconds: 30
presence:
  watching: the workshop
""",
    )
    config = AppConfig(path)

    assert config.points_enabled is False
    assert config.report_ttl_seconds == 60
    assert config.max_pending_reports == 10
    assert config.verify_modal_timeout_seconds == 30
    assert config.report_modal_timeout_seconds == 300
    assert config.presence_text == "the workshop"
    assert config.database_path == Path("./var/bot.db").resolve()
    assert config.get("points") == {"enabled": False}


def test_non_mapping_file_uses_defaults(tmp_path):
    config = AppConfig(_write(tmp_path, "- just\n- a list\n"))
    assert config.data == {}


def test_invalid_yaml_uses_defaults(tmp_path):
    config = AppConfig(_write(tmp_path, "points: [unclosed\n"))
    assert config.points_enabled is True


def test_section_of_wrong_type_is_ignored(tmp_path):
    config = AppConfig(_write(tmp_path, "reports: 5\n"))
    assert config.report_ttl_seconds == 1800


def test_reload_picks_up_changes(tmp_path):
    path = _write(tmp_path, "points:\n  enabled: true\n")
    config = AppConfig(path)
    assert config.points_enabled is True

    path.write_text("points:\n  enabled: false\n", encoding="utf-8")
    config.reload()

    assert config.points_enabled is False
