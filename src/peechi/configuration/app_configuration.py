from __future__ import annotations
from pathlib import Path
from typing import Any, Dict
import yaml

from peechi.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name, {})
    return value if isinstance(value, dict) else {}


class AppConfig:
    """Accessor around the YAML application configuration.

    The class caches the contents of ``./config/app_config.yml`` and exposes
    typed properties with defaults for every operational knob. A missing or
    unreadable file yields the defaults.
    """

    def __init__(self, config_path: Path = CONFIG_PATH) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            logger.warning("[APP CONFIGURATION] Config file %s not found, using defaults.", self.config_path)
            return {}
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            logger.error("[APP CONFIGURATION] Config %s is not a mapping, using defaults.", self.config_path)
            return {}
        return data

    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping."""
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def database_path(self) -> Path:
        value = _section(self._data, "database").get("path", "./data/peechi.db")
        return Path(str(value)).resolve()

    @property
    def points_enabled(self) -> bool:
        """Whether chat messages earn points. Default True."""
        return bool(_section(self._data, "points").get("enabled", True))

    @property
    def report_ttl_seconds(self) -> float:
        return float(_section(self._data, "reports").get("ttl_seconds", 30 * 60))

    @property
    def report_sweep_interval_seconds(self) -> float:
        return float(_section(self._data, "reports").get("sweep_interval_seconds", 10 * 60))

    @property
    def max_pending_reports(self) -> int:
        return int(_section(self._data, "reports").get("max_pending", 1000))

    @property
    def report_modal_timeout_seconds(self) -> float:
        """How long to wait for report details before giving up. Default 5 minutes."""
        return float(_section(self._data, "interactions").get("report_modal_timeout_seconds", 300))

    @property
    def verify_modal_timeout_seconds(self) -> float:
        return float(_section(self._data, "interactions").get("verify_modal_timeout_seconds", 120))

    @property
    def presence_text(self) -> str:
        return str(_section(self._data, "presence").get("watching", "engineers grow"))
