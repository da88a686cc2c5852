"""Settings management for tubepipe."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from appdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "tubepipe"
APP_AUTHOR = "tubepipe"

# Client version the pbj=1 endpoints accept without a consent flow
HARDCODED_CLIENT_VERSION = "2.20200214.04.00"


def get_config_dir() -> Path:
    """Get the configuration directory."""
    path = Path(user_config_dir(APP_NAME, APP_AUTHOR))
    path.mkdir(parents=True, exist_ok=True)
    return path


@dataclass
class HttpSettings:
    """Transport settings for the default downloader."""

    timeout: float = 30.0  # seconds, whole request
    user_agent: str = (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    )
    accept_language: str = "en-US,en;q=0.9"
    max_retries: int = 2
    base_delay: float = 1.0  # seconds
    max_delay: float = 10.0  # seconds


@dataclass
class ExtractorSettings:
    """Request-shaping settings shared by all extractors."""

    base_url: str = "https://www.youtube.com"
    client_name: str = "1"
    client_version: str = HARDCODED_CLIENT_VERSION
    search_region: str = "US"
    suggestion_url: str = "https://suggestqueries.google.com/complete/search"
    script_engine: str = "dukpy"  # "dukpy" or "node"
    node_path: str = "node"  # executable for the node engine
    script_timeout: float = 10.0  # seconds

    @property
    def client_headers(self) -> dict[str, str]:
        """Headers identifying the site's internal web client."""
        return {
            "X-YouTube-Client-Name": self.client_name,
            "X-YouTube-Client-Version": self.client_version,
        }


@dataclass
class Settings:
    """Application settings."""

    http: HttpSettings = field(default_factory=HttpSettings)
    extractor: ExtractorSettings = field(default_factory=ExtractorSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from file, falling back to defaults."""
        if path is None:
            path = get_config_dir() / "settings.json"

        if not path.exists():
            return cls()

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            return cls._from_dict(data)
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable settings file {path}: {e}")
            return cls()

    def save(self, path: Path | None = None) -> None:
        """Save settings to file."""
        if path is None:
            path = get_config_dir() / "settings.json"

        path.parent.mkdir(parents=True, exist_ok=True)

        # Atomic write: write to temp file then rename to prevent corruption on crash
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp", prefix="settings_")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._to_dict(), f, indent=2)
            os.replace(tmp_path, path)  # Atomic on POSIX
        except Exception:
            # Clean up temp file on error
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    @staticmethod
    def _validate_int(value, default: int, min_val: int = 0, max_val: int | None = None) -> int:
        """Validate and constrain an integer value."""
        if not isinstance(value, int) or isinstance(value, bool):
            return default
        if value < min_val:
            return min_val
        if max_val is not None and value > max_val:
            return max_val
        return value

    @staticmethod
    def _validate_choice(value, default: str, choices: tuple[str, ...]) -> str:
        """Accept ``value`` only if it is one of ``choices``."""
        return value if value in choices else default

    @staticmethod
    def _validate_float(value, default: float, min_val: float = 0.0) -> float:
        """Validate and constrain a numeric value."""
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return default
        return max(float(value), min_val)

    @classmethod
    def _from_dict(cls, data: dict) -> "Settings":
        """Create Settings from a dictionary with validation."""
        settings = cls()

        if "http" in data:
            h = data["http"]
            defaults = HttpSettings()
            settings.http = HttpSettings(
                timeout=cls._validate_float(h.get("timeout"), defaults.timeout, min_val=1.0),
                user_agent=h.get("user_agent", defaults.user_agent),
                accept_language=h.get("accept_language", defaults.accept_language),
                max_retries=cls._validate_int(
                    h.get("max_retries"), defaults.max_retries, min_val=0, max_val=10
                ),
                base_delay=cls._validate_float(h.get("base_delay"), defaults.base_delay),
                max_delay=cls._validate_float(h.get("max_delay"), defaults.max_delay),
            )

        if "extractor" in data:
            e = data["extractor"]
            defaults = ExtractorSettings()
            settings.extractor = ExtractorSettings(
                base_url=e.get("base_url", defaults.base_url).rstrip("/"),
                client_name=e.get("client_name", defaults.client_name),
                client_version=e.get("client_version", defaults.client_version),
                search_region=e.get("search_region", defaults.search_region),
                suggestion_url=e.get("suggestion_url", defaults.suggestion_url),
                script_engine=cls._validate_choice(
                    e.get("script_engine"), defaults.script_engine, ("dukpy", "node")
                ),
                node_path=e.get("node_path", defaults.node_path),
                script_timeout=cls._validate_float(
                    e.get("script_timeout"), defaults.script_timeout, min_val=1.0
                ),
            )

        return settings

    def _to_dict(self) -> dict:
        """Convert Settings to a dictionary."""
        return {
            "http": {
                "timeout": self.http.timeout,
                "user_agent": self.http.user_agent,
                "accept_language": self.http.accept_language,
                "max_retries": self.http.max_retries,
                "base_delay": self.http.base_delay,
                "max_delay": self.http.max_delay,
            },
            "extractor": {
                "base_url": self.extractor.base_url,
                "client_name": self.extractor.client_name,
                "client_version": self.extractor.client_version,
                "search_region": self.extractor.search_region,
                "suggestion_url": self.extractor.suggestion_url,
                "script_engine": self.extractor.script_engine,
                "node_path": self.extractor.node_path,
                "script_timeout": self.extractor.script_timeout,
            },
        }
