"""Settings management for ytsr."""

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path

from appdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "ytsr"
APP_AUTHOR = "ytsr"

DISABLE_KEEPALIVE_ENV = "YTSR_DISABLE_KEEPALIVE"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)


def get_config_dir() -> Path:
    """Get the configuration directory."""
    path = Path(user_config_dir(APP_NAME, APP_AUTHOR))
    path.mkdir(parents=True, exist_ok=True)
    return path


@dataclass
class SearchSettings:
    """Defaults applied to searches that don't set an option explicitly."""

    hl: str = "en"
    gl: str = "US"
    utc_offset_minutes: int = -300
    limit: int = 10
    safe_search: bool = False
    request_timeout: int = 30  # seconds
    disable_keepalive: bool = False  # Pooled connections can trip bot detection
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if os.environ.get(DISABLE_KEEPALIVE_ENV, "").lower() == "true":
            self.disable_keepalive = True

    @classmethod
    def load(cls, path: Path | None = None) -> "SearchSettings":
        """Load settings from file, falling back to defaults."""
        if path is None:
            path = get_config_dir() / "settings.json"

        if not path.exists():
            return cls()

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            return cls._from_dict(data)
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError) as e:
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
                json.dump(asdict(self), f, indent=2)
            os.replace(tmp_path, path)  # Atomic on POSIX
        except Exception:
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
    def _validate_str(value, default: str) -> str:
        if not isinstance(value, str) or not value:
            return default
        return value

    @classmethod
    def _from_dict(cls, data: dict) -> "SearchSettings":
        """Create SearchSettings from a dictionary with validation."""
        settings = cls()

        settings.hl = cls._validate_str(data.get("hl"), settings.hl)
        settings.gl = cls._validate_str(data.get("gl"), settings.gl)
        settings.utc_offset_minutes = cls._validate_int(
            data.get("utc_offset_minutes"), -300, min_val=-720, max_val=840
        )
        settings.limit = cls._validate_int(data.get("limit"), 10, min_val=1, max_val=1000)
        settings.safe_search = bool(data.get("safe_search", settings.safe_search))
        settings.request_timeout = cls._validate_int(
            data.get("request_timeout"), 30, min_val=1, max_val=300
        )
        # The environment variable can force keep-alive off, never back on
        settings.disable_keepalive = settings.disable_keepalive or bool(
            data.get("disable_keepalive", False)
        )
        settings.user_agent = cls._validate_str(data.get("user_agent"), settings.user_agent)

        return settings
