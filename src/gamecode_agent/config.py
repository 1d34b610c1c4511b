"""
Configuration and Logging Setup

Provides centralized configuration and logging for the game code agent.
Settings come from environment variables (optionally a .env file).

Usage:
    from gamecode_agent.config import configure_logging, SiteConfig

    # Configure at application startup
    configure_logging()

    site = SiteConfig.from_env()
"""

import json
import logging
import os
import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Default configuration
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s: %(message)s"

# Valid log levels
VALID_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Sessions older than this are evicted on access
SESSION_TTL_MS = 24 * 60 * 60 * 1000

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class SiteConfig:
    """
    Target site layout and timing.

    The URL paths and selectors describe the markup the automation relies on:
    a login form, a code submission form with per-player checkboxes, and a
    feedback region whose children carry ``messages--*`` classes.
    """

    base_url: str = "https://aadl.org"
    login_path: str = "/user/login"
    submit_path: str = "/summergame/player/0/gamecode"

    # Login form
    username_selector: str = 'input[name="name"]'
    password_selector: str = 'input[name="pass"]'
    login_submit_selector: str = 'input[type="submit"]'

    # Code submission form
    code_input_selector: str = 'input[id="edit-code-text"]'
    submit_primary_selector: str = 'input[id="edit-submit"][type="submit"]'
    submit_fallback_selector: str = 'input[value="Submit"]'
    checkbox_selector: str = 'input[type="checkbox"]'

    # Feedback region rendered after a submission
    feedback_selector: str = ".messages__wrapper .messages"

    # Session persistence
    session_file: Path = field(default_factory=lambda: Path("sessions.json"))
    session_ttl_ms: int = SESSION_TTL_MS

    # Timeouts in ms
    element_timeout_ms: int = 10000
    network_idle_timeout_ms: int = 30000
    action_timeout_ms: int = 10000

    @property
    def origin(self) -> str:
        parts = urlsplit(self.base_url)
        return f"{parts.scheme}://{parts.netloc}"

    @property
    def login_url(self) -> str:
        return self.base_url.rstrip("/") + self.login_path

    @property
    def submit_url(self) -> str:
        return self.base_url.rstrip("/") + self.submit_path

    @classmethod
    def from_env(cls) -> "SiteConfig":
        """
        Create SiteConfig from environment variables.

        Environment variables:
            GAMECODE_BASE_URL: site root (default: https://aadl.org)
            SESSION_FILE: path of the session store (default: sessions.json)
            ELEMENT_TIMEOUT: int in ms (default: 10000)
            NETWORK_IDLE_TIMEOUT: int in ms (default: 30000)
            ACTION_TIMEOUT: int in ms (default: 10000)
        """
        return cls(
            base_url=os.getenv("GAMECODE_BASE_URL", "https://aadl.org"),
            session_file=Path(os.getenv("SESSION_FILE", "sessions.json")),
            element_timeout_ms=int(os.getenv("ELEMENT_TIMEOUT", "10000")),
            network_idle_timeout_ms=int(os.getenv("NETWORK_IDLE_TIMEOUT", "30000")),
            action_timeout_ms=int(os.getenv("ACTION_TIMEOUT", "10000")),
        )


def get_log_level() -> int:
    """
    Get the log level from LOG_LEVEL environment variable.

    Returns:
        Logging level constant (e.g., logging.INFO)
    """
    level_str = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    if level_str not in VALID_LEVELS:
        print(
            f"Warning: Invalid LOG_LEVEL '{level_str}'. "
            f"Valid values: {', '.join(VALID_LEVELS.keys())}. "
            f"Using {DEFAULT_LOG_LEVEL}.",
            file=sys.stderr,
        )
        return VALID_LEVELS[DEFAULT_LOG_LEVEL]

    return VALID_LEVELS[level_str]


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log collectors."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            entry["error"] = {
                "name": type(exc).__name__,
                "message": str(exc),
                "stack": "".join(traceback.format_exception(*record.exc_info)),
            }
        return json.dumps(entry)


def configure_logging(
    level: Optional[int] = None,
    verbose: bool = False,
    json_format: Optional[bool] = None,
) -> None:
    """
    Configure logging for the game code agent.

    Should be called once at application startup.

    Args:
        level: Override log level (default: from LOG_LEVEL env var)
        verbose: Use detailed format with timestamps (default: simple format)
        json_format: Emit JSON lines (default: LOG_FORMAT=json)

    Environment Variables:
        LOG_LEVEL: Set to DEBUG, INFO, WARNING, ERROR, or CRITICAL
        LOG_FORMAT: Set to "json" for structured output
    """
    if level is None:
        level = get_log_level()
    if json_format is None:
        json_format = os.getenv("LOG_FORMAT", "").lower() == "json"

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT if verbose else LOG_FORMAT_SIMPLE))

    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True,  # Override any existing configuration
    )

    logging.getLogger("gamecode_agent").setLevel(level)

    # Quiet noisy third-party loggers in non-debug mode
    if level > logging.DEBUG:
        logging.getLogger("playwright").setLevel(logging.WARNING)
        logging.getLogger("asyncio").setLevel(logging.WARNING)
