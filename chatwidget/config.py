"""Library configuration — environment variables and derived constants.

Reads ``CHAT_WIDGET_ATTACHMENTS_URL``, ``CHAT_WIDGET_TIMEOUT``,
``CHAT_WIDGET_LOG_LEVEL`` and ``CHAT_WIDGET_LOG_DIR`` from the process
environment, falling back to a ``.env`` file found from the working directory
via ``python-dotenv``.  Only ``CHAT_WIDGET_*`` keys are taken from that file and
``os.environ`` is never modified, so importing the library leaves the host
application's environment alone.  All values are resolved at import time so
other modules can ``from chatwidget.config import …`` without repeated lookups.

Session configuration (API base URL, chatbot id, session id) is always passed
to the client explicitly and is never read from here.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import dotenv_values, find_dotenv

# ── core ─────────────────────────────────────────────────────────────────────
from chatwidget.core.logger import ChatWidgetLogger

ENV_PREFIX = "CHAT_WIDGET_"


# ── Helper functions (private) ───────────────────────────────────────────────


def _dotenv_overrides(path: str | None = None) -> dict[str, str]:
    """Return the ``CHAT_WIDGET_*`` entries of a ``.env`` file.

    With no *path*, the file is searched for upwards from the working
    directory.  A missing file yields an empty dict.
    """
    if path is None:
        path = find_dotenv(usecwd=True)
    if not path:
        return {}
    return {
        key: value
        for key, value in dotenv_values(path).items()
        if key.startswith(ENV_PREFIX) and value is not None
    }


def _setting(key: str, dotenv: dict[str, str]) -> str | None:
    """The process environment wins over the ``.env`` file."""
    return os.environ.get(key) or dotenv.get(key)


def _parse_timeout(raw: str | None, default: float) -> float:
    """Parse a positive number of seconds, falling back to *default*."""
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _parse_level(raw: str | None) -> str:
    """Normalise a log level name; unknown names become ``INFO``."""
    name = (raw or "INFO").strip().upper()
    if name not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        return "INFO"
    return name


# ── Environment bootstrap ────────────────────────────────────────────────────

_DOTENV = _dotenv_overrides()


# ── Public constants ─────────────────────────────────────────────────────────

DEFAULT_ATTACHMENTS_URL: str = "http://localhost:8080/api/attachments"
DEFAULT_TIMEOUT: float = 10.0

ATTACHMENTS_URL: str = (_setting("CHAT_WIDGET_ATTACHMENTS_URL", _DOTENV) or DEFAULT_ATTACHMENTS_URL).rstrip("/")
REQUEST_TIMEOUT: float = _parse_timeout(_setting("CHAT_WIDGET_TIMEOUT", _DOTENV), DEFAULT_TIMEOUT)
LOG_LEVEL: str = _parse_level(_setting("CHAT_WIDGET_LOG_LEVEL", _DOTENV))
LOG_DIR: str | None = _setting("CHAT_WIDGET_LOG_DIR", _DOTENV) or None


# ── Logger ───────────────────────────────────────────────────────────────────

logger = ChatWidgetLogger.configure(LOG_LEVEL, LOG_DIR)

logger.debug(
    "Config loaded",
    extra={"attachments_url": ATTACHMENTS_URL, "timeout": REQUEST_TIMEOUT, "log_dir": LOG_DIR},
)
