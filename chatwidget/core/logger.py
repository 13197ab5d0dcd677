"""ChatWidgetLogger — Singleton JSON logger with console and optional rotating file output.

Provides a single, library-wide logger instance that writes structured JSON to
stdout and, when a log directory is configured, to ``<log_dir>/chatwidget.log``
(with automatic rotation).
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional


class _JsonFormatter(logging.Formatter):
    """Format every log record as a single-line JSON object.

    Standard fields (timestamp, level, logger, message, module, func_name)
    are always present.  Any *extra* key-value pairs passed via the ``extra``
    parameter of a logging call are merged into the JSON object automatically,
    giving callers an easy way to attach request context such as
    ``operation``, ``chatbot_id``, ``session_id``, ``status_code``, etc.

    Example::

        logger.info(
            "Attachment deleted",
            extra={"operation": "delete_attachment", "chatbot_id": "bot_1", "vector_id": "v9"},
        )

    Produces::

        {"timestamp": "…", "level": "INFO", …, "operation": "delete_attachment", …}
    """

    # Keys that belong to the standard LogRecord; everything else is extra.
    _BUILTIN_ATTRS: frozenset[str] = frozenset(vars(logging.LogRecord(
        name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None,
    ))) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:
        """Serialize *record* to a JSON string."""
        log_entry: dict = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "func_name": record.funcName,
        }

        for key, value in record.__dict__.items():
            if key not in self._BUILTIN_ATTRS and key not in log_entry:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ChatWidgetLogger:
    """Singleton logger with a console handler and an optional rotating file.

    Usage::

        from chatwidget.core.logger import ChatWidgetLogger

        logger = ChatWidgetLogger.get_logger()
        logger.info("Client ready")
    """

    _instance: Optional["ChatWidgetLogger"] = None
    _logger: Optional[logging.Logger] = None

    LOGGER_NAME: str = "chatwidget"

    # Rotation settings
    _LOG_FILE: str = "chatwidget.log"
    _MAX_BYTES: int = 5 * 1024 * 1024  # 5 MB
    _BACKUP_COUNT: int = 5

    def __new__(cls, level: int | str = logging.INFO, log_dir: str | None = None) -> "ChatWidgetLogger":
        """Ensure only one instance is ever created (Singleton)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._init_logger(level, log_dir)
        return cls._instance

    # ------------------------------------------------------------------
    # Initialisation helpers
    # ------------------------------------------------------------------

    def _init_logger(self, level: int | str, log_dir: str | None) -> None:
        """Create the underlying :class:`logging.Logger` and attach handlers."""
        self._logger = logging.getLogger(self.LOGGER_NAME)
        self._logger.setLevel(level)

        # Avoid duplicate handlers if the module is reloaded.
        if self._logger.handlers:
            return

        formatter = _JsonFormatter()

        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(level)
        stream_handler.setFormatter(formatter)
        self._logger.addHandler(stream_handler)

        if log_dir:
            self._add_file_handler(level, log_dir)

    def _add_file_handler(self, level: int | str, log_dir: str) -> None:
        """Attach a rotating file handler writing into *log_dir*."""
        assert self._logger is not None
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, self._LOG_FILE),
            maxBytes=self._MAX_BYTES,
            backupCount=self._BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(_JsonFormatter())
        self._logger.addHandler(file_handler)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def get_logger(level: int | str = logging.INFO, log_dir: str | None = None) -> logging.Logger:
        """Return the shared :class:`logging.Logger` instance.

        Creates the singleton on first call; subsequent calls return the
        same logger regardless of the *level* and *log_dir* arguments.
        """
        instance = ChatWidgetLogger(level, log_dir)
        assert instance._logger is not None  # guaranteed by __new__
        return instance._logger

    @staticmethod
    def configure(level: int | str, log_dir: str | None = None) -> logging.Logger:
        """Apply *level* to the shared logger and its handlers.

        Adds the rotating file handler when *log_dir* is given and no file
        handler is attached yet.  Used by :mod:`config` once the environment
        has been loaded, since the singleton may already exist by then.
        """
        instance = ChatWidgetLogger(level, log_dir)
        assert instance._logger is not None
        instance._logger.setLevel(level)
        for handler in instance._logger.handlers:
            handler.setLevel(level)
        has_file = any(isinstance(h, RotatingFileHandler) for h in instance._logger.handlers)
        if log_dir and not has_file:
            instance._add_file_handler(level, log_dir)
        return instance._logger

    def cleanup(self) -> None:
        """Flush and close all handlers attached to the logger."""
        if self._logger is None:
            return
        for handler in list(self._logger.handlers):
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)

    def __del__(self) -> None:
        """Best-effort cleanup on garbage collection."""
        self.cleanup()
