"""RubikaLogger — singleton JSON logger with console and rotating file output.

Every module obtains the same :class:`logging.Logger` through
:meth:`RubikaLogger.get_logger` and attaches request-specific context
(``chat_id``, ``method``, ``offset_id`` …) via the ``extra`` argument.

Two environment variables are read directly, since ``config`` itself logs
while it is being imported:

* ``RUBIKA_LOG_LEVEL``: level name such as ``DEBUG``; default ``INFO``.
* ``RUBIKA_LOG_DIR``: directory of ``rubika.log``; default ``logs``.
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

_REDACTED_KEYS: frozenset[str] = frozenset({"token", "bot_token"})


def mask_token(token: str) -> str:
    """Return *token* reduced to its first 8 characters plus ``***``."""
    return f"{token[:8]}***"


class _JsonFormatter(logging.Formatter):
    """Render a record as one JSON line.

    ``extra`` keys become top-level fields::

        logger.info("Update scheduled", extra={"chat_id": "b0X", "kind": "NewMessage"})
        # {"timestamp": "…", "level": "INFO", …, "chat_id": "b0X", "kind": "NewMessage"}

    Values under ``token``/``bot_token`` are masked unless already masked.
    """

    _RECORD_FIELDS: frozenset[str] = frozenset(
        vars(logging.makeLogRecord({})).keys() | {"message", "asctime", "taskName"}
    )

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "func_name": record.funcName,
        }
        for key, value in self._extras(record).items():
            # Standard fields win over same-named extras.
            entry.setdefault(key, value)
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)

    def _extras(self, record: logging.LogRecord) -> dict[str, Any]:
        extras = {}
        for key, value in vars(record).items():
            if key in self._RECORD_FIELDS:
                continue
            if key in _REDACTED_KEYS and isinstance(value, str) and not value.endswith("***"):
                value = mask_token(value)
            extras[key] = value
        return extras


class RubikaLogger:
    """Process-wide owner of the ``rubika`` logger.

    Usage::

        from core.logger import RubikaLogger

        logger = RubikaLogger.get_logger()
        logger.info("Robot started")
    """

    _instance: Optional["RubikaLogger"] = None

    _LOGGER_NAME: str = "rubika"
    _LOG_FILE: str = "rubika.log"
    _MAX_BYTES: int = 5 * 1024 * 1024  # 5 MB
    _BACKUP_COUNT: int = 5

    def __new__(cls, level: Optional[int] = None) -> "RubikaLogger":
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._logger = logging.getLogger(cls._LOGGER_NAME)
            instance._configure(level if level is not None else cls._level_from_env())
            cls._instance = instance
        return cls._instance

    @staticmethod
    def _level_from_env() -> int:
        name = os.environ.get("RUBIKA_LOG_LEVEL", "INFO").strip().upper()
        level = logging.getLevelName(name)
        return level if isinstance(level, int) else logging.INFO

    def _configure(self, level: int) -> None:
        self._logger.setLevel(level)
        self._logger.propagate = False

        # Handlers survive a module reload; attach them only once.
        if self._logger.handlers:
            return

        log_dir = os.environ.get("RUBIKA_LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)

        self._attach(logging.StreamHandler(), level)
        self._attach(
            RotatingFileHandler(
                os.path.join(log_dir, self._LOG_FILE),
                maxBytes=self._MAX_BYTES,
                backupCount=self._BACKUP_COUNT,
                encoding="utf-8",
            ),
            level,
        )

    def _attach(self, handler: logging.Handler, level: int) -> None:
        handler.setLevel(level)
        handler.setFormatter(_JsonFormatter())
        self._logger.addHandler(handler)

    @staticmethod
    def get_logger(level: Optional[int] = None) -> logging.Logger:
        """Return the shared logger; *level* only counts on the first call."""
        return RubikaLogger(level)._logger

    def cleanup(self) -> None:
        """Flush, close and detach every handler (used on shutdown)."""
        for handler in list(self._logger.handlers):
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)
