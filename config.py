"""Application configuration — environment variables and derived constants.

Loads ``BOT_TOKEN`` and the polling knobs from the environment via
``python-dotenv``.  All values are resolved at import time so other modules
can ``from config import …`` without repeated lookups.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv

# ── core ─────────────────────────────────────────────────────────────────────
from core.logger import RubikaLogger

# ── Environment bootstrap ────────────────────────────────────────────────────
load_dotenv()

logger = RubikaLogger.get_logger()


# ── Helper functions (private) ───────────────────────────────────────────────


def _parse_int(raw: str | None, default: int) -> int:
    """Parse *raw* as a positive int, falling back to *default*."""
    if not raw:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("Ignoring non-integer config value", extra={"raw": raw, "default": default})
        return default
    return value if value > 0 else default


def _parse_float(raw: str | None, default: float) -> float:
    """Parse *raw* as a non-negative float, falling back to *default*."""
    if not raw:
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        logger.warning("Ignoring non-numeric config value", extra={"raw": raw, "default": default})
        return default
    return value if value >= 0 else default


# ── Public constants ─────────────────────────────────────────────────────────

BOT_TOKEN: str | None = os.environ.get("BOT_TOKEN")
API_URL: str = os.environ.get("RUBIKA_API_URL", "https://botapi.rubika.ir/v3").rstrip("/")
REQUEST_TIMEOUT: int = _parse_int(os.environ.get("REQUEST_TIMEOUT"), 10)

# Page-size hint sent with every getUpdates call.
POLL_LIMIT: int = _parse_int(os.environ.get("POLL_LIMIT"), 100)
# Pause between two steady-state polls, in seconds.
POLL_INTERVAL: float = _parse_float(os.environ.get("POLL_INTERVAL"), 0.1)
# NewMessage updates older than this many seconds are dropped.
STALE_AFTER_SECONDS: float = _parse_float(os.environ.get("STALE_AFTER_SECONDS"), 20.0)


# ── Startup diagnostics ─────────────────────────────────────────────────────

if BOT_TOKEN:
    logger.info("Config loaded — BOT_TOKEN is set", extra={"api_url": API_URL})
else:
    logger.warning("Config loaded — BOT_TOKEN is NOT set")

logger.debug(
    "Polling settings resolved",
    extra={
        "poll_limit": POLL_LIMIT,
        "poll_interval": POLL_INTERVAL,
        "stale_after_seconds": STALE_AFTER_SECONDS,
        "request_timeout": REQUEST_TIMEOUT,
    },
)
