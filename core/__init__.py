"""Framework-agnostic infrastructure shared by ``sdk/`` and ``bot/``.

This package must NEVER import from ``bot/`` or ``sdk/``.
"""

from core.logger import RubikaLogger, mask_token

__all__ = [
    "RubikaLogger",
    "mask_token",
]
