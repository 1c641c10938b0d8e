"""Rubika Bot API SDK — Pydantic models, HTTP client, and exceptions.

Usage::

    from sdk import RubikaClient, APIRequestError
    from sdk.models import MessageUpdate, NewMessage
"""

from sdk.client import RubikaClient
from sdk.exceptions import APIRequestError, InvalidJSONError, TransportError

__all__ = [
    "RubikaClient",
    "APIRequestError",
    "InvalidJSONError",
    "TransportError",
]
