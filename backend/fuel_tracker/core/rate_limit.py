"""Admission gate keyed by client address (slowapi, in-memory storage)."""

from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from fuel_tracker.core.config import get_settings


LOGIN_LIMIT_MESSAGE = "Too many login attempts. Please try again after 15 minutes."
REGISTER_LIMIT_MESSAGE = "Too many registration attempts. Please try again after 1 hour."
WRITE_LIMIT_MESSAGE = "Too many requests, please slow down"

limiter = Limiter(key_func=get_remote_address, enabled=get_settings().rate_limit_enabled)


# Limits are resolved per request so a settings reload picks up new values.
def login_limit() -> str:
    return get_settings().rate_limit_login


def register_limit() -> str:
    return get_settings().rate_limit_register


def write_limit() -> str:
    return get_settings().rate_limit_write
