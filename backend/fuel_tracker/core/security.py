from __future__ import annotations

import bcrypt
from fastapi import HTTPException, Request

from fuel_tracker.core.config import get_settings


# bcrypt only looks at the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72

SESSION_USER_ID = "user_id"
SESSION_USERNAME = "username"


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, *, rounds: int | None = None) -> str:
    cost = rounds if rounds is not None else get_settings().bcrypt_rounds
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=cost)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash stored for the account.
        return False


def session_username(request: Request) -> str | None:
    if not request.session.get(SESSION_USER_ID):
        return None
    username = request.session.get(SESSION_USERNAME)
    return username if isinstance(username, str) and username else None


def require_session_user(request: Request) -> str:
    username = session_username(request)
    if username is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return username
