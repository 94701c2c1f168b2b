from __future__ import annotations

from enum import StrEnum


class SessionStatus(StrEnum):
    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"


class EntityType(StrEnum):
    FUEL_PURCHASE = "fuel_purchase"
    MILEAGE_SESSION = "mileage_session"
    USER = "user"
