from fuel_tracker.models.audit_log import AuditLog
from fuel_tracker.models.fuel_purchase import FuelPurchase
from fuel_tracker.models.mileage_session import MileageSession
from fuel_tracker.models.user import User

__all__ = [
    "AuditLog",
    "FuelPurchase",
    "MileageSession",
    "User",
]
