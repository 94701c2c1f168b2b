from __future__ import annotations

from fastapi import APIRouter

from fuel_tracker.api.v1.endpoints import auth, daily_mileage, trips


api_router = APIRouter()

# Auth routes stay public; record routes carry their own session check.
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(trips.router, prefix="/trips", tags=["trips"])
api_router.include_router(daily_mileage.router, prefix="/daily-mileage", tags=["daily-mileage"])
