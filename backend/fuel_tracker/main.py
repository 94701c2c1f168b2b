from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import Path
from typing import Any

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.middleware.sessions import SessionMiddleware

import fuel_tracker.models  # noqa: F401  (register models with Base.metadata)
from fuel_tracker.api.v1.router import api_router
from fuel_tracker.core.config import get_settings
from fuel_tracker.core.db import engine, get_engine
from fuel_tracker.core.errors import install_exception_handlers
from fuel_tracker.core.log_config import configure_logging
from fuel_tracker.core.rate_limit import limiter
from fuel_tracker.models.base import Base


logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "fuel_tracker_session"
DATABASE_UNAVAILABLE_MESSAGE = "Database unavailable"


@lru_cache
def _repo_head_revision() -> str | None:
    default_alembic_path = Path(__file__).resolve().parents[1] / "alembic.ini"
    alembic_path = Path(os.getenv("ALEMBIC_CONFIG_PATH", str(default_alembic_path)))
    if not alembic_path.exists():
        return None

    cfg = Config(str(alembic_path))
    script = ScriptDirectory.from_config(cfg)
    return script.get_current_head()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    if settings.db_auto_create:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)
    if settings.uses_insecure_session_secret:
        logger.warning("SESSION_SECRET is not set; using an insecure development secret")

    app = FastAPI(title="Fuel Tracker", version="1.0", lifespan=lifespan)

    app.state.limiter = limiter
    install_exception_handlers(app)

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=SESSION_COOKIE_NAME,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
        https_only=settings.session_https_only,
    )
    if settings.cors_origin_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origin_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/healthz/deep")
    async def deep_healthz(db_engine: AsyncEngine = Depends(get_engine)) -> JSONResponse:
        payload: dict[str, Any] = {
            "status": "ok",
            "checks": {
                "database": "ok",
            },
        }
        try:
            async with db_engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
                table_names = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
                has_alembic_version = "alembic_version" in table_names
                table_count = len([name for name in table_names if name != "alembic_version"])
                current_revision: str | None = None
                if has_alembic_version:
                    current_revision = await conn.scalar(text("SELECT version_num FROM alembic_version LIMIT 1"))
        except Exception:
            logger.exception("Deep health check failed")
            payload["status"] = "error"
            payload["checks"]["database"] = "error"
            payload["error"] = DATABASE_UNAVAILABLE_MESSAGE
            return JSONResponse(status_code=503, content=payload)

        repo_head = _repo_head_revision()
        if not has_alembic_version:
            # Tables created at startup without alembic count as a usable schema.
            if table_count == 0:
                migration_state = "empty_schema"
            elif get_settings().db_auto_create:
                migration_state = "auto_created"
            else:
                migration_state = "missing_alembic_version"
        elif repo_head is None:
            migration_state = "unknown_repo_head"
        elif current_revision == repo_head:
            migration_state = "up_to_date"
        else:
            migration_state = "behind_head"

        payload["checks"]["migration"] = {
            "state": migration_state,
            "table_count": table_count,
            "has_alembic_version": has_alembic_version,
            "current_revision": current_revision,
            "repo_head_revision": repo_head,
        }

        healthy = migration_state in {"up_to_date", "empty_schema", "auto_created"}
        payload["status"] = "ok" if healthy else "degraded"
        return JSONResponse(status_code=200 if healthy else 503, content=payload)

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
