from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import create_async_engine

# Script entrypoint: ensure `backend/` is importable.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from fuel_tracker.services.invariants import collect_violations  # noqa: E402


async def _main() -> int:
    url = os.environ.get("DATABASE_URL")
    if not url:
        print("DATABASE_URL is required.", file=sys.stderr)
        return 2

    engine = create_async_engine(url, pool_pre_ping=True)
    try:
        async with engine.connect() as conn:
            violations = await collect_violations(conn)
    finally:
        await engine.dispose()

    if violations:
        print("DB invariants violated:", file=sys.stderr)
        for name, count in violations.items():
            print(f"  {name}: {count} row(s)", file=sys.stderr)
        return 1

    print("DB invariants ok (mileage readings ordered, fuel purchases complete).")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(_main()))
