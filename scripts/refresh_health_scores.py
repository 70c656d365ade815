#!/usr/bin/env python3
"""Recompute relationship health scores for one or more users.

Decays every circle member's score from its last contact and writes the
results back to Neo4j. Run from repo root with .env (NEO4J_URI, NEO4J_USER,
NEO4J_PASSWORD). Idempotent: safe to run from cron.

Usage: python scripts/refresh_health_scores.py USER_ID [USER_ID ...]
"""
import asyncio
import logging
import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT / "src"))

from dotenv import load_dotenv  # noqa: E402
from neo4j import AsyncGraphDatabase  # noqa: E402

from orbit.application import HealthService, RefreshCompleted  # noqa: E402
from orbit.infrastructure import Neo4jHealthStore  # noqa: E402

load_dotenv(REPO_ROOT / ".env")

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)


async def _refresh(user_ids: list[str]) -> int:
    uri = os.environ.get("NEO4J_URI", "bolt://localhost:7687").strip()
    user = os.environ.get("NEO4J_USER", "neo4j").strip()
    password = os.environ.get("NEO4J_PASSWORD", "password").strip()
    driver = AsyncGraphDatabase.driver(uri, auth=(user, password))
    failed = 0
    try:
        store = Neo4jHealthStore(driver)
        service = HealthService(store, alerts=store)
        for user_id in user_ids:
            result = await service.refresh_health_scores(user_id)
            if isinstance(result, RefreshCompleted):
                if result.schema_ready:
                    print(f"{user_id}: updated {result.updated} health score(s).")
                else:
                    print(f"{user_id}: schema not ready, nothing updated.")
            else:
                failed += 1
                reason = getattr(result, "reason", None) or getattr(result, "message", "")
                print(f"{user_id}: refresh failed: {reason}", file=sys.stderr)
    finally:
        await driver.close()
    return 1 if failed else 0


def main() -> int:
    user_ids = [arg.strip() for arg in sys.argv[1:] if arg.strip()]
    if not user_ids:
        print(__doc__, file=sys.stderr)
        return 2
    return asyncio.run(_refresh(user_ids))


if __name__ == "__main__":
    sys.exit(main())
