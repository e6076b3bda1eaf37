"""Check that the search service, database and credentials are usable."""

from __future__ import annotations

import logging
import os
import sys
from typing import Callable, List, Tuple

from bva_sync.bva.client import BVAApiClient
from bva_sync.config import settings
from bva_sync.errors import DecisionSyncError
from bva_sync.store.repository import DecisionStore

logger = logging.getLogger(__name__)

ENV_VARS = [
    ("OPENROUTER_API_KEY", True),
    ("BVA_API_BASE_URL", False),
    ("DATABASE_URL", False),
]


def check_api_health(client: BVAApiClient) -> bool:
    if client.health_check():
        logger.info("BVA API is reachable at %s", client.base_url)
        return True
    logger.error("BVA API health check failed at %s", client.base_url)
    return False


def check_api_search(client: BVAApiClient) -> bool:
    try:
        result = client.search(settings.sync_default_query, limit=1)
    except DecisionSyncError as exc:
        logger.error("BVA API search failed: %s", exc)
        return False
    logger.info("Search works, %s total decisions match", result.count)
    if result.decisions:
        logger.info("Sample decision: %s", result.decisions[0].citation_number)
    return True


def check_database(store: DecisionStore) -> bool:
    try:
        store.create_schema()
        total = store.count()
    except DecisionSyncError as exc:
        logger.error("Database check failed: %s", exc)
        return False
    logger.info("Database is accessible, %s decisions stored", total)
    return True


def check_environment() -> bool:
    ok = True
    for name, required in ENV_VARS:
        value = os.environ.get(name)
        if value:
            display = f"{value[:10]}..." if name.endswith("API_KEY") else value
            logger.info("%s: %s", name, display)
        elif name == "OPENROUTER_API_KEY" and settings.openrouter_api_key:
            logger.info("%s: set via .env", name)
        elif required:
            logger.error("%s: NOT SET (required)", name)
            ok = False
        else:
            logger.warning("%s: NOT SET (using default)", name)
    return ok


def run_checks(client: BVAApiClient, store: DecisionStore) -> bool:
    checks: List[Tuple[str, Callable[[], bool]]] = [
        ("BVA API health", lambda: check_api_health(client)),
        ("BVA API search", lambda: check_api_search(client)),
        ("Database", lambda: check_database(store)),
        ("Environment", check_environment),
    ]
    passed = True
    for name, check in checks:
        logger.info("Checking %s...", name)
        if not check():
            passed = False
    return passed


def main() -> None:
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(message)s")
    with BVAApiClient() as client:
        passed = run_checks(client, DecisionStore())
    if passed:
        logger.info("All verification checks passed.")
        return
    logger.error("Some checks failed. Fix the issues above and rerun.")
    sys.exit(1)


if __name__ == "__main__":
    main()
