"""FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException

from bva_sync.config import settings
from bva_sync.errors import DecisionSyncError
from bva_sync.ingestion.sync import DecisionSyncService
from bva_sync.models.decision import CanonicalDecisionRecord
from bva_sync.models.sync import SyncMetadata, SyncOptions, SyncRunSummary
from bva_sync.store.repository import DecisionStore

logger = logging.getLogger(__name__)


def create_app(
    sync_service: DecisionSyncService | None = None,
    store: DecisionStore | None = None,
) -> FastAPI:
    """Build the API around an injected (or default) sync service and store."""
    if store is None:
        store = sync_service.store if sync_service else DecisionStore()
    store.create_schema()
    service = sync_service or DecisionSyncService(store=store)

    app = FastAPI(
        title="BVA Decision Sync",
        description="Synchronizes BVA decisions into a local store",
        version="0.1.0",
    )

    @app.get("/health")
    def health() -> dict[str, object]:
        """Readiness probe including upstream reachability."""
        return {"status": "ok", "bva_api": service.api_client.health_check()}

    @app.post("/sync", response_model=SyncRunSummary)
    def run_sync(options: SyncOptions) -> SyncRunSummary:
        """Run one sync synchronously and return its statistics."""
        try:
            return service.sync_decisions(options)
        except DecisionSyncError as exc:
            logger.error("Sync aborted: %s", exc)
            raise HTTPException(
                status_code=502,
                detail={
                    "error": exc.message,
                    "kind": exc.kind.value,
                    "status_code": exc.status_code,
                },
            ) from exc

    @app.get("/sync/status", response_model=SyncMetadata)
    def sync_status() -> SyncMetadata:
        metadata = store.get_sync_metadata()
        if metadata is None:
            raise HTTPException(status_code=404, detail="No sync has completed yet.")
        return metadata

    @app.get("/decisions/{citation_number}", response_model=CanonicalDecisionRecord)
    def get_decision(citation_number: str) -> CanonicalDecisionRecord:
        record = store.get_by_citation(citation_number)
        if record is None:
            raise HTTPException(status_code=404, detail=f"Decision {citation_number} not found.")
        return record

    return app


app = create_app()


def main() -> None:
    import uvicorn

    logging.basicConfig(level=settings.log_level)
    uvicorn.run("bva_sync.api.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
