"""Sync decisions from the BVA search service into the local store."""

from __future__ import annotations

import argparse
import logging
import time
from typing import Callable, List, Optional

from bva_sync.bva.client import BVAApiClient
from bva_sync.config import settings
from bva_sync.errors import DecisionSyncError
from bva_sync.ingestion.parser import parse_decision
from bva_sync.llm.outcome_classifier import OutcomeClassifier
from bva_sync.models.decision import DecisionSummary
from bva_sync.models.sync import OutcomeResult, SyncMetadata, SyncOptions, SyncRunSummary
from bva_sync.store.repository import DecisionStore

logger = logging.getLogger(__name__)


class DecisionSyncService:
    """Fetches, classifies and stores decisions one at a time.

    Failures of a single decision are recorded on the run summary and the run
    moves on. Only a failure of the page iteration itself aborts the run; the
    summary is finalized first and stays available as ``last_summary``.
    """

    def __init__(
        self,
        api_client: BVAApiClient | None = None,
        store: DecisionStore | None = None,
        classifier: OutcomeClassifier | None = None,
        item_delay_seconds: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.api_client = api_client or BVAApiClient()
        self.store = store or DecisionStore()
        self._classifier = classifier
        if item_delay_seconds is None:
            item_delay_seconds = settings.sync_item_delay_seconds
        self.item_delay_seconds = item_delay_seconds
        self._sleep = sleep
        self.last_summary: Optional[SyncRunSummary] = None

    @property
    def classifier(self) -> OutcomeClassifier:
        if self._classifier is None:
            self._classifier = OutcomeClassifier()
        return self._classifier

    def _resolve_classifier(self) -> OutcomeClassifier | None:
        try:
            return self.classifier
        except Exception as exc:
            logger.warning("Outcome classifier unavailable, outcomes will be Unknown: %s", exc)
            return None

    def sync_decisions(self, options: SyncOptions | None = None) -> SyncRunSummary:
        options = options or SyncOptions()
        summary = SyncRunSummary()
        self.last_summary = summary
        query = options.query or settings.sync_default_query
        logger.info('Starting sync with query "%s"', query)

        classifier = self._resolve_classifier() if options.extract_outcomes else None
        try:
            cursor = self.api_client.iterate(
                query,
                decision_type=options.decision_type,
                start_year=options.start_year,
                end_year=options.end_year,
                sort="date.desc",
            )
            for batch in cursor:
                for decision in batch:
                    if summary.total >= options.max_decisions:
                        break
                    summary.total += 1
                    self._sync_one(decision, options, summary, classifier)
                    if self.item_delay_seconds > 0:
                        self._sleep(self.item_delay_seconds)
                if summary.total >= options.max_decisions:
                    logger.info("Reached max decisions limit: %s", options.max_decisions)
                    break

            summary.finalize()
            self.store.write_sync_metadata(SyncMetadata.from_summary(summary))
        except Exception:
            if summary.end_time is None:
                summary.finalize()
            logger.exception("Sync failed after %s decisions", summary.total)
            raise

        self._log_summary(summary)
        return summary

    def _sync_one(
        self,
        decision: DecisionSummary,
        options: SyncOptions,
        summary: SyncRunSummary,
        classifier: OutcomeClassifier | None,
    ) -> None:
        citation = decision.citation_number
        try:
            if options.skip_existing and self.store.exists(citation):
                summary.skipped += 1
                logger.info("Skipping existing decision: %s", citation)
                return

            logger.info("Fetching decision: %s", citation)
            detail = self.api_client.get_decision(citation)
            record = parse_decision(detail)

            if options.extract_outcomes:
                logger.info("Extracting outcome for: %s", citation)
                if classifier is None:
                    result = OutcomeResult.unknown()
                else:
                    result = classifier.classify(citation, detail.date, detail.raw_text)
                record = record.model_copy(
                    update={"outcome": result.outcome, "outcome_confidence": result.confidence}
                )

            self.store.upsert_decision(record)
        except DecisionSyncError as exc:
            summary.record_error(decision.id, citation, exc.message, exc.kind.value)
            logger.error("Error syncing %s: %s", citation, exc)
            return
        except Exception as exc:
            summary.record_error(decision.id, citation, str(exc) or exc.__class__.__name__)
            logger.exception("Unexpected error syncing %s", citation)
            return

        summary.synced += 1
        logger.info("Synced: %s (%s/%s)", citation, summary.synced, options.max_decisions)

    @staticmethod
    def _log_summary(summary: SyncRunSummary) -> None:
        logger.info(
            "Sync completed: total=%s synced=%s skipped=%s errors=%s duration=%.2fs",
            summary.total,
            summary.synced,
            summary.skipped,
            len(summary.errors),
            (summary.duration_ms or 0) / 1000,
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sync BVA decisions into the local database")
    parser.add_argument("--query", default=None, help="Search query (defaults to SYNC_DEFAULT_QUERY)")
    parser.add_argument("--start-year", type=int, default=None)
    parser.add_argument("--end-year", type=int, default=None)
    parser.add_argument("--decision-type", choices=["AMA", "legacy", "all"], default="all")
    parser.add_argument("--max-decisions", type=int, default=settings.sync_max_decisions)
    parser.add_argument("--skip-existing", action="store_true", help="Skip citations already stored")
    parser.add_argument("--no-outcomes", action="store_true", help="Do not classify outcomes")
    return parser


def main(argv: List[str] | None = None) -> None:
    logging.basicConfig(level=settings.log_level)
    args = build_parser().parse_args(argv)
    options = SyncOptions(
        query=args.query,
        start_year=args.start_year,
        end_year=args.end_year,
        decision_type=args.decision_type,
        max_decisions=args.max_decisions,
        skip_existing=args.skip_existing,
        extract_outcomes=not args.no_outcomes,
    )
    store = DecisionStore()
    store.create_schema()
    with BVAApiClient() as api_client:
        service = DecisionSyncService(api_client=api_client, store=store)
        summary = service.sync_decisions(options)

    print("\nSync summary")
    print(f"Total: {summary.total} | Synced: {summary.synced} | Skipped: {summary.skipped}")
    print(f"Errors: {len(summary.errors)}")
    for entry in summary.errors:
        print(f"  - {entry.citation_number}: {entry.error}")
    print(f"Duration: {(summary.duration_ms or 0) / 1000:.2f}s")


if __name__ == "__main__":
    main()
