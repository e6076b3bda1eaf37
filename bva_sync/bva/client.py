"""HTTP client for the BVA decision search service."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Iterator, List, Optional
from urllib.parse import quote

import requests
from pydantic import ValidationError

from bva_sync.config import settings
from bva_sync.errors import DecisionSyncError, ErrorKind
from bva_sync.models.decision import DecisionDetail, DecisionSummary, SearchParams, SearchResult

logger = logging.getLogger(__name__)

SEARCH_PATH = "/api/v1/decisions/search"
DECISION_PATH = "/api/v1/decisions/{citation}"
HEALTH_PATH = "/health"
JSON_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}


class DecisionCursor:
    """Walks the search results one page at a time.

    ``next_batch`` returns the next non-empty page of summaries, or ``None``
    once the service reports no more results. A finished (or failed) cursor
    stays finished.
    """

    def __init__(
        self,
        client: "BVAApiClient",
        query: str,
        filters: Dict[str, Any],
        page_size: int,
        delay_seconds: float,
        sleep: Callable[[float], None],
    ) -> None:
        self._client = client
        self._query = query
        self._filters = filters
        self._page_size = page_size
        self._delay_seconds = delay_seconds
        self._sleep = sleep
        self._offset = 0
        self._pages_fetched = 0
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    @property
    def pages_fetched(self) -> int:
        return self._pages_fetched

    def next_batch(self) -> Optional[List[DecisionSummary]]:
        while not self._done:
            if self._pages_fetched and self._delay_seconds > 0:
                self._sleep(self._delay_seconds)
            try:
                result = self._client.search(
                    self._query,
                    offset=self._offset,
                    limit=self._page_size,
                    **self._filters,
                )
            except Exception:
                self._done = True
                raise
            self._pages_fetched += 1
            self._offset += self._page_size
            self._done = not result.has_more
            logger.debug(
                "Fetched page %s (%s decisions, has_more=%s)",
                self._pages_fetched,
                len(result.decisions),
                result.has_more,
            )
            if result.decisions:
                return result.decisions
        return None

    def __iter__(self) -> Iterator[List[DecisionSummary]]:
        while True:
            batch = self.next_batch()
            if batch is None:
                return
            yield batch


class BVAApiClient:
    """Wrapper around the search, detail and health endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        page_size: int | None = None,
        page_delay_seconds: float | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = (base_url or settings.bva_api_base_url).rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.bva_request_timeout_seconds
        self.page_size = page_size or settings.bva_page_size
        if page_delay_seconds is None:
            page_delay_seconds = settings.bva_page_delay_seconds
        self.page_delay_seconds = page_delay_seconds
        self.session = session or requests.Session()
        self._sleep = sleep

    def __enter__(self) -> "BVAApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        not_found_message: Optional[str] = None,
    ) -> tuple[Any, int]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(
                url,
                params=params,
                headers=JSON_HEADERS,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise DecisionSyncError(
                f"Network error: {exc}",
                ErrorKind.TRANSPORT,
                status_code=0,
                context={"url": url},
            ) from exc

        status = response.status_code
        if status == 404 and not_found_message:
            raise DecisionSyncError(
                not_found_message, ErrorKind.NOT_FOUND, status_code=404, context={"url": url}
            )
        if not response.ok:
            raise DecisionSyncError(
                f"API error: {status} {response.reason or ''}".strip(),
                ErrorKind.HTTP_ERROR,
                status_code=status,
                context={"url": url},
            )
        try:
            return response.json(), status
        except ValueError as exc:
            raise DecisionSyncError(
                f"Malformed response body from {path}",
                ErrorKind.INVALID_RESPONSE,
                status_code=status,
                context={"url": url},
            ) from exc

    def search(self, query: str, **filters: Any) -> SearchResult:
        """Run one search request. Filters mirror ``SearchParams`` fields."""
        params = SearchParams(query=query, **filters)
        payload, status = self._get_json(SEARCH_PATH, params=params.model_dump(exclude_none=True))
        raw_decisions = payload.get("decisions") if isinstance(payload, dict) else None
        if not isinstance(raw_decisions, (list, type(None))):
            raise DecisionSyncError(
                "Unexpected search payload: decisions is not a list",
                ErrorKind.INVALID_RESPONSE,
                status_code=status,
            )
        try:
            result = SearchResult.model_validate(
                {**payload, "decisions": []} if isinstance(payload, dict) else payload
            )
        except ValidationError as exc:
            raise DecisionSyncError(
                f"Unexpected search payload: {exc.error_count()} validation errors",
                ErrorKind.INVALID_RESPONSE,
                status_code=status,
            ) from exc

        # One malformed summary drops that summary, not the page.
        for item in raw_decisions or []:
            try:
                result.decisions.append(DecisionSummary.model_validate(item))
            except ValidationError as exc:
                citation = item.get("citation_number") if isinstance(item, dict) else None
                logger.warning(
                    "Skipping malformed search result %s: %s validation errors",
                    citation or "<unknown>",
                    exc.error_count(),
                )
        return result

    def get_decision(self, citation_number: str) -> DecisionDetail:
        """Fetch the full decision for a citation number."""
        path = DECISION_PATH.format(citation=quote(citation_number, safe=""))
        payload, status = self._get_json(
            path, not_found_message=f"Decision not found: {citation_number}"
        )
        try:
            return DecisionDetail.model_validate(payload)
        except ValidationError as exc:
            raise DecisionSyncError(
                f"Unexpected payload for decision {citation_number}: "
                f"{exc.error_count()} validation errors",
                ErrorKind.INVALID_RESPONSE,
                status_code=status,
                context={"citation_number": citation_number},
            ) from exc

    def iterate(
        self,
        query: str,
        decision_type: str = "all",
        start_year: int | None = None,
        end_year: int | None = None,
        sort: str = "date.desc",
    ) -> DecisionCursor:
        """Return a cursor over every page matching the query."""
        filters = {
            "decision_type": decision_type,
            "start_year": start_year,
            "end_year": end_year,
            "sort": sort,
        }
        return DecisionCursor(
            client=self,
            query=query,
            filters=filters,
            page_size=self.page_size,
            delay_seconds=self.page_delay_seconds,
            sleep=self._sleep,
        )

    def health_check(self) -> bool:
        try:
            response = self.session.get(
                f"{self.base_url}{HEALTH_PATH}", timeout=self.timeout_seconds
            )
            return bool(response.ok)
        except Exception as exc:
            logger.debug("BVA API health check failed: %s", exc)
            return False
