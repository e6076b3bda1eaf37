"""Error types shared by the fetch client, store and sync pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Tags the failure category so callers can branch without subclass checks."""

    TRANSPORT = "transport"
    HTTP_ERROR = "http_error"
    NOT_FOUND = "not_found"
    INVALID_RESPONSE = "invalid_response"
    STORAGE = "storage"


class DecisionSyncError(Exception):
    """Infrastructure failure raised by the pipeline's external collaborators.

    ``status_code`` carries the upstream HTTP status, or 0 when no HTTP
    response was obtained (unreachable service, storage failure).
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        status_code: int = 0,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code
        self.context = context or {}

    @property
    def is_not_found(self) -> bool:
        return self.kind is ErrorKind.NOT_FOUND

    def __repr__(self) -> str:
        return (
            f"DecisionSyncError(kind={self.kind.value!r}, "
            f"status_code={self.status_code}, message={self.message!r})"
        )
