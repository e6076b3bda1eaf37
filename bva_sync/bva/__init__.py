"""Client for the upstream decision search service."""

from .client import BVAApiClient, DecisionCursor

__all__ = ["BVAApiClient", "DecisionCursor"]
