"""Root conftest: shared test configuration."""

import os

# Ensure tests don't accidentally use real API keys or the on-disk database
os.environ.setdefault("OPENROUTER_API_KEY", "sk-or-test-fake-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from bva_sync.bva.client import BVAApiClient
from bva_sync.ingestion.sync import DecisionSyncService
from bva_sync.llm.outcome_classifier import OutcomeClassifier
from bva_sync.store.repository import DecisionStore
from tests.fakes import FakeChatClient, SleepRecorder


@pytest.fixture
def store():
    """Fresh in-memory SQLite store shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    decision_store = DecisionStore(engine=engine)
    decision_store.create_schema()
    yield decision_store
    engine.dispose()


@pytest.fixture
def sleeper():
    return SleepRecorder()


@pytest.fixture
def chat_client():
    return FakeChatClient()


@pytest.fixture
def make_service(store, sleeper, chat_client):
    """Build a sync service over a fake upstream session."""

    def _make(session, chat=None):
        api_client = BVAApiClient(
            base_url="http://bva.test",
            page_size=100,
            page_delay_seconds=0.5,
            session=session,
            sleep=sleeper,
        )
        classifier = OutcomeClassifier(client=chat or chat_client)
        return DecisionSyncService(
            api_client=api_client,
            store=store,
            classifier=classifier,
            item_delay_seconds=0,
        )

    return _make
