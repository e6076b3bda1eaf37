"""BVA API client tests: request shaping, error mapping, pagination."""

import math

import pytest
from pydantic import ValidationError

from bva_sync.bva.client import BVAApiClient
from bva_sync.errors import DecisionSyncError, ErrorKind
from tests.fakes import FakeBVASession, FakeResponse, SleepRecorder, connection_error


def _client(session, sleeper=None):
    return BVAApiClient(
        base_url="http://bva.test/",
        page_size=100,
        page_delay_seconds=0.5,
        session=session,
        sleep=sleeper or SleepRecorder(),
    )


def _citations(n):
    return [f"23-{i:04d}" for i in range(1, n + 1)]


# -- search --------------------------------------------------------------------


def test_search_sends_only_set_parameters():
    session = FakeBVASession(_citations(3))
    result = _client(session).search("tinnitus", decision_type="AMA", start_year=2020)

    call = session.calls[0]
    assert call["url"] == "http://bva.test/api/v1/decisions/search"
    assert call["params"] == {"query": "tinnitus", "decision_type": "AMA", "start_year": 2020}
    assert result.count == 3
    assert [d.citation_number for d in result.decisions] == _citations(3)


@pytest.mark.parametrize(
    "filters",
    [
        {"limit": 0},
        {"limit": 101},
        {"offset": -1},
        {"start_year": 1989},
        {"end_year": 2031},
        {"decision_type": "other"},
        {"sort": "relevance"},
    ],
)
def test_search_rejects_invalid_filters_before_requesting(filters):
    session = FakeBVASession(_citations(1))
    with pytest.raises(ValidationError):
        _client(session).search("veteran", **filters)
    assert session.calls == []


def test_search_rejects_empty_query():
    with pytest.raises(ValidationError):
        _client(FakeBVASession()).search("")


def test_search_malformed_payload_is_invalid_response():
    class _Session(FakeBVASession):
        def get(self, url, params=None, headers=None, timeout=None):
            return FakeResponse(payload={"unexpected": True})

    with pytest.raises(DecisionSyncError) as excinfo:
        _client(_Session()).search("veteran")
    assert excinfo.value.kind is ErrorKind.INVALID_RESPONSE
    assert excinfo.value.status_code == 200


def test_search_drops_only_the_malformed_summary():
    session = FakeBVASession(_citations(3))
    session.summaries[1]["type"] = "Legacy"

    result = _client(session).search("veteran")
    assert [d.citation_number for d in result.decisions] == ["23-0001", "23-0003"]
    assert result.count == 3


def test_search_non_list_decisions_is_invalid_response():
    class _Session(FakeBVASession):
        def get(self, url, params=None, headers=None, timeout=None):
            return FakeResponse(
                payload={"offset": 0, "limit": 20, "has_more": False, "count": 1, "decisions": "23-0001"}
            )

    with pytest.raises(DecisionSyncError) as excinfo:
        _client(_Session()).search("veteran")
    assert excinfo.value.kind is ErrorKind.INVALID_RESPONSE


# -- get_decision --------------------------------------------------------------


def test_get_decision_escapes_citation_in_path():
    session = FakeBVASession(["A23/0001 X"])
    detail = _client(session).get_decision("A23/0001 X")

    assert session.calls[0]["url"] == "http://bva.test/api/v1/decisions/A23%2F0001%20X"
    assert detail.citation_number == "A23/0001 X"
    assert detail.paragraphs[0].order == 1


def test_get_decision_not_found():
    with pytest.raises(DecisionSyncError) as excinfo:
        _client(FakeBVASession()).get_decision("23-9999")
    err = excinfo.value
    assert err.kind is ErrorKind.NOT_FOUND
    assert err.is_not_found
    assert err.status_code == 404
    assert "23-9999" in str(err)


def test_get_decision_server_error_carries_status():
    session = FakeBVASession(["23-0001"], detail_failures={"23-0001": 503})
    with pytest.raises(DecisionSyncError) as excinfo:
        _client(session).get_decision("23-0001")
    assert excinfo.value.kind is ErrorKind.HTTP_ERROR
    assert excinfo.value.status_code == 503
    assert not excinfo.value.is_not_found


def test_get_decision_transport_failure_has_status_zero():
    session = FakeBVASession(["23-0001"], detail_failures={"23-0001": connection_error()})
    with pytest.raises(DecisionSyncError) as excinfo:
        _client(session).get_decision("23-0001")
    assert excinfo.value.kind is ErrorKind.TRANSPORT
    assert excinfo.value.status_code == 0
    assert excinfo.value.message.startswith("Network error")


def test_get_decision_non_json_body():
    class _Session(FakeBVASession):
        def get(self, url, params=None, headers=None, timeout=None):
            return FakeResponse(invalid_json=True)

    with pytest.raises(DecisionSyncError) as excinfo:
        _client(_Session()).get_decision("23-0001")
    assert excinfo.value.kind is ErrorKind.INVALID_RESPONSE


# -- iterate -------------------------------------------------------------------


@pytest.mark.parametrize("total", [1, 99, 100, 101, 250])
def test_iterate_yields_ceil_n_over_page_size_batches(total):
    session = FakeBVASession(_citations(total))
    sleeper = SleepRecorder()
    batches = list(_client(session, sleeper).iterate("veteran"))

    expected_pages = math.ceil(total / 100)
    assert len(batches) == expected_pages
    assert sum(len(b) for b in batches) == total
    assert [c["params"]["offset"] for c in session.search_calls] == [
        100 * i for i in range(expected_pages)
    ]
    assert all(c["params"]["limit"] == 100 for c in session.search_calls)
    assert sleeper.delays == [0.5] * (expected_pages - 1)


def test_iterate_with_no_matches_yields_nothing():
    session = FakeBVASession([])
    sleeper = SleepRecorder()
    assert list(_client(session, sleeper).iterate("veteran")) == []
    assert len(session.search_calls) == 1
    assert sleeper.delays == []


def test_cursor_is_not_restartable():
    session = FakeBVASession(_citations(150))
    cursor = _client(session).iterate("veteran", decision_type="legacy", start_year=2001)

    assert len(cursor.next_batch()) == 100
    assert len(cursor.next_batch()) == 50
    assert cursor.done
    assert cursor.next_batch() is None
    assert list(cursor) == []
    assert cursor.pages_fetched == 2
    assert session.search_calls[0]["params"]["decision_type"] == "legacy"
    assert session.search_calls[0]["params"]["start_year"] == 2001
    assert session.search_calls[0]["params"]["sort"] == "date.desc"


def test_cursor_stops_after_search_failure():
    session = FakeBVASession(_citations(5), search_failure=connection_error())
    cursor = _client(session).iterate("veteran")

    with pytest.raises(DecisionSyncError) as excinfo:
        cursor.next_batch()
    assert excinfo.value.kind is ErrorKind.TRANSPORT
    assert cursor.done
    assert cursor.next_batch() is None


# -- health_check --------------------------------------------------------------


def test_health_check_reports_reachability():
    assert _client(FakeBVASession(healthy=True)).health_check() is True
    assert _client(FakeBVASession(healthy=False)).health_check() is False


def test_health_check_never_raises():
    assert _client(FakeBVASession(healthy=connection_error())).health_check() is False
    assert _client(FakeBVASession(healthy=RuntimeError("boom"))).health_check() is False


def test_client_closes_session_on_exit():
    session = FakeBVASession()
    with _client(session):
        pass
    assert session.closed
