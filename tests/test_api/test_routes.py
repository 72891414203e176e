"""
HTTP surface tests: status codes, response shapes and error bodies.
"""

import json
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from market_pulse.config import ConfigState, DatabaseConfig, LoggingConfig
from market_pulse.shared.enums import PulseKind
from market_pulse.shared.errors import StorageError
from market_pulse_api.main import create_app
from tests.fixtures.pulses import VALID_FIELDS, pulse_payload

# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def client():
    config = ConfigState(
        database=DatabaseConfig(url="sqlite:///:memory:"),
        logging=LoggingConfig(level="WARNING", json_logs=False),
    )
    with TestClient(create_app(config)) as test_client:
        yield test_client


@pytest.fixture
def apple(client):
    response = client.post(
        "/api/markets",
        json={"name": "Apple", "symbol": "AAPL", "type": "EQUITY", "description": "Apple Inc."},
    )
    assert response.status_code == 201
    return response.json()


# ============================================================================
# MARKETS
# ============================================================================


def test_root_and_health(client):
    assert client.get("/").status_code == 200
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["services"] == {"database": True}
    assert client.get("/ready").json() == {"status": "ready"}


def test_health_reports_unreachable_database(client):
    client.app.state.db.ping = AsyncMock(return_value=False)

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["detail"]["status"] == "unhealthy"


def test_create_market(apple):
    assert apple["id"]
    assert apple["symbol"] == "AAPL"
    assert apple["type"] == "EQUITY"
    assert apple["description"] == "Apple Inc."
    assert "createdAt" in apple


def test_duplicate_symbol_conflict(client, apple):
    response = client.post(
        "/api/markets", json={"name": "Other", "symbol": "AAPL", "type": "EQUITY"}
    )
    assert response.status_code == 409
    assert "error" in response.json()


def test_invalid_market_type(client):
    response = client.post(
        "/api/markets", json={"name": "Thing", "symbol": "THG", "type": "STOCK"}
    )
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "type"


def test_list_markets_with_counts(client, apple):
    client.post("/api/flow", json=pulse_payload(PulseKind.FLOW, apple["id"]))

    [market] = client.get("/api/markets").json()

    assert market["name"] == "Apple"
    assert market["_count"]["flowPulses"] == 1
    assert market["_count"]["sentimentPulses"] == 0
    assert len(market["_count"]) == 6


def test_latest_snapshot(client, apple):
    client.post("/api/risk", json=pulse_payload(PulseKind.RISK, apple["id"], rtm=10))
    client.post("/api/risk", json=pulse_payload(PulseKind.RISK, apple["id"], rtm=20))

    body = client.get(f"/api/markets/{apple['id']}/latest").json()

    assert body["risk"]["rtm"] == 20
    assert body["sentiment"] is None


def test_latest_snapshot_unknown_market(client):
    assert client.get("/api/markets/nope/latest").status_code == 404


# ============================================================================
# PULSES
# ============================================================================


@pytest.mark.parametrize("kind", list(PulseKind))
def test_create_and_list_each_kind(client, apple, kind):
    response = client.post(f"/api/{kind.value}", json=pulse_payload(kind, apple["id"]))
    assert response.status_code == 201
    created = response.json()

    for alias, value in VALID_FIELDS[kind].items():
        assert created[alias] == value
    assert created["market"] == {"name": "Apple", "symbol": "AAPL"}

    listed = client.get(f"/api/{kind.value}", params={"marketId": apple["id"]}).json()
    assert listed == [created]


def test_out_of_bounds_rejected(client, apple):
    response = client.post(
        "/api/sentiment", json=pulse_payload(PulseKind.SENTIMENT, apple["id"], fearGreed=150)
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    assert body["details"] == [
        {"field": "fearGreed", "constraint": "number in [0, 100]", "value": 150}
    ]
    assert client.get("/api/sentiment").json() == []


def test_unknown_market_returns_404(client):
    response = client.post("/api/flow", json=pulse_payload(PulseKind.FLOW, "missing"))
    assert response.status_code == 404
    assert client.get("/api/flow").json() == []


def test_malformed_json(client):
    response = client.post(
        "/api/momentum",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "body"


@pytest.mark.parametrize(
    "literal,constraint",
    [("NaN", "valid JSON"), ("Infinity", "valid JSON"), ("1e400", "finite number")],
)
def test_non_finite_numbers_rejected_as_bad_body(client, apple, literal, constraint):
    payload = pulse_payload(PulseKind.SENTIMENT, apple["id"], sps="SPS")
    raw = json.dumps(payload).replace('"SPS"', literal)

    response = client.post(
        "/api/sentiment",
        content=raw.encode(),
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["details"] == [
        {"field": "body", "constraint": constraint, "value": literal}
    ]
    assert client.get("/api/sentiment").json() == []


def test_paging_and_lenient_query_values(client, apple):
    for i in range(5):
        client.post("/api/liquidity", json=pulse_payload(PulseKind.LIQUIDITY, apple["id"], lms=i))

    page = client.get(
        "/api/liquidity", params={"marketId": apple["id"], "limit": 2, "offset": 1}
    ).json()
    assert [r["lms"] for r in page] == [3, 2]

    everything = client.get("/api/liquidity", params={"limit": "lots", "offset": "-1"})
    assert everything.status_code == 200
    assert len(everything.json()) == 5


def test_storage_failure_is_opaque(client):
    client.app.state.store.list_pulses = AsyncMock(
        side_effect=StorageError("connection refused at 10.0.0.5:5432")
    )

    response = client.get("/api/volatility")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch volatility pulses"}


# ============================================================================
# HISTORY
# ============================================================================


def test_history_requires_market_and_type(client):
    response = client.get("/api/historical")
    assert response.status_code == 400
    fields = {d["field"] for d in response.json()["details"]}
    assert fields == {"marketId", "pulseType"}


def test_history_explicit_range(client, apple):
    for _ in range(3):
        client.post("/api/flow", json=pulse_payload(PulseKind.FLOW, apple["id"]))

    response = client.get(
        "/api/historical",
        params={
            "marketId": apple["id"],
            "pulseType": "flow",
            "startDate": "2000-01-01T00:00:00Z",
            "endDate": "2999-01-01T00:00:00Z",
        },
    )

    assert response.status_code == 200
    body = response.json()
    records = body["data"]
    assert body["success"] is True
    assert len(records) == 3
    assert [r["timestamp"] for r in records] == sorted(r["timestamp"] for r in records)
    assert sum(interval["count"] for interval in body["aggregated"]) == 3
    assert "fds_avg" in body["aggregated"][0]
    assert body["metadata"]["marketId"] == apple["id"]
    assert body["metadata"]["pulseType"] == "flow"
    assert body["metadata"]["timeframe"] == "1h"
    assert body["metadata"]["count"] == 3
    assert body["metadata"]["startDate"] == records[0]["timestamp"]
    assert body["metadata"]["endDate"] == records[-1]["timestamp"]


def test_history_empty_window(client, apple):
    response = client.get(
        "/api/historical",
        params={"marketId": apple["id"], "pulseType": "risk", "timeframe": "1d"},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["data"] == []
    assert body["aggregated"] == []
    assert body["metadata"]["count"] == 0
    assert body["metadata"]["startDate"] is None


def test_history_bad_date(client, apple):
    response = client.get(
        "/api/historical",
        params={"marketId": apple["id"], "pulseType": "flow", "startDate": "yesterday"},
    )
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "startDate"
