"""
Shared pytest fixtures for all test modules.

IMPORTANT: provider credentials are cleared before the app is imported so the
module-level `settings` never picks up real keys from the environment.
Real provider calls never happen in tests: sessions and adapters are mocked.
"""

import os

for _var in ("HIVE_API_KEY", "SENSITY_API_KEY", "REALITY_DEFENDER_API_KEY", "SERVICE_API_KEYS"):
    os.environ.pop(_var, None)

from contextlib import asynccontextmanager  # noqa: E402
from datetime import datetime, timezone  # noqa: E402
from unittest.mock import AsyncMock, MagicMock, patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from tests.mocks.firebase_mock import MockFirestore  # noqa: E402
from tests.mocks.redis_mock import MockRedis  # noqa: E402

# App import happens AFTER the credential env vars are cleared above.
from consensus_engine.main import app  # noqa: E402
from consensus_engine.core.dependencies import get_orchestrator  # noqa: E402
from consensus_engine.schemas.analysis import ProviderResult, Verdict  # noqa: E402

FIXED_NOW = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Core infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_firebase(monkeypatch):
    """Replace firebase.db with an in-memory MockFirestore and bucket with a MagicMock."""
    from consensus_engine.integrations import firebase as fb

    mock_db = MockFirestore()
    mock_bucket = MagicMock()
    mock_bucket.blob.return_value.generate_signed_url.return_value = "https://storage.example.com/signed"
    monkeypatch.setattr(fb, "db", mock_db)
    monkeypatch.setattr(fb, "bucket", mock_bucket)
    return mock_db


@pytest.fixture
def mock_redis(monkeypatch):
    """Replace redis_client.client with an in-memory MockRedis."""
    from consensus_engine.integrations import redis_client as rc

    mock_rc = MockRedis()
    monkeypatch.setattr(rc, "client", mock_rc)
    return mock_rc


@pytest.fixture
def client(mock_firebase, mock_redis):
    """
    FastAPI TestClient with mocked Firebase and Redis.

    initialize() calls are patched to no-ops so they can't overwrite our mocks
    or attempt real network connections during the lifespan startup.
    """
    with (
        patch("consensus_engine.integrations.firebase.initialize"),
        patch("consensus_engine.integrations.redis_client.initialize"),
        patch("consensus_engine.integrations.http_client.initialize", new_callable=AsyncMock),
        patch("consensus_engine.integrations.http_client.close", new_callable=AsyncMock),
    ):
        with TestClient(app, raise_server_exceptions=False) as c:
            yield c
    app.dependency_overrides.pop(get_orchestrator, None)


def override_orchestrator(orchestrator) -> None:
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator


# ---------------------------------------------------------------------------
# aiohttp session mocking
# ---------------------------------------------------------------------------


def make_mock_session(status=200, json_data=None, json_side_effect=None, post_side_effect=None):
    """Build a mock aiohttp session whose .post() returns a context-manager response."""
    mock_resp = MagicMock()
    mock_resp.__aenter__ = AsyncMock(return_value=mock_resp)
    mock_resp.__aexit__ = AsyncMock(return_value=None)
    mock_resp.status = status
    mock_resp.json = AsyncMock(return_value=json_data, side_effect=json_side_effect)

    mock_session = MagicMock()
    if post_side_effect is not None:
        mock_session.post = MagicMock(side_effect=post_side_effect)
    else:
        mock_session.post = MagicMock(return_value=mock_resp)
    return mock_session


def patch_session(mock_session):
    """
    Patch http_client.request_session to yield mock_session directly,
    bypassing aiohttp.ClientSession construction entirely.
    """
    @asynccontextmanager
    async def _fake_request_session():
        yield mock_session

    return patch(
        "consensus_engine.integrations.http_client.request_session",
        side_effect=_fake_request_session,
    )


# ---------------------------------------------------------------------------
# Shared test-data helpers
# ---------------------------------------------------------------------------


def make_result(
    provider="hive_ai",
    verdict=Verdict.AUTHENTIC,
    ai=0.0,
    deepfake=0.0,
    manipulation=None,
    confidence=90.0,
) -> ProviderResult:
    return ProviderResult(
        provider=provider,
        ai_generated_score=ai,
        deepfake_score=deepfake,
        manipulation_score=max(ai, deepfake) if manipulation is None else manipulation,
        confidence=confidence,
        verdict=verdict,
    )


HIVE_SUCCESS = {
    "status": [
        {"response": {"output": [{"classes": [
            {"class": "not_ai_generated", "score": 0.95},
            {"class": "ai_generated", "score": 0.05},
        ]}]}},
        {"response": {"output": [{"classes": [
            {"class": "no", "score": 0.97},
            {"class": "yes", "score": 0.03},
        ]}]}},
    ]
}

SENSITY_SUCCESS = {
    "detections": {
        "face_swap": {"probability": 0.02},
        "deepfake": {"probability": 0.04},
        "synthetic_media": {"probability": 0.06},
    },
    "confidence": 0.92,
}

REALITY_DEFENDER_SUCCESS = {
    "scores": {"deepfake": 0.05, "gan": 0.03, "diffusion": 0.08, "manipulation": 0.04},
    "confidence": 0.88,
}
