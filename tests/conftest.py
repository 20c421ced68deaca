"""
Pytest fixtures for instaauth tests.
"""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock


# ─── Sample Data ─────────────────────────────────────────────

@pytest.fixture
def graph_me():
    """Graph API /me response with name fields."""
    return {
        "id": "42",
        "username": "alice",
        "full_name": "Alice A",
        "first_name": "Alice",
        "last_name": "A",
    }


@pytest.fixture
def graph_me_body(graph_me):
    return json.dumps(graph_me)


@pytest.fixture
def token_response():
    """Token endpoint response (Instagram Basic Display shape)."""
    return {
        "access_token": "IGQVJtoken123456",
        "user_id": 42,
    }


def make_response(status_code=200, text="", content=None):
    """Create mock curl_cffi response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    resp.content = content if content is not None else text.encode("utf-8")
    return resp


@pytest.fixture
def engine(graph_me_body, token_response):
    """Mock OAuth 2.0 engine answering with a valid profile."""
    eng = MagicMock()
    eng.get = AsyncMock(return_value=(graph_me_body, make_response(200, graph_me_body)))
    eng.get_oauth_access_token = AsyncMock(
        return_value=dict(token_response, refresh_token=None)
    )
    eng.get_authorize_url = MagicMock(return_value="https://api.instagram.com/oauth/authorize/?client_id=cid")
    return eng


@pytest.fixture
def curl_session():
    """Mock curl_cffi AsyncSession."""
    session = MagicMock()
    session.request = AsyncMock(return_value=make_response(200, "{}"))
    session.close = AsyncMock()
    return session
