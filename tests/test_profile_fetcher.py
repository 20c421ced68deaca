"""
Tests for ProfileFetcher: request building, failure classification.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from instaauth.exceptions import InternalOAuthError, ProfileDecodeError, ProfileFetchError
from instaauth.profile import FetchResult, ProfileFetcher


PROFILE_URL = "https://graph.instagram.com/me"


class TestFetchRequest:
    """Test the URL handed to the engine."""

    @pytest.mark.asyncio
    async def test_default_fields_url(self, engine):
        await ProfileFetcher(engine).fetch(PROFILE_URL, ["id", "username"], "tok")
        engine.get.assert_awaited_once_with(
            "https://graph.instagram.com/me?fields=id,username", "tok",
        )

    @pytest.mark.asyncio
    async def test_unmapped_field_url(self, engine):
        await ProfileFetcher(engine).fetch(PROFILE_URL, ["id", "photos_count"], "tok")
        url, _ = engine.get.await_args.args
        assert url.endswith("?fields=id,photos_count")

    @pytest.mark.asyncio
    async def test_endpoint_with_query(self, engine):
        await ProfileFetcher(engine).fetch(PROFILE_URL + "?v=1", ["id"], "tok")
        url, _ = engine.get.await_args.args
        assert url == "https://graph.instagram.com/me?v=1&fields=id"

    @pytest.mark.asyncio
    async def test_no_fields(self, engine):
        await ProfileFetcher(engine).fetch(PROFILE_URL, [], "tok")
        url, _ = engine.get.await_args.args
        assert url == PROFILE_URL


class TestFetchSuccess:
    """Test normalization after a successful fetch."""

    @pytest.mark.asyncio
    async def test_profile(self, engine, graph_me, graph_me_body):
        profile = await ProfileFetcher(engine).fetch(PROFILE_URL, ["id", "username"], "tok")
        assert profile.provider == "instagram"
        assert profile.id == "42"
        assert profile.username == "alice"
        assert profile.display_name == "Alice A"
        assert profile.name.given_name == "Alice"
        assert profile.name.family_name == "A"
        assert profile.raw == graph_me_body
        assert profile.json_data == graph_me

    @pytest.mark.asyncio
    async def test_minimal_body(self):
        eng = MagicMock()
        eng.get = AsyncMock(return_value=('{"id":"1","username":"u"}', None))
        profile = await ProfileFetcher(eng).fetch(PROFILE_URL, ["id", "username"], "tok")
        assert profile.id == "1"
        assert profile.display_name is None
        assert profile.name.given_name is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        '{"id":"1","username":"u","full_name":5}',
        '{"id":"1","username":"u","first_name":{"a":1}}',
        '{"id":"1","username":"u","last_name":[1,2]}',
    ])
    async def test_non_string_values_degrade(self, body):
        eng = MagicMock()
        eng.get = AsyncMock(return_value=(body, None))
        profile = await ProfileFetcher(eng).fetch(PROFILE_URL, ["id", "username"], "tok")
        assert profile.id == "1"
        assert profile.username == "u"

    @pytest.mark.asyncio
    async def test_non_string_name_kept_as_text(self):
        eng = MagicMock()
        eng.get = AsyncMock(return_value=('{"id":"1","first_name":{"a":1},"full_name":5}', None))
        profile = await ProfileFetcher(eng).fetch(PROFILE_URL, ["id"], "tok")
        assert profile.display_name == "5"
        assert profile.name.given_name == "{'a': 1}"

class TestFetchFailures:
    """Test FetchFailed / DecodeFailed classification."""

    @pytest.mark.asyncio
    async def test_engine_error_wrapped(self):
        cause = InternalOAuthError("request failed", status_code=400, data='{"error":{}}')
        eng = MagicMock()
        eng.get = AsyncMock(side_effect=cause)

        with pytest.raises(ProfileFetchError) as exc_info:
            await ProfileFetcher(eng).fetch(PROFILE_URL, ["id"], "bad-token")

        err = exc_info.value
        assert err.cause is cause
        assert err.__cause__ is cause
        assert err.status_code == 400
        assert "failed to fetch user profile" in str(err)

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        eng = MagicMock()
        eng.get = AsyncMock(side_effect=ConnectionError("unreachable"))
        with pytest.raises(ProfileFetchError) as exc_info:
            await ProfileFetcher(eng).fetch(PROFILE_URL, ["id"], "tok")
        assert isinstance(exc_info.value.cause, ConnectionError)
        assert exc_info.value.status_code == 0

    @pytest.mark.asyncio
    async def test_not_json(self):
        eng = MagicMock()
        eng.get = AsyncMock(return_value=("not json", None))
        with pytest.raises(ProfileDecodeError) as exc_info:
            await ProfileFetcher(eng).fetch(PROFILE_URL, ["id"], "tok")
        assert isinstance(exc_info.value.cause, ValueError)
        assert exc_info.value.body == "not json"

    @pytest.mark.asyncio
    async def test_json_array_rejected(self):
        eng = MagicMock()
        eng.get = AsyncMock(return_value=("[1, 2]", None))
        with pytest.raises(ProfileDecodeError) as exc_info:
            await ProfileFetcher(eng).fetch(PROFILE_URL, ["id"], "tok")
        assert isinstance(exc_info.value.cause, TypeError)

    @pytest.mark.asyncio
    async def test_decode_error_is_not_fetch_error(self):
        eng = MagicMock()
        eng.get = AsyncMock(return_value=("<html>", None))
        with pytest.raises(ProfileDecodeError) as exc_info:
            await ProfileFetcher(eng).fetch(PROFILE_URL, ["id"], "tok")
        assert not isinstance(exc_info.value, ProfileFetchError)


class TestTryFetch:
    """Test explicit FetchResult form."""

    @pytest.mark.asyncio
    async def test_ok(self, engine):
        result = await ProfileFetcher(engine).try_fetch(PROFILE_URL, ["id"], "tok")
        assert result.ok is True
        assert result.error is None
        assert result.unwrap().username == "alice"

    @pytest.mark.asyncio
    async def test_fetch_failed(self):
        eng = MagicMock()
        eng.get = AsyncMock(side_effect=InternalOAuthError("boom", status_code=500))
        result = await ProfileFetcher(eng).try_fetch(PROFILE_URL, ["id"], "tok")
        assert result.ok is False
        assert result.profile is None
        assert isinstance(result.error, ProfileFetchError)
        with pytest.raises(ProfileFetchError):
            result.unwrap()

    @pytest.mark.asyncio
    async def test_decode_failed(self):
        eng = MagicMock()
        eng.get = AsyncMock(return_value=("not json", None))
        result = await ProfileFetcher(eng).try_fetch(PROFILE_URL, ["id"], "tok")
        assert result.ok is False
        assert result.profile is None
        assert isinstance(result.error, ProfileDecodeError)

    @pytest.mark.asyncio
    async def test_odd_value_types_still_ok(self):
        eng = MagicMock()
        eng.get = AsyncMock(return_value=('{"id":7,"username":"u","full_name":5,"first_name":{"a":1}}', None))
        result = await ProfileFetcher(eng).try_fetch(PROFILE_URL, ["id"], "tok")
        assert result.ok is True
        assert result.profile.id == "7"

    def test_empty_result_not_ok(self):
        assert FetchResult().ok is False
