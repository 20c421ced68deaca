"""
Profile Fetcher
===============
Builds the Graph API profile request, runs it through the OAuth 2.0
engine and normalizes the response into a Profile.

Two failure kinds:
    ProfileFetchError  — the engine could not complete the request
    ProfileDecodeError — the body is not a JSON object
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .exceptions import ProfileDecodeError, ProfileFetchError
from .models.profile import Profile
from .oauth2 import OAuth2Engine
from .utils import build_profile_url, convert_profile_fields

logger = logging.getLogger("instaauth.profile")

ProfileError = Union[ProfileFetchError, ProfileDecodeError]


@dataclass
class FetchResult:
    """
    Outcome of one profile fetch.

    Exactly one of `profile` / `error` is set.
    """

    profile: Optional[Profile] = None
    error: Optional[ProfileError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.profile is not None

    def unwrap(self) -> Profile:
        """Return the profile or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.profile


class ProfileFetcher:
    """
    Fetch + normalize the token owner's profile.

    Stateless apart from the engine reference, so one instance can
    serve concurrent authentication attempts.

    Usage:
        fetcher = ProfileFetcher(OAuth2Client(client_id, client_secret))
        profile = await fetcher.fetch(PROFILE_URL, ["id", "username"], token)
    """

    def __init__(self, oauth2: OAuth2Engine):
        self._oauth2 = oauth2

    async def fetch(
        self,
        profile_url: str,
        profile_fields: Sequence[str],
        access_token: str,
    ) -> Profile:
        """
        Fetch the profile.

        Raises:
            ProfileFetchError: engine error, no decode attempted
            ProfileDecodeError: malformed body
        """
        url = build_profile_url(profile_url, convert_profile_fields(profile_fields))

        try:
            body, _response = await self._oauth2.get(url, access_token)
        except Exception as e:
            logger.warning(f"Profile request to {url} failed: {e}")
            raise ProfileFetchError("failed to fetch user profile", cause=e) from e

        try:
            data = json.loads(body)
        except (TypeError, ValueError) as e:
            logger.warning(f"Profile response is not JSON: {str(body)[:100]!r}")
            raise ProfileDecodeError(f"failed to parse user profile: {e}", body=body, cause=e) from e

        if not isinstance(data, dict):
            e = TypeError(f"expected JSON object, got {type(data).__name__}")
            raise ProfileDecodeError(f"failed to parse user profile: {e}", body=body, cause=e) from e

        profile = Profile.from_graph(body, data)
        logger.debug(f"Profile loaded: id={profile.id} username={profile.username}")
        return profile

    async def try_fetch(
        self,
        profile_url: str,
        profile_fields: Sequence[str],
        access_token: str,
    ) -> FetchResult:
        """Like fetch(), but returns the failure instead of raising it."""
        try:
            profile = await self.fetch(profile_url, profile_fields, access_token)
        except (ProfileFetchError, ProfileDecodeError) as e:
            return FetchResult(error=e)
        return FetchResult(profile=profile)
