"""
Instagram Strategy
==================
OAuth 2.0 authentication strategy for Instagram.

The host framework dispatches to it by name ("instagram"):
    1. redirect the user to strategy.authorization_url(...)
    2. on callback, await strategy.authenticate(code=..., state=...)

authenticate() exchanges the code, loads the profile and hands it to
the application's verify callback.
"""

import hmac
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import (
    AUTHORIZATION_URL,
    DEFAULT_PROFILE_FIELDS,
    PROFILE_URL,
    SCOPE_SEPARATOR,
    STRATEGY_NAME,
    TOKEN_URL,
)
from .exceptions import AuthorizationError, InternalOAuthError, StateMismatchError
from .models.profile import Profile
from .oauth2 import OAuth2Client, OAuth2Engine
from .profile import FetchResult, ProfileFetcher
from .utils import normalize_scope

logger = logging.getLogger("instaauth.strategy")

# verify(access_token, refresh_token, profile) -> user | (user, info)
# verify(access_token, refresh_token, params, profile) -> user | (user, info)
VerifyCallback = Callable[..., Any]

_ENDPOINT_DEFAULTS = {
    "authorization_url": AUTHORIZATION_URL,
    "token_url": TOKEN_URL,
    "profile_url": PROFILE_URL,
}


class StrategyOptions(BaseModel):
    """
    Static strategy configuration, fixed at construction.

    Accepts both snake_case names and the camelCase option names
    (clientID, callbackURL, authorizationURL, tokenURL, profileURL,
    profileFields). Missing or empty endpoints and field lists fall
    back to the Instagram defaults.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    client_id: str = Field(default="", alias="clientID")
    client_secret: str = Field(default="", alias="clientSecret")
    callback_url: Optional[str] = Field(default=None, alias="callbackURL")

    authorization_url: str = Field(default=AUTHORIZATION_URL, alias="authorizationURL")
    token_url: str = Field(default=TOKEN_URL, alias="tokenURL")
    profile_url: str = Field(default=PROFILE_URL, alias="profileURL")
    profile_fields: Tuple[str, ...] = Field(default=DEFAULT_PROFILE_FIELDS, alias="profileFields")

    scope: Optional[str] = None
    skip_user_profile: bool = Field(default=False, alias="skipUserProfile")
    use_authorization_header: bool = False

    @field_validator("authorization_url", "token_url", "profile_url", mode="before")
    @classmethod
    def default_endpoint(cls, v: Any, info) -> Any:
        if not v:
            return _ENDPOINT_DEFAULTS[info.field_name]
        return v

    @field_validator("profile_fields", mode="before")
    @classmethod
    def default_fields(cls, v: Any) -> Any:
        if not v:
            return DEFAULT_PROFILE_FIELDS
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            raise ValueError(f"profile fields must be a list of names, got {type(v).__name__}")
        for name in v:
            if not isinstance(name, str) or not name:
                raise ValueError(f"profile field names must be non-empty strings, got {name!r}")
        return tuple(v)

    @field_validator("scope", mode="before")
    @classmethod
    def join_scope(cls, v: Any) -> Optional[str]:
        return normalize_scope(v, SCOPE_SEPARATOR)


@dataclass
class AuthResult:
    """
    Outcome of InstagramStrategy.authenticate().

    `user` is whatever the verify callback returned; a falsy user
    means the application refused the credentials (not an error).
    """

    user: Any = None
    info: Any = None
    profile: Optional[Profile] = None
    access_token: str = ""
    refresh_token: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return bool(self.user)


class InstagramStrategy:
    """
    Instagram OAuth 2.0 strategy.

    Usage:
        async def verify(access_token, refresh_token, profile):
            return await users.find_or_create(instagram_id=profile.id)

        strategy = InstagramStrategy(
            {
                "clientID": "123-456-789",
                "clientSecret": "shhh-its-a-secret",
                "callbackURL": "https://www.example.net/auth/instagram/callback",
            },
            verify,
        )
        redirect_to = strategy.authorization_url(state=state)
        ...
        result = await strategy.authenticate(code=code, state=state, expected_state=state)
        if result.ok:
            login(result.user)
    """

    name = STRATEGY_NAME

    def __init__(
        self,
        options: Union[StrategyOptions, Dict[str, Any], None] = None,
        verify: Optional[VerifyCallback] = None,
        *,
        oauth2: Optional[OAuth2Engine] = None,
    ):
        """
        Args:
            options: StrategyOptions or a plain dict of options (may be empty)
            verify: Application callback receiving the tokens and profile
            oauth2: OAuth 2.0 engine (default: OAuth2Client from options)
        """
        if options is None:
            options = StrategyOptions()
        elif not isinstance(options, StrategyOptions):
            options = StrategyOptions.model_validate(options)
        self.options = options
        self._verify = verify

        if oauth2 is None:
            oauth2 = OAuth2Client(
                client_id=options.client_id,
                client_secret=options.client_secret,
                authorization_url=options.authorization_url,
                token_url=options.token_url,
                use_authorization_header=options.use_authorization_header,
            )
        self._oauth2 = oauth2
        self._fetcher = ProfileFetcher(oauth2)

    @property
    def oauth2(self) -> OAuth2Engine:
        return self._oauth2

    @property
    def profile_url(self) -> str:
        return self.options.profile_url

    @property
    def profile_fields(self) -> List[str]:
        return list(self.options.profile_fields)

    # ─── PROFILE ─────────────────────────────────────────────

    async def user_profile(self, access_token: str) -> Profile:
        """
        Retrieve the token owner's profile from Instagram.

        Raises:
            ProfileFetchError, ProfileDecodeError
        """
        return await self._fetcher.fetch(
            self.options.profile_url, self.options.profile_fields, access_token,
        )

    async def fetch_profile(self, access_token: str) -> FetchResult:
        """Retrieve the profile as a FetchResult (never raises fetch/decode errors)."""
        return await self._fetcher.try_fetch(
            self.options.profile_url, self.options.profile_fields, access_token,
        )

    # ─── AUTHORIZATION FLOW ──────────────────────────────────

    def authorization_url(
        self,
        state: Optional[str] = None,
        scope: Union[str, List[str], None] = None,
        **params: Optional[str],
    ) -> str:
        """
        URL the user is redirected to for granting access.

        Args:
            state: Opaque anti-CSRF value, echoed back on callback
            scope: Overrides the configured scope
            **params: Extra authorization params
        """
        scope_value = normalize_scope(scope, SCOPE_SEPARATOR) if scope is not None else self.options.scope
        return self._oauth2.get_authorize_url(
            redirect_uri=self.options.callback_url,
            scope=scope_value,
            state=state,
            **params,
        )

    async def authenticate(
        self,
        code: Optional[str] = None,
        *,
        error: Optional[str] = None,
        error_description: Optional[str] = None,
        error_uri: Optional[str] = None,
        state: Optional[str] = None,
        expected_state: Optional[str] = None,
    ) -> AuthResult:
        """
        Handle the authorization callback.

        Args:
            code: Authorization code from the callback query
            error, error_description, error_uri: Error callback params
            state: State echoed by Instagram
            expected_state: State issued with the authorization URL

        Returns:
            AuthResult with the verify callback's user/info

        Raises:
            AuthorizationError: Callback carried an error or no code
            StateMismatchError: State did not match expected_state
            TokenError, InternalOAuthError: Code exchange failed
            ProfileFetchError, ProfileDecodeError: Profile load failed
        """
        if error:
            logger.info(f"Authorization denied: {error} {error_description or ''}".rstrip())
            raise AuthorizationError(error_description or "", code=error, uri=error_uri or "")

        if expected_state is not None:
            if state is None or not hmac.compare_digest(str(state), str(expected_state)):
                raise StateMismatchError("Invalid authorization request state.", status_code=403)

        if not code:
            raise AuthorizationError("Missing authorization code.", code="invalid_request")

        params = await self._oauth2.get_oauth_access_token(
            code, redirect_uri=self.options.callback_url,
        )
        access_token = params.get("access_token") if isinstance(params, dict) else None
        if not access_token:
            raise InternalOAuthError("failed to obtain access token", data=str(params))
        refresh_token = params.get("refresh_token")

        profile = None
        if not self.options.skip_user_profile:
            profile = await self.user_profile(access_token)

        user, info = await self._run_verify(access_token, refresh_token, params, profile)
        if not user:
            logger.info(f"Verify callback rejected user {profile.id if profile else '?'}")

        return AuthResult(
            user=user,
            info=info,
            profile=profile,
            access_token=access_token,
            refresh_token=refresh_token,
            params=params,
        )

    async def _run_verify(
        self,
        access_token: str,
        refresh_token: Optional[str],
        params: Dict[str, Any],
        profile: Optional[Profile],
    ) -> Tuple[Any, Any]:
        """Call verify (sync or async, 3 or 4 args) and split (user, info)."""
        if self._verify is None:
            return profile, None

        if self._accepts_params(self._verify):
            result = self._verify(access_token, refresh_token, params, profile)
        else:
            result = self._verify(access_token, refresh_token, profile)

        if inspect.isawaitable(result):
            result = await result

        if isinstance(result, tuple):
            user = result[0] if result else None
            info = result[1] if len(result) > 1 else None
            return user, info
        return result, None

    @staticmethod
    def _accepts_params(callback: VerifyCallback) -> bool:
        """True when verify takes (access_token, refresh_token, params, profile)."""
        try:
            sig = inspect.signature(callback)
        except (TypeError, ValueError):
            return False
        positional = [
            p for p in sig.parameters.values()
            if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
        ]
        return len(positional) >= 4
