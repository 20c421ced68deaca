"""
OAuth 2.0 Engine
================
Minimal async OAuth 2.0 client on top of curl_cffi.

Covers what the strategy needs from the authorization-code grant:
    - authorization URL composition
    - code → token exchange
    - authenticated GET with an access token

No retries, no token refresh. Any engine exposing the same
`get(url, access_token)` coroutine can be injected instead.
"""

import json
import logging
import time
from typing import Any, Dict, Optional, Protocol, Tuple
from urllib.parse import parse_qsl

from curl_cffi import CurlError
from curl_cffi.requests import AsyncSession

from .config import (
    AUTHORIZATION_URL,
    TOKEN_URL,
    BROWSER_IMPERSONATION,
    CONNECT_TIMEOUT,
    REQUEST_TIMEOUT,
)
from .exceptions import InternalOAuthError, TokenError
from .log_config import get_debug_logger, mask_token
from .utils import add_query_params

logger = logging.getLogger("instaauth.oauth2")


class OAuth2Engine(Protocol):
    """What the strategy needs from an OAuth 2.0 engine."""

    def get_authorize_url(self, **params: Optional[str]) -> str:
        ...

    async def get_oauth_access_token(self, code: str, **params: Optional[str]) -> Dict[str, Any]:
        ...

    async def get(self, url: str, access_token: str) -> Tuple[str, Any]:
        """
        GET `url` with the access token attached.

        Returns:
            (body, response)

        Raises:
            InternalOAuthError: transport failure or non-2xx status
        """
        ...


def parse_error_response(body: str, status_code: int = 0) -> Optional[TokenError]:
    """
    Parse an OAuth error body from the token endpoint.

    Understands the RFC 6749 shape ({"error", "error_description",
    "error_uri"}), Instagram's legacy shape ({"error_type", "code",
    "error_message"}) and the Graph API shape ({"error": {...}}).

    Returns:
        TokenError, or None when the body is not an OAuth error
    """
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None

    if data.get("error_type") or data.get("error_message"):
        return TokenError(
            data.get("error_message", ""),
            code=data.get("error_type") or "invalid_request",
            status_code=status_code,
            response=data,
        )

    error = data.get("error")
    if isinstance(error, dict):
        return TokenError(
            error.get("message", ""),
            code=error.get("type") or "invalid_request",
            status_code=status_code,
            response=data,
        )
    if error:
        return TokenError(
            data.get("error_description", ""),
            code=str(error),
            uri=data.get("error_uri", ""),
            status_code=status_code,
            response=data,
        )
    return None


class OAuth2Client:
    """
    Async OAuth 2.0 client.

    Usage:
        async with OAuth2Client("client-id", "secret") as oauth2:
            url = oauth2.get_authorize_url(redirect_uri=..., scope="user_profile")
            tokens = await oauth2.get_oauth_access_token(code, redirect_uri=...)
            body, response = await oauth2.get(PROFILE_URL, tokens["access_token"])
    """

    def __init__(
        self,
        client_id: str = "",
        client_secret: str = "",
        authorization_url: str = AUTHORIZATION_URL,
        token_url: str = TOKEN_URL,
        use_authorization_header: bool = False,
        session: Optional[AsyncSession] = None,
        impersonate: str = BROWSER_IMPERSONATION,
        timeout: Tuple[float, float] = (CONNECT_TIMEOUT, REQUEST_TIMEOUT),
    ):
        """
        Args:
            client_id: Instagram app ID
            client_secret: Instagram app secret
            authorization_url: Authorization endpoint
            token_url: Token endpoint
            use_authorization_header: Send "Authorization: Bearer" on GET
                instead of the access_token query parameter
            session: Pre-built curl_cffi AsyncSession (owned by caller)
            impersonate: curl_cffi browser impersonation target
            timeout: (connect, read) seconds
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.authorization_url = authorization_url
        self.token_url = token_url
        self.use_authorization_header = use_authorization_header
        self._impersonate = impersonate
        self._timeout = timeout
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> AsyncSession:
        """Get or create curl_cffi AsyncSession."""
        if self._session is None:
            self._session = AsyncSession(impersonate=self._impersonate)
        return self._session

    async def close(self) -> None:
        """Close the underlying session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "OAuth2Client":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    # ─── AUTHORIZATION ───────────────────────────────────────

    def get_authorize_url(self, **params: Optional[str]) -> str:
        """
        Build the authorization endpoint URL.

        Args:
            **params: Extra query params (redirect_uri, scope, state, ...).
                None values are dropped.
        """
        query = {"client_id": self.client_id}
        query.update(params)
        query.setdefault("response_type", "code")
        return add_query_params(self.authorization_url, query)

    # ─── TOKEN EXCHANGE ──────────────────────────────────────

    async def get_oauth_access_token(self, code: str, **params: Optional[str]) -> Dict[str, Any]:
        """
        Exchange an authorization code for tokens.

        Args:
            code: Authorization code from the callback
            **params: Extra form fields (redirect_uri, grant_type, ...)

        Returns:
            dict: Token response; always has "access_token" and
                  "refresh_token" keys (refresh may be None)

        Raises:
            TokenError: Provider returned an OAuth error
            InternalOAuthError: Transport failure or unusable response
        """
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
        }
        data.update({k: v for k, v in params.items() if v is not None})
        data.setdefault("grant_type", "authorization_code")

        try:
            response = await self._request("POST", self.token_url, data=data)
        except InternalOAuthError as e:
            raise InternalOAuthError("failed to obtain access token", cause=e) from e

        body = response.text
        status = response.status_code

        token_error = parse_error_response(body, status)
        if token_error is not None:
            logger.warning(f"Token exchange rejected: {token_error.code}: {token_error.message}")
            raise token_error

        if not 200 <= status < 300:
            raise InternalOAuthError("failed to obtain access token", status_code=status, data=body)

        results = self._parse_token_body(body)
        if not results.get("access_token"):
            raise InternalOAuthError("failed to obtain access token", status_code=status, data=body)

        results.setdefault("refresh_token", None)
        logger.debug(f"Access token obtained: {mask_token(results['access_token'])}")
        return results

    @staticmethod
    def _parse_token_body(body: str) -> Dict[str, Any]:
        """Token bodies are JSON, some providers still answer form-encoded."""
        try:
            data = json.loads(body)
        except ValueError:
            return dict(parse_qsl(body))
        return data if isinstance(data, dict) else {}

    # ─── AUTHENTICATED GET ───────────────────────────────────

    async def get(self, url: str, access_token: str) -> Tuple[str, Any]:
        """
        Send authenticated GET request.

        Returns:
            (body, response)

        Raises:
            InternalOAuthError: transport failure or non-2xx status
        """
        headers = {"accept": "application/json"}
        if self.use_authorization_header:
            headers["authorization"] = f"Bearer {access_token}"
            request_url = url
        else:
            request_url = add_query_params(url, {"access_token": access_token})

        response = await self._request(
            "GET", request_url, headers=headers, log_url=url, token=access_token,
        )

        status = response.status_code
        body = response.text
        if not 200 <= status < 300:
            get_debug_logger().error(
                error_type="InternalOAuthError",
                status_code=status,
                endpoint=url,
                response_preview=body,
            )
            raise InternalOAuthError("request failed", status_code=status, data=body)
        return body, response

    # ─── CORE REQUEST ────────────────────────────────────────

    async def _request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, str]] = None,
        log_url: str = "",
        token: str = "",
    ):
        """Single HTTP round trip; curl errors become InternalOAuthError."""
        dbg = get_debug_logger()
        log_url = log_url or url
        dbg.request(method, log_url, token=token, has_data=bool(data))

        start_time = time.time()
        try:
            response = await self._get_session().request(
                method,
                url,
                headers=headers,
                data=data,
                timeout=self._timeout,
            )
        except CurlError as e:
            dbg.error(error_type=type(e).__name__, endpoint=log_url, message=str(e))
            logger.warning(f"{method} {log_url} failed: {e}")
            raise InternalOAuthError(f"{method} {log_url} failed", cause=e) from e

        elapsed = time.time() - start_time
        dbg.response(
            status_code=response.status_code,
            elapsed_ms=elapsed * 1000,
            size_bytes=len(response.content) if hasattr(response, "content") else 0,
            url=log_url,
        )
        return response
