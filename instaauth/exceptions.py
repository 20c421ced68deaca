"""
Instagram OAuth Exception Classes
"""

from typing import Optional


class InstagramOAuthError(Exception):
    """Base Instagram OAuth error class"""

    def __init__(
        self,
        message: str = "",
        status_code: int = 0,
        response: dict = None,
        cause: Optional[BaseException] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response = response or {}
        self.cause = cause
        super().__init__(self.message)


class InternalOAuthError(InstagramOAuthError):
    """OAuth engine failure (transport error or non-2xx response)"""

    def __init__(self, message: str = "", status_code: int = 0, data: str = "", cause=None):
        self.data = data
        super().__init__(message, status_code=status_code, cause=cause)

    def __str__(self) -> str:
        if self.status_code:
            return f"{self.message} (status: {self.status_code} data: {self.data})"
        if self.cause is not None:
            return f"{self.message} ({self.cause})"
        return self.message


class ProfileFetchError(InstagramOAuthError):
    """Profile request could not be completed"""

    def __init__(self, message: str = "failed to fetch user profile", cause=None):
        status_code = getattr(cause, "status_code", 0) or 0
        super().__init__(message, status_code=status_code, cause=cause)


class ProfileDecodeError(InstagramOAuthError):
    """Profile response body is not a JSON object"""

    def __init__(self, message: str = "failed to parse user profile", body: str = "", cause=None):
        self.body = body
        super().__init__(message, cause=cause)


class TokenError(InstagramOAuthError):
    """Token endpoint answered with an OAuth error"""

    def __init__(
        self,
        message: str = "",
        code: str = "invalid_request",
        uri: str = "",
        status_code: int = 0,
        response: dict = None,
    ):
        self.code = code
        self.uri = uri
        super().__init__(message or code, status_code=status_code, response=response)


class AuthorizationError(InstagramOAuthError):
    """Authorization step returned an error (e.g. user denied access)"""

    def __init__(self, message: str = "", code: str = "server_error", uri: str = ""):
        self.code = code
        self.uri = uri
        super().__init__(message or code, status_code=403 if code == "access_denied" else 500)


class StateMismatchError(InstagramOAuthError):
    """OAuth state parameter does not match the one issued"""
    pass
