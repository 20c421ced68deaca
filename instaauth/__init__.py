"""
instaauth
=========
Instagram OAuth 2.0 authentication strategy.

    from instaauth import InstagramStrategy

    strategy = InstagramStrategy({"clientID": "...", "clientSecret": "..."}, verify)
    profile = await strategy.user_profile(access_token)
"""

from .config import STRATEGY_NAME
from .exceptions import (
    InstagramOAuthError,
    InternalOAuthError,
    ProfileFetchError,
    ProfileDecodeError,
    TokenError,
    AuthorizationError,
    StateMismatchError,
)
from .log_config import LogConfig, DebugLogger, get_debug_logger, set_debug_logger
from .models import Profile, ProfileName
from .oauth2 import OAuth2Client, OAuth2Engine
from .profile import FetchResult, ProfileFetcher
from .strategy import AuthResult, InstagramStrategy, StrategyOptions

Strategy = InstagramStrategy

__version__ = "1.0.0"

__all__ = [
    "STRATEGY_NAME",
    "Strategy",
    "InstagramStrategy",
    "StrategyOptions",
    "AuthResult",
    "ProfileFetcher",
    "FetchResult",
    "OAuth2Client",
    "OAuth2Engine",
    "Profile",
    "ProfileName",
    "LogConfig",
    "DebugLogger",
    "get_debug_logger",
    "set_debug_logger",
    "InstagramOAuthError",
    "InternalOAuthError",
    "ProfileFetchError",
    "ProfileDecodeError",
    "TokenError",
    "AuthorizationError",
    "StateMismatchError",
]
