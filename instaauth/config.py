"""
Instagram OAuth Configuration and Constants
"""

from types import MappingProxyType

# ============================================================
# Strategy
# ============================================================
STRATEGY_NAME = "instagram"
PROVIDER = "instagram"

# ============================================================
# OAuth 2.0 endpoints
# ============================================================
AUTHORIZATION_URL = "https://api.instagram.com/oauth/authorize/"
TOKEN_URL = "https://api.instagram.com/oauth/access_token"

# Graph API "me" node of the token owner
PROFILE_URL = "https://graph.instagram.com/me"

# ============================================================
# Profile fields
# ============================================================
DEFAULT_PROFILE_FIELDS = ("id", "username")

# Canonical name -> Graph API field name(s).
# A tuple value expands to several native fields.
PROFILE_FIELD_MAP = MappingProxyType({
    "id": "id",
    "username": "username",
    "account_type": "account_type",
    "media_count": "media_count",
})

# Query parameter carrying the field selection
FIELDS_PARAM = "fields"

# Instagram joins scopes with a comma, not a space
SCOPE_SEPARATOR = ","

# ============================================================
# HTTP (curl_cffi)
# ============================================================
BROWSER_IMPERSONATION = "chrome"

# Timeout (in seconds)
REQUEST_TIMEOUT = 15
CONNECT_TIMEOUT = 10
