"""
Utilities
=========
Profile field selection and URL/query helpers.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Union
from urllib.parse import urlencode, urlsplit, urlunsplit

from .config import FIELDS_PARAM, PROFILE_FIELD_MAP

FieldTarget = Union[str, tuple, list]


def convert_profile_fields(
    profile_fields: Iterable[str],
    field_map: Mapping[str, FieldTarget] = PROFILE_FIELD_MAP,
) -> str:
    """
    Convert requested profile fields to the Graph API `fields` value.

    Mapped names expand to their native field(s), unknown names are
    passed through as-is so callers can ask for any Graph API field.

    Args:
        profile_fields: Ordered field names (e.g. ["id", "media_count"])
        field_map: Canonical name → native name(s)

    Returns:
        str: Comma-joined native field names ("" for an empty list)
    """
    fields: List[str] = []
    for name in profile_fields:
        target = field_map.get(name)
        if target is None:
            fields.append(name)
        elif isinstance(target, (tuple, list)):
            fields.extend(target)
        else:
            fields.append(target)
    return ",".join(fields)


def append_query(url: str, query: str) -> str:
    """
    Append an encoded query fragment to a URL, keeping its existing query.

    Args:
        url: Absolute or relative URL
        query: Already-encoded "k=v" fragment ("" = unchanged)

    Returns:
        str: Re-serialized URL
    """
    if not query:
        return url
    parts = urlsplit(url)
    search = f"{parts.query}&{query}" if parts.query else query
    return urlunsplit((parts.scheme, parts.netloc, parts.path, search, parts.fragment))


def add_query_params(url: str, params: Dict[str, Optional[str]]) -> str:
    """URL-encode params (None values dropped) and append them to url."""
    clean = {k: v for k, v in params.items() if v is not None}
    return append_query(url, urlencode(clean))


def build_profile_url(profile_url: str, fields: str) -> str:
    """
    Build the profile request URL.

    Args:
        profile_url: Profile endpoint, may already carry a query string
        fields: Output of convert_profile_fields()

    Returns:
        str: URL with `fields=<value>` appended, or the endpoint unchanged
             when no fields were requested
    """
    if not fields:
        return profile_url
    return append_query(profile_url, f"{FIELDS_PARAM}={fields}")


def normalize_scope(scope: Union[str, Iterable[str], None], separator: str) -> Optional[str]:
    """Join a scope list with the provider separator; strings pass through."""
    if scope is None:
        return None
    if isinstance(scope, str):
        return scope or None
    joined = separator.join(s for s in scope if s)
    return joined or None
