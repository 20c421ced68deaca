"""
Profile Models
==============
Provider-agnostic user profile built from the Instagram Graph API
"me" response.

Attribute names are snake_case; the aliases give the Portable Contacts
shape (displayName, name.givenName, _raw, _json) that passport-style
consumers read.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import PROVIDER

_PORTABLE_CONFIG = ConfigDict(populate_by_name=True)


def _optional_str(v: Any) -> Optional[str]:
    """Provider values are copied through: None stays None, anything else becomes text."""
    if v is None:
        return None
    return v if isinstance(v, str) else str(v)


class ProfileName(BaseModel):
    """Structured name (Portable Contacts style)."""

    model_config = _PORTABLE_CONFIG

    given_name: Optional[str] = Field(default=None, alias="givenName")
    family_name: Optional[str] = Field(default=None, alias="familyName")

    @field_validator("given_name", "family_name", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> Optional[str]:
        return _optional_str(v)


class Profile(BaseModel):
    """
    Normalized user profile.

    Fields:
        provider: Always "instagram"
        id: Instagram user ID (opaque string)
        username: Instagram handle
        display_name: From `full_name`
        name: given/family name from `first_name` / `last_name`
        raw: Original response body
        json_data: Decoded response document
    """

    model_config = _PORTABLE_CONFIG

    provider: str = PROVIDER
    id: str = ""
    username: str = ""
    display_name: Optional[str] = Field(default=None, alias="displayName")
    name: ProfileName = Field(default_factory=ProfileName)

    raw: str = Field(default="", alias="_raw")
    json_data: Dict[str, Any] = Field(default_factory=dict, alias="_json")

    @field_validator("id", "username", mode="before")
    @classmethod
    def coerce_str(cls, v: Any) -> str:
        """Graph API may send numeric ids or null."""
        if v is None:
            return ""
        return str(v)

    @field_validator("display_name", mode="before")
    @classmethod
    def coerce_display_name(cls, v: Any) -> Optional[str]:
        return _optional_str(v)

    @field_validator("raw", mode="before")
    @classmethod
    def decode_raw(cls, v: Any) -> str:
        if isinstance(v, (bytes, bytearray)):
            return bytes(v).decode("utf-8", errors="replace")
        return v

    @classmethod
    def from_graph(cls, body: str, data: Dict[str, Any]) -> "Profile":
        """
        Build Profile from a decoded Graph API response.

        Missing name fields stay None; present ones are kept as text
        whatever JSON type they arrived as.

        Args:
            body: Raw response text
            data: json.loads(body)
        """
        return cls(
            id=data.get("id"),
            username=data.get("username"),
            display_name=data.get("full_name"),
            name=ProfileName(
                given_name=data.get("first_name"),
                family_name=data.get("last_name"),
            ),
            raw=body,
            json_data=data,
        )

    def to_dict(self) -> Dict[str, Any]:
        """snake_case plain dict, unset names omitted."""
        return self.model_dump(by_alias=False, exclude_none=True)

    def to_portable(self) -> Dict[str, Any]:
        """Portable Contacts dict (displayName, name.givenName, _raw, _json)."""
        return self.model_dump(by_alias=True, exclude_none=True)
