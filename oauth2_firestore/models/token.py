"""
Domain model for persisted OAuth2 token records.

A single immutable value carries the authorization code, access token and
refresh token material issued for one grant. Document keys use the
capitalised field names (``Code``, ``Access``, ...) so that lookups can
filter on them and records written by other go-oauth2 Firestore stores
remain readable.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_DURATION_KEYS = ("CodeExpiresIn", "AccessExpiresIn", "RefreshExpiresIn")
_NANOS_PER_SECOND = 1_000_000_000
_NANOS_PER_MICROSECOND = 1_000


def _to_nanoseconds(value: timedelta) -> int:
    seconds = value.days * 86_400 + value.seconds
    return seconds * _NANOS_PER_SECOND + value.microseconds * _NANOS_PER_MICROSECOND


def _from_nanoseconds(value: int) -> timedelta:
    return timedelta(microseconds=value // _NANOS_PER_MICROSECOND)


def _expiry(created_at: Optional[datetime], expires_in: timedelta) -> Optional[datetime]:
    if created_at is None or not expires_in:
        return None
    return created_at + expires_in


class TokenInfo(BaseModel):
    """Code, access and refresh material issued for one grant."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    client_id: str = Field("", alias="ClientID")
    user_id: str = Field("", alias="UserID")
    redirect_uri: str = Field("", alias="RedirectURI")
    scope: str = Field("", alias="Scope")
    code: str = Field("", alias="Code")
    code_challenge: str = Field("", alias="CodeChallenge")
    code_challenge_method: str = Field("", alias="CodeChallengeMethod")
    code_create_at: Optional[datetime] = Field(None, alias="CodeCreateAt")
    code_expires_in: timedelta = Field(timedelta(0), alias="CodeExpiresIn")
    access: str = Field("", alias="Access")
    access_create_at: Optional[datetime] = Field(None, alias="AccessCreateAt")
    access_expires_in: timedelta = Field(timedelta(0), alias="AccessExpiresIn")
    refresh: str = Field("", alias="Refresh")
    refresh_create_at: Optional[datetime] = Field(None, alias="RefreshCreateAt")
    refresh_expires_in: timedelta = Field(timedelta(0), alias="RefreshExpiresIn")

    @field_validator("code_create_at", "access_create_at", "refresh_create_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Firestore stores instants, so naive timestamps are read as UTC."""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def code_expires_at(self) -> Optional[datetime]:
        return _expiry(self.code_create_at, self.code_expires_in)

    @property
    def access_expires_at(self) -> Optional[datetime]:
        return _expiry(self.access_create_at, self.access_expires_in)

    @property
    def refresh_expires_at(self) -> Optional[datetime]:
        return _expiry(self.refresh_create_at, self.refresh_expires_in)

    def is_zero(self) -> bool:
        """Return True when every field still holds its zero value."""
        zero = TokenInfo()
        return all(
            getattr(self, name) == getattr(zero, name) for name in TokenInfo.model_fields
        )

    def to_document(self) -> Dict[str, Any]:
        """Encode the token as a Firestore document keyed by field name."""
        document = self.model_dump(by_alias=True)
        for key in _DURATION_KEYS:
            document[key] = _to_nanoseconds(document[key])
        return document

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "TokenInfo":
        """Decode a stored document; absent fields read as zero values."""
        data = {key: value for key, value in document.items() if value is not None}
        for key in _DURATION_KEYS:
            value = data.get(key)
            if isinstance(value, int) and not isinstance(value, bool):
                data[key] = _from_nanoseconds(value)
        return cls.model_validate(data)


__all__ = ["TokenInfo"]
