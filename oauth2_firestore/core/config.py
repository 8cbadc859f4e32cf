"""
Settings used to wire a token store into an application process.

The store itself reads no configuration; these helpers let an application
build the Firestore client and collection binding from the environment or a
``.env`` file.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from oauth2_firestore.clients.firestore import DEFAULT_TIMEOUT_SECONDS


class FirestoreSettings(BaseSettings):
    """Firestore project and collection used for token persistence."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    project_id: Optional[str] = Field(
        None,
        validation_alias="FIRESTORE_PROJECT_ID",
        description="Google Cloud project; falls back to the ambient credentials when omitted.",
    )
    database: str = Field("(default)", validation_alias="FIRESTORE_DATABASE")
    collection: str = Field("oauth2_tokens", validation_alias="TOKEN_STORE_COLLECTION")
    timeout_seconds: float = Field(
        DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        validation_alias="TOKEN_STORE_TIMEOUT_SECONDS",
        description="Upper bound for every Firestore round trip.",
    )
    log_level: str = Field("INFO", validation_alias="TOKEN_STORE_LOG_LEVEL")

    @field_validator("collection")
    @classmethod
    def _require_collection(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Collection name must not be empty.")
        return cleaned


@lru_cache()
def get_settings() -> FirestoreSettings:
    """Return a cached settings object."""
    return FirestoreSettings()


__all__ = ["FirestoreSettings", "get_settings"]
