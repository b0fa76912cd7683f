"""Content, expiry and visibility rules for chat messages."""
from __future__ import annotations

from datetime import datetime, timedelta

from dm_service.application.exceptions import InvalidContentError, InvalidExpiryError
from dm_service.application.ports.clock import as_utc

MAX_CONTENT_LENGTH = 2000
MAX_TEMPORARY_TTL = timedelta(hours=24)


def normalize_content(content: str | None) -> str:
    text = (content or "").strip()
    if not text:
        raise InvalidContentError("Message content must not be empty")
    if len(text) > MAX_CONTENT_LENGTH:
        raise InvalidContentError(
            f"Message content must not exceed {MAX_CONTENT_LENGTH} characters"
        )
    return text


def resolve_expiry(
    temporary: bool,
    expires_at: datetime | None,
    sent_at: datetime,
) -> datetime | None:
    """Validated expiry for a message sent at sent_at, or None if not temporary."""
    if not temporary:
        return None
    if expires_at is None:
        raise InvalidExpiryError("Temporary messages require an expiry time")
    expires_at = as_utc(expires_at)
    if expires_at <= sent_at:
        raise InvalidExpiryError("Expiry time must be in the future")
    if expires_at - sent_at > MAX_TEMPORARY_TTL:
        raise InvalidExpiryError("Temporary messages cannot last more than 24 hours")
    return expires_at

