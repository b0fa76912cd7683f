from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    code = "error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class InvalidRequestError(AppError):
    code = "invalid_request"


class ParticipantsInvalidError(AppError):
    code = "participants_invalid"


class NotFoundOrForbiddenError(AppError):
    """Covers both "does not exist" and "not allowed" so existence is not leaked."""

    code = "not_found_or_forbidden"


class InvalidContentError(AppError):
    code = "invalid_content"


class InvalidExpiryError(AppError):
    code = "invalid_expiry"


class StoreUnavailableError(AppError):
    """Transient storage failure. Safe for the caller to retry."""

    code = "store_unavailable"
