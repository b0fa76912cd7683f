"""Translate driver-level failures into the application's StoreUnavailableError."""
from __future__ import annotations

import functools
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError

from dm_service.application.exceptions import StoreUnavailableError

R = TypeVar("R")


def translate_db_errors(
    fn: Callable[..., Awaitable[R]],
) -> Callable[..., Awaitable[R]]:
    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> R:
        try:
            return await fn(*args, **kwargs)
        except IntegrityError:
            raise
        except DBAPIError as exc:
            raise StoreUnavailableError("Storage temporarily unavailable") from exc

    return wrapper
