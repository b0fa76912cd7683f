"""Entrypoint: python -m dm_service"""
from __future__ import annotations

import uvicorn

from dm_service.config import settings


def main() -> None:
    uvicorn.run(
        "dm_service.app:create_app",
        factory=True,
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
