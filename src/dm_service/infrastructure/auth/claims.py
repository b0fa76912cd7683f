from __future__ import annotations

from typing import Any

from dm_service.application.dto.principal import Principal


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Map verified JWT claims to the caller identity. `sub` is the user id."""
    return Principal(
        user_id=int(payload["sub"]),
        roles=list(payload.get("roles", [])),
    )
