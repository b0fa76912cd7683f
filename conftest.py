"""Root conftest: puts test settings into the environment before dm_service is imported."""
from __future__ import annotations

import os
from pathlib import Path

_ROOT = Path(__file__).resolve().parent
_DEFAULTS = {
    "POSTGRES_USER": "dm",
    "POSTGRES_PASSWORD": "dm",
    "POSTGRES_DB": "dm_test",
    "JWT_SECRET": "test-secret-key-with-at-least-32-bytes!",
    "ENVIRONMENT": "test",
    "REAPER_ENABLED": "false",
}


def _load_env_file(path: Path) -> None:
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip())


_env_test = _ROOT / ".env.test"
if _env_test.exists():
    _load_env_file(_env_test)
for _key, _value in _DEFAULTS.items():
    os.environ.setdefault(_key, _value)
