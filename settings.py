from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_str(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip()
    return raw or default


@dataclass(frozen=True)
class Settings:
    # Storage
    data_dir: str | None
    graduates_collection: str
    local_cache_slot: str

    # Debug
    debug_log_requests: bool


def get_settings() -> Settings:
    # Empty means "<project root>/data", resolved by persistence.paths.
    data_dir = (os.getenv("ALUMNI_DATA_DIR") or "").strip() or None

    return Settings(
        data_dir=data_dir,
        graduates_collection=_env_str("GRADUATES_COLLECTION", "graduates"),
        local_cache_slot=_env_str("LOCAL_CACHE_SLOT", "collegeGraduates"),
        debug_log_requests=_env_bool("DEBUG_LOG_REQUESTS", True),
    )
