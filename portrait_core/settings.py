from __future__ import annotations

import os

_EMPTY_MASK_POLICIES = {"transparent", "original", "error"}


def _get_choice(name: str, default: str, choices: set[str]) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value not in choices:
        raise ValueError(f"{name} must be one of {sorted(choices)} (got {raw!r})")
    return value


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an int (got {raw!r})") from exc


class Settings:
    max_upload_mb: int = _get_int("MAX_UPLOAD_MB", 20)
    log_level: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()

    # What segment() returns when no foreground survives refinement:
    # - transparent: fully transparent image (historical behaviour)
    # - original: untouched copy of the input
    # - error: raise NoForegroundDetected
    empty_mask_policy: str = _get_choice("EMPTY_MASK_POLICY", "transparent", _EMPTY_MASK_POLICIES)

    default_hair_color: str = os.getenv("DEFAULT_HAIR_COLOR", "#8b4513").strip()


settings = Settings()
