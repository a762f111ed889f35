from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field

DEFAULT_OPENAI_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_OPENAI_MODEL = "gpt-3.5-turbo"
DEFAULT_OPENAI_TIMEOUT_SECONDS = 30.0

_TRUTHY = {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_positive_float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    if parsed <= 0:
        return default
    return parsed


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


def _get_str_env(name: str, default: str) -> str:
    # Blank values fall back to the default, same as an unset variable.
    value = os.getenv(name, "").strip()
    return value or default


def _get_regex_list_json_env(name: str) -> list[str]:
    raw = os.getenv(name, "")
    if not raw.strip():
        return []
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"{name} must be a JSON array of strings") from exc
    if not isinstance(parsed, list):
        raise ValueError(f"{name} must be a JSON array of strings")

    patterns: list[str] = []
    for idx, item in enumerate(parsed):
        if not isinstance(item, str):
            raise ValueError(f"{name}[{idx}] must be a string")
        pattern = item.strip()
        if not pattern:
            continue
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ValueError(f"{name}[{idx}] is not a valid regex: {pattern}") from exc
        patterns.append(pattern)
    return patterns


@dataclass(frozen=True)
class Settings:
    port: int
    log_level: str
    openai_url: str
    openai_token: str
    openai_model: str
    openai_timeout_seconds: float
    chat_trim_input: bool
    masking_regex_list: list[str] = field(default_factory=list)


def load_settings() -> Settings:
    return Settings(
        port=_get_int_env("PORT", 8000),
        log_level=os.getenv("LOG_LEVEL", "info"),
        openai_url=_get_str_env("OPENAI_URL", DEFAULT_OPENAI_URL),
        openai_token=os.getenv("OPENAI_TOKEN", "").strip(),
        openai_model=_get_str_env("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
        openai_timeout_seconds=_get_positive_float_env(
            "OPENAI_TIMEOUT_SECONDS", DEFAULT_OPENAI_TIMEOUT_SECONDS
        ),
        chat_trim_input=_get_bool_env("CHAT_TRIM_INPUT"),
        masking_regex_list=_get_regex_list_json_env("MASKING_REGEX_LIST_JSON"),
    )
