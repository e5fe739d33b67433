from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_credentials: bool
    storage_db_path: str
    ai_run_retention_days: int
    ocr_lang: str
    ocr_scale: float
    resume_prompt_max_chars: int
    analysis_llm_enabled: bool
    openai_api_key: str | None
    openai_base_url: str | None
    ai_model: str
    analysis_llm_timeout_s: float
    openai_max_retries: int


settings = Settings(
    api_key=_get_env("API_KEY"),
    rate_limit=_get_env("RATE_LIMIT", "30/minute") or "30/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ],
    ),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", False),
    storage_db_path=_get_env("STORAGE_DB_PATH", "data/career_helper.db") or "data/career_helper.db",
    ai_run_retention_days=_get_env_int("AI_RUN_RETENTION_DAYS", 90),
    ocr_lang=_get_env("OCR_LANG", "eng") or "eng",
    ocr_scale=_get_env_float("OCR_SCALE", 2.0),
    resume_prompt_max_chars=_get_env_int("RESUME_PROMPT_MAX_CHARS", 20000),
    analysis_llm_enabled=_get_env_bool("ANALYSIS_LLM_ENABLED", True),
    openai_api_key=(_get_env("OPENAI_API_KEY") or "").strip() or None,
    openai_base_url=_get_env("OPENAI_BASE_URL"),
    ai_model=(_get_env("AI_MODEL") or _get_env("OPENAI_MODEL") or "gpt-4o-mini").strip(),
    analysis_llm_timeout_s=_get_env_float("ANALYSIS_LLM_TIMEOUT_S", 60.0),
    openai_max_retries=_get_env_int("OPENAI_MAX_RETRIES", 2),
)

if settings.ocr_scale <= 0:
    raise RuntimeError("OCR_SCALE must be greater than 0.")
