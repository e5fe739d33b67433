from __future__ import annotations

import json
import logging
import re
import time
import uuid
from functools import lru_cache
from typing import Any

from openai import OpenAI

from career_helper.core.config import settings
from career_helper.storage.db import log_ai_analysis_run

logger = logging.getLogger(__name__)

_JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_PLACEHOLDER_PREFIXES = ("your_", "replace_")
_PLACEHOLDER_VALUES = {"changeme", "todo"}


class AnalysisLLMError(RuntimeError):
    def __init__(self, message: str, *, code: str = "llm_unavailable"):
        super().__init__(message)
        self.code = code


def _is_placeholder_key(value: str) -> bool:
    lower = value.lower()
    return lower.startswith(_PLACEHOLDER_PREFIXES) or lower in _PLACEHOLDER_VALUES


def analysis_llm_enabled() -> bool:
    api_key = settings.openai_api_key or ""
    return settings.analysis_llm_enabled and bool(api_key) and not _is_placeholder_key(api_key)


@lru_cache(maxsize=4)
def _client_for(api_key: str, base_url: str | None, timeout_s: float, max_retries: int) -> OpenAI:
    return OpenAI(api_key=api_key, base_url=base_url, timeout=timeout_s, max_retries=max_retries)


def _client() -> OpenAI:
    return _client_for(
        settings.openai_api_key or "",
        settings.openai_base_url,
        settings.analysis_llm_timeout_s,
        settings.openai_max_retries,
    )


def _log_ai_run(*, run_id: str, tool_slug: str, status: str, error_code: str | None, latency_ms: int) -> None:
    try:
        log_ai_analysis_run(
            run_id=run_id,
            tool_slug=tool_slug or "unknown",
            model=settings.ai_model,
            schema_valid=status == "success",
            status=status,
            error_code=error_code,
            latency_ms=latency_ms,
        )
    except Exception:  # pragma: no cover - telemetry must not break analyses
        logger.debug("ai_run_logging_failed", exc_info=True)


def parse_json_payload(content: str) -> Any:
    """Parse model output, tolerating prose or code fences around the JSON object."""
    try:
        return json.loads(content)
    except ValueError:
        match = _JSON_OBJECT_PATTERN.search(content)
        if not match:
            raise
        return json.loads(match.group(0))


def _request_json(
    *, system_prompt: str, user_prompt: str, temperature: float, max_output_tokens: int
) -> tuple[dict[str, Any] | None, str, str | None]:
    """Run one completion and classify it as ``(payload, status, error_code)``."""
    response = _client().chat.completions.create(
        model=settings.ai_model,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        temperature=temperature,
        response_format={"type": "json_object"},
        max_tokens=max_output_tokens,
    )
    content = response.choices[0].message.content if response.choices else ""
    if not content:
        return None, "empty", "empty_response"
    parsed = parse_json_payload(content)
    if not isinstance(parsed, dict):
        return None, "invalid_schema", "invalid_schema"
    return parsed, "success", None


def json_completion(
    *,
    system_prompt: str,
    user_prompt: str,
    temperature: float = 0.2,
    max_output_tokens: int = 1800,
    tool_slug: str = "unknown",
) -> dict[str, Any] | None:
    """Ask the model for a JSON object. Every outcome is recorded as an AI run; failures return None."""
    run_id = uuid.uuid4().hex
    if not analysis_llm_enabled():
        _log_ai_run(run_id=run_id, tool_slug=tool_slug, status="skipped", error_code="llm_disabled", latency_ms=0)
        return None

    started = time.perf_counter()
    try:
        payload, status, error_code = _request_json(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )
    except Exception as exc:  # noqa: BLE001 - surfaced to callers as a missing payload
        logger.warning(
            "analysis_llm_json_failed model=%s prompt_len=%s: %s", settings.ai_model, len(user_prompt), exc
        )
        payload, status, error_code = None, "error", "llm_exception"

    _log_ai_run(
        run_id=run_id,
        tool_slug=tool_slug,
        status=status,
        error_code=error_code,
        latency_ms=int((time.perf_counter() - started) * 1000),
    )
    return payload


def json_completion_required(**kwargs: Any) -> dict[str, Any]:
    if not analysis_llm_enabled():
        raise AnalysisLLMError("Resume analysis is not configured. Set OPENAI_API_KEY.", code="llm_disabled")
    payload = json_completion(**kwargs)
    if not payload:
        raise AnalysisLLMError("Resume analysis failed. Please try again.", code="llm_invalid")
    return payload
