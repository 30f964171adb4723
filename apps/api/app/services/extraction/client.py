from __future__ import annotations

import importlib
import json
import logging
import os
from typing import Any

import httpx

from app.core.config import get_settings
from app.core.errors import ExtractionError
from app.services.prompts import render_prompt

logger = logging.getLogger(__name__)

EXTRACTION_FAILED_MESSAGE = "Analysis failed. Please ensure documents contain person names and titles."


def _extract_json_object(text: str) -> dict[str, Any] | None:
    raw = text.strip()
    if not raw:
        return None

    candidates = [raw]
    start = raw.find("{")
    end = raw.rfind("}")
    if start >= 0 and end > start:
        candidates.append(raw[start : end + 1])

    for candidate in candidates:
        try:
            payload = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(payload, dict):
            return payload
    return None


def _extract_via_openai(text: str) -> dict[str, Any] | None:
    settings = get_settings()
    if settings.llm_provider.strip().lower() != "openai":
        logger.warning("extraction_llm_provider_not_supported", extra={"provider": settings.llm_provider})
        return None

    api_key = os.getenv("OPENAI_API_KEY", "").strip()
    if not api_key:
        logger.error("extraction_missing_openai_api_key")
        return None

    from openai import OpenAI

    messages = [
        {"role": "system", "content": render_prompt("account_hierarchy_system")},
        {"role": "user", "content": render_prompt("account_hierarchy_user", document_text=text)},
    ]
    try:
        client = OpenAI(api_key=api_key, timeout=settings.extraction_timeout_seconds)
        response = client.chat.completions.create(
            model=settings.llm_model,
            messages=messages,
            temperature=0.0,
            response_format={"type": "json_object"},
        )
    except Exception:
        logger.exception("openai_extraction_failed", extra={"llm_model": settings.llm_model})
        return None

    content = (response.choices[0].message.content or "").strip()
    payload = _extract_json_object(content)
    if payload is None:
        logger.error("openai_extraction_invalid_json", extra={"llm_model": settings.llm_model})
    return payload


def _extract_via_http(text: str) -> dict[str, Any] | None:
    settings = get_settings()
    if not settings.extraction_endpoint:
        logger.error("extraction_endpoint_not_configured")
        return None

    url = f"{settings.extraction_endpoint.rstrip('/')}/extract"
    try:
        with httpx.Client(timeout=settings.extraction_timeout_seconds) as client:
            response = client.post(url, json={"text": text})
        response.raise_for_status()
        result = response.json()
    except (httpx.HTTPError, ValueError):
        logger.exception("http_extraction_failed", extra={"url": url})
        return None

    if not isinstance(result, dict):
        logger.error("http_extraction_invalid_result_type", extra={"type": type(result).__name__})
        return None
    return result


def _extract_via_local_module(text: str) -> dict[str, Any] | None:
    settings = get_settings()
    try:
        module = importlib.import_module(settings.extraction_local_module)
        extractor = getattr(module, settings.extraction_local_function)
    except (ImportError, AttributeError, ValueError):
        logger.exception(
            "local_extraction_import_failed",
            extra={
                "module": settings.extraction_local_module,
                "function": settings.extraction_local_function,
            },
        )
        return None

    try:
        result = extractor(text)
    except Exception:
        logger.exception("local_extraction_execution_failed")
        return None

    if not isinstance(result, dict):
        logger.error("local_extraction_invalid_result_type", extra={"type": type(result).__name__})
        return None
    return result


def extract_account_analysis(text: str) -> dict[str, Any]:
    """
    Run the configured extraction backend over the combined document text.

    Backends:
    - openai: chat completion in JSON mode (default)
    - http: POST to a self-hosted extraction service
    - local: call an importable function taking the text

    The result is raw and untrusted; callers normalize it before use.
    Raises ExtractionError when the backend produced nothing usable.
    """
    settings = get_settings()
    backend = settings.extraction_backend

    if backend == "openai":
        result = _extract_via_openai(text)
    elif backend == "http":
        result = _extract_via_http(text)
    else:
        result = _extract_via_local_module(text)

    if result is None:
        raise ExtractionError(EXTRACTION_FAILED_MESSAGE)
    return result
