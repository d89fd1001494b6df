"""Minimal Gemini generateContent HTTP helper (no external SDK dependency)."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

LOGGER = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash-preview-05-20"


class GeminiHttpError(RuntimeError):
    """Raised when the Gemini HTTP call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GeminiMalformedResponseError(GeminiHttpError):
    """Raised when Gemini answered but the body is not usable JSON."""


def generate_content_url(api_base_url: str, model: str) -> str:
    return f"{api_base_url.rstrip('/')}/models/{quote(model, safe='.-_')}:generateContent"


def request_generate_content(
    *,
    api_key: str,
    prompt: str,
    model: str = DEFAULT_MODEL,
    api_base_url: str = DEFAULT_API_BASE_URL,
    timeout_seconds: int = 30,
) -> dict[str, Any]:
    body = {
        "contents": [
            {
                "role": "user",
                "parts": [{"text": prompt}],
            }
        ]
    }
    data = json.dumps(body, ensure_ascii=True).encode("utf-8")
    req = Request(
        url=generate_content_url(api_base_url, model),
        data=data,
        method="POST",
        headers={
            "content-type": "application/json",
            "x-goog-api-key": api_key,
        },
    )

    try:
        with urlopen(req, timeout=timeout_seconds) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as exc:
        detail = ""
        try:
            detail = exc.read().decode("utf-8", errors="replace").strip()
        except Exception:
            detail = ""
        if detail:
            LOGGER.error("gemini API error status=%s body=%s", exc.code, detail[:500])
        reason = f" {exc.reason}" if getattr(exc, "reason", None) else ""
        raise GeminiHttpError(f"Gemini API Error: {exc.code}{reason}", status_code=exc.code) from exc
    except URLError as exc:
        reason = exc.reason if getattr(exc, "reason", None) else str(exc)
        raise GeminiHttpError(f"Gemini API connection error: {reason}") from exc
    except Exception as exc:
        raise GeminiHttpError("Gemini API request failed") from exc

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise GeminiMalformedResponseError("Gemini API returned non-JSON response") from exc

    if not isinstance(payload, dict):
        raise GeminiMalformedResponseError("Gemini API response must be an object")

    return payload


def extract_first_candidate_text(payload: dict[str, Any]) -> str:
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    first = candidates[0]
    if not isinstance(first, dict):
        return ""
    content = first.get("content")
    if not isinstance(content, dict):
        return ""
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts:
        return ""
    part = parts[0]
    if not isinstance(part, dict):
        return ""
    text = part.get("text")
    if not isinstance(text, str):
        return ""
    return text
