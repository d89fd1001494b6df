"""Plan request proxy: one prompt, one Gemini call, one classified result."""

from __future__ import annotations

import logging
import time
from typing import Mapping, Optional

from finplan.adapters.gemini_http import (
    DEFAULT_API_BASE_URL,
    DEFAULT_MODEL,
    GeminiHttpError,
    GeminiMalformedResponseError,
    extract_first_candidate_text,
    request_generate_content,
)
from finplan.models.plan import PlanErrorKind, PlanFailure, PlanResult, PlanSuccess
from finplan.proxy.prompt import build_plan_prompt

LOGGER = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "API key is not configured on the server."
MALFORMED_RESPONSE_MESSAGE = "Unexpected API response format from Gemini."


class PlanRequestProxy:
    """Holds the Gemini credential and turns answer sets into plan text.

    Every call performs exactly one outbound request. Nothing is cached or
    retried, and every failure comes back as a PlanFailure instead of an
    exception.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        api_base_url: str = DEFAULT_API_BASE_URL,
        timeout_seconds: int = 30,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._api_base_url = api_base_url
        self._timeout_seconds = timeout_seconds

    def request_plan(self, answers: Mapping[str, str]) -> PlanResult:
        if not self._api_key:
            LOGGER.error("plan request rejected: gemini api key is not configured")
            return PlanFailure(kind=PlanErrorKind.CONFIGURATION, message=MISSING_KEY_MESSAGE)

        prompt = build_plan_prompt(answers)
        LOGGER.info("plan requested answers=%s prompt_len=%s model=%s", len(answers), len(prompt), self._model)
        started_at = time.time()
        try:
            payload = request_generate_content(
                api_key=self._api_key,
                prompt=prompt,
                model=self._model,
                api_base_url=self._api_base_url,
                timeout_seconds=self._timeout_seconds,
            )
        except GeminiMalformedResponseError as exc:
            LOGGER.error("plan request failed: %s", exc)
            return PlanFailure(kind=PlanErrorKind.MALFORMED_RESPONSE, message=str(exc), status_code=exc.status_code)
        except GeminiHttpError as exc:
            LOGGER.error("plan request failed: %s", exc)
            return PlanFailure(kind=PlanErrorKind.UPSTREAM, message=str(exc), status_code=exc.status_code)

        text = extract_first_candidate_text(payload)
        if not text:
            LOGGER.error("plan request failed: no candidate text in gemini response")
            return PlanFailure(kind=PlanErrorKind.MALFORMED_RESPONSE, message=MALFORMED_RESPONSE_MESSAGE)

        elapsed_ms = int((time.time() - started_at) * 1000)
        LOGGER.info("plan generated plan_len=%s elapsed_ms=%s", len(text), elapsed_ms)
        return PlanSuccess(plan_text=text)
