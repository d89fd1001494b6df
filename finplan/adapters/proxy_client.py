"""Bot-side HTTP client for the plan request proxy."""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from finplan.models.plan import PlanErrorKind, PlanFailure, PlanResult, PlanSuccess


class ProxyClientError(RuntimeError):
    """Raised when the proxy cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _error_from_body(raw: str) -> str:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        return ""
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"].strip()
    return ""


class PlanProxyClient:
    def __init__(self, proxy_url: str, timeout_seconds: int = 60) -> None:
        self._proxy_url = proxy_url
        self._timeout_seconds = timeout_seconds

    def _post_json(self, body: dict[str, Any]) -> dict[str, Any]:
        data = json.dumps(body, ensure_ascii=True).encode("utf-8")
        req = Request(
            url=self._proxy_url,
            data=data,
            method="POST",
            headers={"content-type": "application/json"},
        )
        try:
            with urlopen(req, timeout=self._timeout_seconds) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except HTTPError as exc:
            detail = ""
            try:
                detail = _error_from_body(exc.read().decode("utf-8", errors="replace"))
            except Exception:
                detail = ""
            raise ProxyClientError(detail or f"API Error: {exc.code}", status_code=exc.code) from exc
        except URLError as exc:
            reason = exc.reason if getattr(exc, "reason", None) else str(exc)
            raise ProxyClientError(f"plan service connection error: {reason}") from exc
        except Exception as exc:
            raise ProxyClientError("plan service request failed") from exc

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ProxyClientError("plan service returned non-JSON response") from exc
        if not isinstance(payload, dict):
            raise ProxyClientError("plan service response must be an object")
        return payload

    def request_plan(self, answers: Mapping[str, str]) -> PlanResult:
        try:
            payload = self._post_json({"answers": dict(answers)})
        except ProxyClientError as exc:
            return PlanFailure(kind=PlanErrorKind.UPSTREAM, message=str(exc), status_code=exc.status_code)

        plan = payload.get("plan")
        if not isinstance(plan, str) or not plan:
            return PlanFailure(
                kind=PlanErrorKind.MALFORMED_RESPONSE,
                message="plan service response did not include a plan",
            )
        return PlanSuccess(plan_text=plan)
