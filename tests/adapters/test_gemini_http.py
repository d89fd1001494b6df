import io
import json
from typing import Any
from urllib.error import HTTPError, URLError

import pytest

from finplan.adapters.gemini_http import (
    GeminiHttpError,
    GeminiMalformedResponseError,
    extract_first_candidate_text,
    generate_content_url,
    request_generate_content,
)


class _FakeResponse:
    def __init__(self, body: str) -> None:
        self._body = body.encode("utf-8")

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "_FakeResponse":
        return self

    def __exit__(self, *exc: Any) -> None:
        return None


def test_request_posts_prompt_with_key_header(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, Any] = {}

    def _fake_urlopen(req, timeout):  # type: ignore[no-untyped-def]
        seen["url"] = req.full_url
        seen["method"] = req.get_method()
        seen["key"] = req.get_header("X-goog-api-key")
        seen["body"] = json.loads(req.data.decode("utf-8"))
        seen["timeout"] = timeout
        return _FakeResponse(json.dumps({"candidates": []}))

    monkeypatch.setattr("finplan.adapters.gemini_http.urlopen", _fake_urlopen)

    payload = request_generate_content(
        api_key="secret-key",
        prompt="hello",
        model="gemini-test",
        api_base_url="https://example.test/v1beta/",
        timeout_seconds=7,
    )
    assert payload == {"candidates": []}
    assert seen["url"] == "https://example.test/v1beta/models/gemini-test:generateContent"
    assert "secret-key" not in seen["url"]
    assert seen["method"] == "POST"
    assert seen["key"] == "secret-key"
    assert seen["body"] == {"contents": [{"role": "user", "parts": [{"text": "hello"}]}]}
    assert seen["timeout"] == 7


def test_request_maps_http_error_with_status(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fake_urlopen(req, timeout):  # type: ignore[no-untyped-def]
        raise HTTPError(req.full_url, 500, "Internal Server Error", {}, io.BytesIO(b'{"error": "boom"}'))

    monkeypatch.setattr("finplan.adapters.gemini_http.urlopen", _fake_urlopen)

    with pytest.raises(GeminiHttpError) as excinfo:
        request_generate_content(api_key="k", prompt="p")
    assert excinfo.value.status_code == 500
    assert "500" in str(excinfo.value)
    assert not isinstance(excinfo.value, GeminiMalformedResponseError)


def test_request_maps_connection_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fake_urlopen(req, timeout):  # type: ignore[no-untyped-def]
        raise URLError("name resolution failed")

    monkeypatch.setattr("finplan.adapters.gemini_http.urlopen", _fake_urlopen)

    with pytest.raises(GeminiHttpError) as excinfo:
        request_generate_content(api_key="k", prompt="p")
    assert excinfo.value.status_code is None
    assert "connection error" in str(excinfo.value)


def test_request_rejects_non_json_body(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "finplan.adapters.gemini_http.urlopen",
        lambda req, timeout: _FakeResponse("<html>oops</html>"),
    )
    with pytest.raises(GeminiMalformedResponseError):
        request_generate_content(api_key="k", prompt="p")


def test_extract_first_candidate_text() -> None:
    payload = {
        "candidates": [
            {"content": {"parts": [{"text": "first"}, {"text": "second"}]}},
            {"content": {"parts": [{"text": "other"}]}},
        ]
    }
    assert extract_first_candidate_text(payload) == "first"
    assert extract_first_candidate_text({}) == ""
    assert extract_first_candidate_text({"candidates": [{"content": {}}]}) == ""
    assert extract_first_candidate_text({"candidates": [{"content": {"parts": [{"text": 3}]}}]}) == ""


def test_generate_content_url_quotes_model() -> None:
    url = generate_content_url("https://example.test/v1beta", "gemini 2.5/flash")
    assert url == "https://example.test/v1beta/models/gemini%202.5%2Fflash:generateContent"
