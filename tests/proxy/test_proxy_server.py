from typing import Mapping

from fastapi.testclient import TestClient

from finplan.models.plan import PlanErrorKind, PlanFailure, PlanResult, PlanSuccess
from finplan.proxy.server import create_app


class _StubProxy:
    def __init__(self, result: PlanResult) -> None:
        self._result = result
        self.calls: list[dict[str, str]] = []

    def request_plan(self, answers: Mapping[str, str]) -> PlanResult:
        self.calls.append(dict(answers))
        return self._result


def test_plan_endpoint_returns_plan() -> None:
    proxy = _StubProxy(PlanSuccess(plan_text="## Plan"))
    client = TestClient(create_app(proxy))  # type: ignore[arg-type]

    resp = client.post("/api/plan", json={"answers": {"name": "Asha", "age": "30"}})
    assert resp.status_code == 200
    assert resp.json() == {"plan": "## Plan"}
    assert proxy.calls == [{"name": "Asha", "age": "30"}]


def test_plan_endpoint_relays_upstream_error() -> None:
    proxy = _StubProxy(
        PlanFailure(kind=PlanErrorKind.UPSTREAM, message="Gemini API Error: 500 Internal Server Error", status_code=500)
    )
    client = TestClient(create_app(proxy))  # type: ignore[arg-type]

    resp = client.post("/api/plan", json={"answers": {"name": "Asha"}})
    assert resp.status_code == 502
    assert resp.json() == {"error": "Gemini API Error: 500 Internal Server Error"}


def test_plan_endpoint_configuration_error_is_500() -> None:
    proxy = _StubProxy(PlanFailure(kind=PlanErrorKind.CONFIGURATION, message="API key is not configured on the server."))
    client = TestClient(create_app(proxy))  # type: ignore[arg-type]

    resp = client.post("/api/plan", json={"answers": {}})
    assert resp.status_code == 500
    assert resp.json() == {"error": "API key is not configured on the server."}


def test_plan_endpoint_rejects_invalid_body() -> None:
    proxy = _StubProxy(PlanSuccess(plan_text="unused"))
    client = TestClient(create_app(proxy))  # type: ignore[arg-type]

    resp = client.post("/api/plan", json={"profile": {"name": "Asha"}})
    assert resp.status_code == 400
    assert "error" in resp.json()
    assert proxy.calls == []


def test_plan_endpoint_only_accepts_post() -> None:
    client = TestClient(create_app(_StubProxy(PlanSuccess(plan_text="x"))))  # type: ignore[arg-type]
    assert client.get("/api/plan").status_code == 405
    assert client.get("/healthz").json() == {"status": "ok"}


def test_plan_route_is_configurable() -> None:
    client = TestClient(create_app(_StubProxy(PlanSuccess(plan_text="x")), plan_route="/getPlan"))  # type: ignore[arg-type]
    assert client.post("/getPlan", json={"answers": {}}).json() == {"plan": "x"}
