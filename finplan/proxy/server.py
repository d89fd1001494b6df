"""HTTP surface of the plan request proxy."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from finplan.models.plan import PlanErrorKind, PlanSuccess
from finplan.proxy.service import PlanRequestProxy

LOGGER = logging.getLogger(__name__)

DEFAULT_PLAN_ROUTE = "/api/plan"

_STATUS_BY_KIND = {
    PlanErrorKind.CONFIGURATION: 500,
    PlanErrorKind.UPSTREAM: 502,
    PlanErrorKind.MALFORMED_RESPONSE: 502,
}


class PlanRequestBody(BaseModel):
    answers: dict[str, str]


def create_app(proxy: PlanRequestProxy, plan_route: str = DEFAULT_PLAN_ROUTE) -> FastAPI:
    app = FastAPI(title="finplan proxy", docs_url=None, redoc_url=None, openapi_url=None)

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        LOGGER.info("rejected plan request body path=%s errors=%s", request.url.path, len(exc.errors()))
        return JSONResponse(
            status_code=400,
            content={"error": 'Request body must be {"answers": {<question id>: <answer text>}}.'},
        )

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    # Sync endpoint: FastAPI runs it in its worker threadpool around the blocking upstream call.
    @app.post(plan_route)
    def create_plan(body: PlanRequestBody) -> JSONResponse:
        result = proxy.request_plan(body.answers)
        if isinstance(result, PlanSuccess):
            return JSONResponse(status_code=200, content={"plan": result.plan_text})
        return JSONResponse(status_code=_STATUS_BY_KIND[result.kind], content={"error": result.message})

    return app
