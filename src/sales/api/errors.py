"""HTTP mappings for Sales errors that Protean's standard handlers do not cover.

Rule violations keep Protean's 422 but also report the shortfall. Retryable
failures answer 503 with a ``Retry-After`` header.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from sales.errors import BusinessRuleViolation, RetryableError


def register_sales_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    @app.exception_handler(BusinessRuleViolation)
    async def business_rule_handler(request: Request, exc: BusinessRuleViolation) -> JSONResponse:
        body = exc.to_dict()
        return JSONResponse(
            status_code=422,
            content={"error": body["message"], "code": body["code"], "shortfall": body["shortfall"]},
        )

    @app.exception_handler(RetryableError)
    async def retryable_handler(request: Request, exc: RetryableError) -> JSONResponse:
        return JSONResponse(
            status_code=503,
            content={"error": str(exc)},
            headers={"Retry-After": str(exc.retry_after_seconds)},
        )
