"""Storefront FastAPI application.

Web server for the Sales domain. Commands are processed synchronously and
each request runs inside the Sales domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from uuid import uuid4

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from pyproject.toml [tool.protean].
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sales.domain import sales
from sales.utils.logging import bind_request_context, clear_request_context, configure_logging

configure_logging()
sales.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Order placement with tiered wholesale pricing",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the Sales domain context and tag every log line with the request id."""
    request_id = request.headers.get("X-Request-ID") or uuid4().hex
    bind_request_context(request_id=request_id, path=request.url.path, method=request.method)
    try:
        with sales.domain_context():
            response = await call_next(request)
    finally:
        clear_request_context()

    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Routers and error mapping
# ---------------------------------------------------------------------------
from sales.api import (  # noqa: E402
    account_router,
    order_router,
    pricing_router,
    product_router,
    register_sales_exception_handlers,
)

register_sales_exception_handlers(app)

app.include_router(order_router)
app.include_router(pricing_router)
app.include_router(product_router)
app.include_router(account_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": sales.name}})
