"""Vouchers FastAPI application.

Receives payment gateway notifications and serves the order and voucher
endpoints. Every request under a domain route is wrapped in the vouchers
domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from vouchers.domain import vouchers
from vouchers.utils.logging import add_context, clear_context, configure_logging

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the config overlay; ENVIRONMENT selects the log format.
configure_logging()
vouchers.init()

_DOMAIN_PREFIXES = ("/payments", "/orders", "/vouchers")

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Spa Voucher API",
    description="Payment reconciliation and gift voucher issuance",
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
    """Push the vouchers domain context for domain routes."""
    if not request.url.path.startswith(_DOMAIN_PREFIXES):
        # Health check, docs
        return await call_next(request)

    add_context(method=request.method, path=request.url.path)
    try:
        with vouchers.domain_context():
            return await call_next(request)
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from vouchers.api import order_router, payment_router, voucher_router  # noqa: E402

app.include_router(payment_router)
app.include_router(order_router)
app.include_router(voucher_router)
register_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": vouchers.name})
