"""Harvest Hub marketplace FastAPI application.

Commands are processed synchronously per request inside the marketplace
domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload

Environment:
    PROTEAN_ENV          config overlay from marketplace/domain.toml
                         (unset/"test": projectors run in the unit of work,
                         "production": projectors run in the Engine)
    MARKETPLACE_CATALOG  JSON product list loaded into the in-memory catalog
"""

import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from marketplace.api import (
    inventory_router,
    order_router,
    payment_router,
    register_marketplace_exception_handlers,
)
from marketplace.catalog import set_catalog
from marketplace.catalog.memory_adapter import InMemoryCatalog
from marketplace.domain import marketplace
from marketplace.utils.logging import configure_logging, request_context

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized at module level so uvicorn workers share it.
configure_logging()
marketplace.init()

if os.environ.get("MARKETPLACE_CATALOG"):
    set_catalog(InMemoryCatalog.from_file(os.environ["MARKETPLACE_CATALOG"]))

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Harvest Hub Marketplace API",
    description="Local food marketplace: checkout, order fulfillment, payments and stock",
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
    """Push the marketplace domain context and bind the request to the log context."""
    with request_context(method=request.method, path=request.url.path):
        with marketplace.domain_context():
            return await call_next(request)


app.include_router(order_router)
app.include_router(payment_router)
app.include_router(inventory_router)
register_marketplace_exception_handlers(app)


@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": marketplace.name})
