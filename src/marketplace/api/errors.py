"""Map marketplace errors to HTTP responses.

Protean's own handlers cover plain ``ValidationError`` (400) and
``ObjectNotFoundError`` (404). Starlette picks the handler of the most
specific class in the exception's MRO, so the marketplace classes below take
precedence for the errors they name.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from marketplace.errors import (
    CheckoutFailed,
    MarketplaceConflict,
    MarketplaceNotFound,
    MarketplaceValidationError,
)

logger = structlog.get_logger(__name__)


def _error_body(exc) -> dict:
    return {"code": exc.code, "error": exc.messages}


async def _validation_error(request: Request, exc: MarketplaceValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=_error_body(exc))


async def _not_found(request: Request, exc: MarketplaceNotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content=_error_body(exc))


async def _conflict(request: Request, exc: MarketplaceConflict) -> JSONResponse:
    return JSONResponse(status_code=409, content=_error_body(exc))


async def _checkout_failed(request: Request, exc: CheckoutFailed) -> JSONResponse:
    logger.error("checkout_failed_response", path=request.url.path)
    return JSONResponse(status_code=500, content=_error_body(exc))


def register_marketplace_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(MarketplaceValidationError, _validation_error)
    app.add_exception_handler(MarketplaceNotFound, _not_found)
    app.add_exception_handler(MarketplaceConflict, _conflict)
    app.add_exception_handler(CheckoutFailed, _checkout_failed)
