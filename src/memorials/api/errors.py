"""Exception-to-response mapping shared by the application and the API tests."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from memorials.checkout.confirmation import PaymentNotCompleted
from memorials.gateway.port import GatewayError

logger = structlog.get_logger(__name__)


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    logger.warning("gateway_error", path=request.url.path, code=exc.code, message=exc.message)
    return JSONResponse(status_code=400, content={"error": exc.message})


async def payment_not_completed_handler(request: Request, exc: PaymentNotCompleted) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": f"Payment not completed (status: {exc.status})", "status": exc.status},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_error_handlers(app: FastAPI) -> None:
    """Protean's domain exception mapping plus the payment-specific ones."""
    register_exception_handlers(app)
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(PaymentNotCompleted, payment_not_completed_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
