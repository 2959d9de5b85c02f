"""Memorials FastAPI application.

Single-domain web server that processes commands synchronously via HTTP.
Every request runs inside the memorials domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → in-memory providers, inline broker
#   - "production" → PostgreSQL from DATABASE_URL
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from memorials.config import get_settings
from memorials.domain import memorials
from memorials.gateway import configure_gateway, shutdown_gateway
from memorials.utils.logging import bind_request_context, clear_request_context

memorials.init()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_gateway(get_settings())
    yield
    shutdown_gateway()


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Memorials API",
    description="Obituaries, condolences and tributes, with the memorial gift shop and checkout",
    lifespan=lifespan,
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
    """Push the memorials domain context and tag log lines with a request id."""
    bind_request_context(
        request_id=request.headers.get("X-Request-Id") or str(uuid.uuid4()),
        user_id=request.headers.get("X-User-Id"),
    )
    try:
        with memorials.domain_context():
            response = await call_next(request)
    finally:
        clear_request_context()
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from memorials.api import ALL_ROUTERS, register_error_handlers  # noqa: E402

for router in ALL_ROUTERS:
    app.include_router(router)

register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domain": memorials.name,
            "gateway": get_settings().gateway,
        }
    )
