import os
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from dataroom.api.v1 import api_router
from dataroom.core.config import settings
from dataroom.core.database import async_engine, create_tables
from dataroom.core.exceptions import setup_exception_handlers
from dataroom.core.logging_config import get_logger, setup_logging

setup_logging("DEBUG" if settings.DEBUG else settings.LOG_LEVEL)
logger = get_logger(__name__)

app = FastAPI(
    title="Data Room Advisor API",
    description="Retrieval-augmented context assembly for the data room advisor",
    version="0.1.0",
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log one line per advisor call"""
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        started = time.perf_counter()

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        if request.url.path.startswith(settings.API_V1_STR):
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"in {(time.perf_counter() - started) * 1000:.1f}ms",
                extra={"request_id": request_id, "org_id": request.headers.get("X-Org-Id")},
            )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if settings.ENVIRONMENT == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


if not os.environ.get("TESTING"):
    app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(RequestContextMiddleware)

# Evidence bundles can be large
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Accept", "Origin", "X-User-Email", "X-Org-Id", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
    max_age=600,
)

setup_exception_handlers(app)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    return {"message": "Data Room Advisor API", "version": app.version}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.on_event("startup")
async def startup_event():
    # Test fixtures manage their own schema
    if not os.environ.get("TESTING"):
        await create_tables()
        logger.info("Data room tables ready")


@app.on_event("shutdown")
async def shutdown_event():
    await async_engine.dispose()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
    )
