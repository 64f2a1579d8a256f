from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from starlette.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware
from fleethire.api import quotes
from fleethire.core.config import settings
from fleethire.core.redis import init_redis, close_redis, get_redis
from fleethire.core.metrics import request_count, request_duration, redis_connected, get_metrics_text
import time
import logging

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        try:
            response = await call_next(request)
            duration = time.time() - start_time

            request_count.labels(
                method=request.method,
                endpoint=request.url.path,
                status=response.status_code
            ).inc()

            request_duration.labels(
                method=request.method,
                endpoint=request.url.path
            ).observe(duration)

            return response
        except Exception:
            duration = time.time() - start_time
            request_count.labels(
                method=request.method,
                endpoint=request.url.path,
                status=500
            ).inc()
            request_duration.labels(
                method=request.method,
                endpoint=request.url.path
            ).observe(duration)
            raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting...")

    try:
        connection = await init_redis()
        redis_connected.set(1 if connection is not None else 0)
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        redis_connected.set(0)

    yield

    logger.info("Application shutting down...")
    await close_redis()
    redis_connected.set(0)
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan
)

app.add_middleware(MetricsMiddleware)

app.include_router(quotes.router)


@app.get("/metrics", tags=["monitoring"])
async def metrics():
    return Response(
        content=get_metrics_text(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@app.get("/health", tags=["monitoring"])
async def health_check():
    redis_healthy = get_redis() is not None

    return {
        "status": "healthy",
        "service": settings.API_TITLE,
        "version": settings.API_VERSION,
        "dependencies": {
            "redis": "connected" if redis_healthy else "disconnected",
        }
    }


@app.get("/readiness", tags=["monitoring"])
async def readiness_check():
    if get_redis() is None:
        return JSONResponse(
            status_code=503,
            content={"ready": False, "reason": "Redis not available"}
        )

    return {
        "ready": True,
        "service": settings.API_TITLE
    }


@app.get("/", tags=["root"])
async def root():
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics"
    }
