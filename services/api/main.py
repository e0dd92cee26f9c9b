"""
Reader Annotation Service - Backend API
Converts annotations between the PDF reader's object model and the app's
stored annotations, and computes annotation sort indexes.

Install dependencies:
pip install -e ".[test]"

Run server:
uvicorn main:app --host 0.0.0.0 --port 8000
"""

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from collections import defaultdict
import logging
import os
import time
import uuid

from core.text import newline_expression
from schemas import HealthCheck
from settings import get_settings

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

VERSION = "1.0"

# ========== Metrics Storage ==========
request_metrics = {
    "total_requests": defaultdict(int),  # by "METHOD /path"
    "total_latency": defaultdict(float),
    "status_codes": defaultdict(int),
}

app = FastAPI(
    title="Reader Annotation Service",
    description="Conversion between PDF reader annotations and stored annotations",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.middleware("http")
async def request_tracing_middleware(request, call_next):
    """Tag each request with a short id and record its latency."""
    request_id = uuid.uuid4().hex[:8]
    started = time.perf_counter()

    response = await call_next(request)

    latency = time.perf_counter() - started
    endpoint = f"{request.method} {request.url.path}"
    logger.info(
        f"[{request_id}] {endpoint} -> {response.status_code} in {latency * 1000:.1f}ms"
    )

    request_metrics["total_requests"][endpoint] += 1
    request_metrics["total_latency"][endpoint] += latency
    request_metrics["status_codes"][response.status_code] += 1

    response.headers["X-Request-ID"] = request_id
    return response


ALLOWED_ORIGINS = settings.get_origins_list()

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


from routers import annotations as annotations_router
app.include_router(annotations_router.router)

# ============================================================================
# HEALTH / METRICS
# ============================================================================

@app.get("/health", response_model=HealthCheck)
async def health_check():
    return HealthCheck(status="healthy", version=VERSION)


@app.get("/healthz")
async def healthz():
    """
    Kubernetes-style liveness probe.
    Returns 200 if the application is running.
    """
    return {
        "status": "ok",
        "timestamp": time.time(),
        "version": VERSION
    }


@app.get("/readyz")
async def readyz():
    """
    Readiness probe: the newline pattern used for highlight text must be
    available, otherwise imported text would keep its line breaks.
    """
    if newline_expression() is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "error": "newline expression unavailable", "timestamp": time.time()}
        )
    return {
        "status": "ready",
        "default_appearance": settings.default_appearance,
        "timestamp": time.time()
    }


@app.get("/metrics")
async def get_metrics():
    """
    Request counts and average latency per endpoint, plus how many
    annotations were converted in each direction.
    """
    avg_latencies = {}
    for endpoint, total_latency in request_metrics["total_latency"].items():
        count = request_metrics["total_requests"][endpoint]
        avg_latencies[endpoint] = round((total_latency / count) * 1000, 2) if count > 0 else 0

    return {
        "timestamp": time.time(),
        "uptime_seconds": round(time.time() - startup_time, 2),
        "requests": {
            "by_endpoint": dict(request_metrics["total_requests"]),
            "by_status": dict(request_metrics["status_codes"]),
            "total": sum(request_metrics["total_requests"].values()),
        },
        "latency": {
            "by_endpoint_ms": avg_latencies,
        },
        "annotations": dict(annotations_router.conversion_counts),
    }


startup_time = time.time()

@app.on_event("startup")
async def startup_event():
    global startup_time
    startup_time = time.time()
    logger.info(f"Reader Annotation Service {VERSION} starting up")
    logger.info(f"Default appearance: {settings.default_appearance}, name prefix: {settings.annotation_name_prefix}")
    logger.info(f"Allowed origins: {ALLOWED_ORIGINS}")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Reader Annotation Service shutting down")

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
