#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TaskBoard - FastAPI Application
REST API for personal todos with filtering and analytics

Version: 1.0.0
"""

import os
import logging
import platform
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

import psutil
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.api import analytics, todos
from taskboard.config import init_settings, settings
from taskboard.core.exceptions import StoreError, TodoError
from taskboard.core.service import TodoService
from taskboard.dependencies import get_todo_service_if_ready, init_todo_store
from taskboard.models import HealthCheck

logger = logging.getLogger(__name__)

app_start_time = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown"""
    global app_start_time

    # Startup
    if not settings.is_testing:
        init_settings()
    logger.info(f"🚀 Starting {settings.APP_NAME}...")
    app_start_time = time.time()

    store = await init_todo_store()
    logger.info(f"📝 Todos loaded: {await store.count()}")
    logger.info(f"🌐 API available at {settings.get_full_url()}")

    yield

    # Shutdown
    logger.info(f"🛑 {settings.APP_NAME} stopped")


app = FastAPI(
    title=settings.APP_NAME,
    description="Personal todo tracking API",
    version=settings.VERSION,
    docs_url=settings.DOCS_URL,
    redoc_url=None,
    lifespan=lifespan
)

# ===== MIDDLEWARE =====

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """Log every request with its status and timing"""
    start_time = time.time()
    request_id = uuid.uuid4().hex[:12]
    client_ip = request.headers.get("X-Forwarded-For", request.client.host if request.client else "-")

    try:
        response = await call_next(request)
    except Exception:
        process_time = time.time() - start_time
        logger.exception(f"❌ Unhandled error on {request.method} {request.url.path} ({process_time:.3f}s)")
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "status_code": 500, "request_id": request_id}
        )

    process_time = time.time() - start_time
    logger.info(
        f"{request.method} {request.url.path} "
        f"- {response.status_code} "
        f"- {process_time:.3f}s "
        f"- {client_ip}"
    )
    response.headers["X-Process-Time"] = f"{process_time:.6f}"
    response.headers["X-Request-ID"] = request_id
    return response

# ===== ROUTERS =====

app.include_router(todos.router)
app.include_router(analytics.router)

# ===== SERVICE ROUTES =====

@app.get("/health", response_model=HealthCheck)
async def health_check(service: Optional[TodoService] = Depends(get_todo_service_if_ready)):
    """Health check for load balancers and monitoring"""
    try:
        if service is None:
            raise StoreError("Todo store could not be opened")
        todos_count = await service.count()
    except TodoError as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "service": "taskboard",
                "error": "Todo store unavailable",
                "timestamp": time.time()
            }
        )

    return HealthCheck(
        status="healthy",
        service="taskboard",
        version=settings.VERSION,
        timestamp=time.time(),
        data={
            "todos_count": todos_count,
            "data_file": str(settings.todos_path),
            "debug_mode": settings.DEBUG,
            "uptime_seconds": time.time() - app_start_time
        }
    )


@app.get("/api/info")
async def api_info():
    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "uptime": time.time() - app_start_time,
        "endpoints": {
            "todos": "/todos",
            "analytics": "/analytics",
            "health": "/health"
        },
        "export_formats": settings.EXPORT_FORMATS
    }


@app.get("/api/system/status")
async def system_status():
    """Host and process details"""
    return {
        "status": "operational",
        "uptime": time.time() - app_start_time,
        "timestamp": time.time(),
        "system": {
            "platform": platform.system(),
            "python_version": platform.python_version(),
            "cpu_count": os.cpu_count(),
            "memory_usage": psutil.virtual_memory().percent,
            "disk_usage": psutil.disk_usage("/").percent,
            "process_rss_mb": round(psutil.Process().memory_info().rss / (1024 * 1024), 2)
        },
        "application": {
            "debug": settings.DEBUG,
            "data_file": str(settings.todos_path)
        }
    }


@app.get("/ping")
async def ping():
    return {
        "message": "pong",
        "timestamp": time.time(),
        "service": "taskboard"
    }

# ===== ERROR HANDLERS =====

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "status_code": exc.status_code
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed requests are client errors: 400, not 422"""
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        errors.append(f"{location or 'body'}: {error.get('msg')}")
    return JSONResponse(
        status_code=400,
        content={
            "detail": "; ".join(errors) or "Invalid request",
            "status_code": 400
        }
    )

# ===== STARTUP =====

def run_server(host: str = None, port: int = None, reload: bool = None):
    """Run the API with uvicorn"""
    host = host or settings.HOST
    port = port or settings.PORT
    reload = reload if reload is not None else settings.DEBUG

    logger.info(f"🌐 Starting TaskBoard on http://{host}:{port}")
    logger.info(f"📁 Data file: {settings.todos_path}")
    logger.info(f"🔄 Auto-reload: {reload}")

    try:
        uvicorn.run(
            "taskboard.app:app",
            host=host,
            port=port,
            reload=reload,
            log_level="debug" if settings.DEBUG else "info",
            server_header=False,
            date_header=False
        )
    except KeyboardInterrupt:
        logger.info("👋 TaskBoard stopped")


def main(argv=None):
    import argparse

    parser = argparse.ArgumentParser(description='Run the TaskBoard API')
    parser.add_argument('--host', default=settings.HOST, help='Bind host')
    parser.add_argument('--port', type=int, default=settings.PORT, help='Bind port')
    parser.add_argument('--reload', action='store_true', help='Auto-reload on code changes')

    args = parser.parse_args(argv)
    run_server(host=args.host, port=args.port, reload=args.reload or None)


if __name__ == "__main__":
    main()
