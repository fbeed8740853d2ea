import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auth_service.api.v1.router import api_router
from auth_service.config import settings
from auth_service.core.code_store import RedisCodeStore
from auth_service.core.database import init_database
from auth_service.core.exceptions import AppException
from auth_service.core.redis import close_redis, create_redis
from auth_service.utils.logger import api_logger, app_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """启动时建立共享连接，关闭时释放"""
    app_logger.info("Application starting up...")

    try:
        init_database()
        app_logger.info("Database initialized successfully")
    except Exception as e:
        app_logger.error(f"Database initialization failed: {e}")

    redis_client = create_redis(settings.redis_url)
    try:
        redis_client.ping()
        app_logger.info("Redis connection successful")
    except Exception as e:
        app_logger.error(f"Redis connection failed: {e}")
    app.state.code_store = RedisCodeStore(redis_client)

    app_logger.info(
        f"Application started: {settings.app_name} v{settings.app_version}")

    yield

    app_logger.info("Application shutting down...")
    close_redis(redis_client)
    app_logger.info("Application shut down complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="User registration, email verification, password recovery and admin panel",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(process_time)

        return response

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        if exc.status_code >= 500:
            api_logger.error(f"{request.method} {request.url.path}: {exc.code} {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "message": exc.message,
                "code": exc.code,
                "timestamp": time.time()
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        api_logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Internal server error",
                "code": "INTERNAL_ERROR",
                "timestamp": time.time()
            }
        )

    app.include_router(api_router, prefix="/api")

    return app


app = create_app()
