"""
应用入口 - FastAPI 应用组装
Run with ``uvicorn draftmerge.main:app`` or ``python -m draftmerge.main``.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from draftmerge.api.v1 import compare
from draftmerge.core.config import Settings, get_settings
from draftmerge.core.errors import BaseApplicationError
from draftmerge.core.logging import LogEvent, configure_logging, get_logger
from draftmerge.core.middleware import error_handler
from draftmerge.db import dispose_engine, init_db

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """启动时建表，关闭时释放连接池"""
    settings = get_settings()
    logger.info(LogEvent.APP_STARTED, version=settings.version, api_prefix=settings.api_v1_prefix)
    await init_db()
    try:
        yield
    finally:
        await dispose_engine()
        logger.info(LogEvent.APP_STOPPED)


def _add_cors(app: FastAPI, settings: Settings) -> None:
    origins = settings.get_cors_origins()
    # 浏览器规范：allow_origins 为 "*" 时不能携带凭据
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=settings.cors_allow_credentials and origins != ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs, log_file=settings.log_file)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        lifespan=lifespan,
    )
    _add_cors(app, settings)

    app.add_exception_handler(BaseApplicationError, error_handler)
    app.add_exception_handler(Exception, error_handler)

    app.include_router(compare.router)
    Instrumentator().instrument(app).expose(app)

    @app.get("/")
    async def root():
        return {
            "name": settings.project_name,
            "version": settings.version,
            "docs": "/docs",
            "api_prefix": settings.api_v1_prefix,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run("draftmerge.main:app", host="0.0.0.0", port=int(os.getenv("PORT", 8000)), log_level="info")
