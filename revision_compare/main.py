from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from revision_compare.api.v1 import sessions, similarity
from revision_compare.core.config import CLEAR_COLOR, get_settings
from revision_compare.core.errors import BaseApplicationError
from revision_compare.core.logging import LogEvent, configure_logging, get_logger
from revision_compare.core.middleware import error_handler
from revision_compare.services import ServiceFactory

settings = get_settings()
configure_logging(settings.log_level, json_logs=settings.json_logs)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info(
        LogEvent.APP_STARTED,
        version=settings.version,
        model=settings.similarity_model,
        similarity_configured=settings.has_similarity_credentials,
    )
    try:
        yield
    finally:
        # 取消所有未完成的匹配任务
        await ServiceFactory.get_session_registry().close_all()
        logger.info(LogEvent.APP_STOPPED)


app = FastAPI(
    title=settings.project_name,
    version=settings.version,
    openapi_url=f"{settings.api_v1_prefix}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# 浏览器规范：当 allow_origins 为 "*" 时，不能允许 credentials
origins = settings.get_cors_origins()
allow_credentials = settings.cors_allow_credentials and origins != ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 错误处理
app.add_exception_handler(BaseApplicationError, error_handler)
app.add_exception_handler(Exception, error_handler)

app.include_router(similarity.router)
app.include_router(sessions.router)

# Prometheus监控
Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    """根路径"""
    return {
        "name": settings.project_name,
        "version": settings.version,
        "docs": "/docs",
        "api_prefix": settings.api_v1_prefix,
    }


@app.get(f"{settings.api_v1_prefix}")
async def api_root():
    """API根路径"""
    return {
        "version": "v1",
        "palette": settings.get_palette(),
        "clear_color": CLEAR_COLOR,
        "endpoints": {
            "find_similar_sentence": f"{settings.api_v1_prefix}/find-similar-sentence",
            "sessions": f"{settings.api_v1_prefix}/sessions",
        }
    }
