"""
中间件模块 - 全局错误处理
遵循清晰性原则：统一的错误响应格式
"""
import os

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from revision_compare.core.errors import BaseApplicationError
from revision_compare.core.logging import get_logger

logger = get_logger(__name__)


def _is_development() -> bool:
    return os.getenv("ENVIRONMENT", "development") == "development"


async def error_handler(request: Request, exc: Exception):
    """全局错误处理"""
    if isinstance(exc, BaseApplicationError):
        logger.warning(
            "application_error",
            path=request.url.path,
            error_code=exc.error_code.value,
            message=exc.message,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.to_dict()}
        )
    elif isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail}
        )
    else:
        # 未处理的异常
        logger.error("unhandled_error", path=request.url.path, error=str(exc), exc_info=exc)
        error_detail = str(exc) if _is_development() else "Internal server error"
        return JSONResponse(
            status_code=500,
            content={"error": error_detail}
        )
