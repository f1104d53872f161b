"""
结构化日志配置模块 - 使用structlog实现JSON/控制台日志
遵循清晰性原则：日志即文档，提供有意义的上下文
"""
import logging
import sys
from typing import Any

import structlog
from structlog.types import FilteringBoundLogger, Processor


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """
    配置结构化日志系统

    Args:
        level: 日志级别 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: 是否输出JSON格式日志
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        # 生产环境：JSON格式，保留中文原文
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        # 开发环境：彩色控制台输出
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    logging.getLogger().setLevel(log_level)


def get_logger(name: str, **initial_context: Any) -> FilteringBoundLogger:
    """
    获取结构化日志记录器

    Args:
        name: 日志记录器名称（通常使用模块名）
        **initial_context: 初始上下文数据
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


def preview(text: str, limit: int = 50) -> str:
    """截断长文本，避免日志过大"""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class LogEvent:
    """标准化的日志事件类型"""

    # 应用生命周期
    APP_STARTED = "app_started"
    APP_STOPPED = "app_stopped"

    # 外部语义匹配服务
    SIMILARITY_CALL = "similarity_api_call"
    SIMILARITY_SUCCESS = "similarity_api_success"
    SIMILARITY_ERROR = "similarity_api_error"

    # 对齐与高亮
    SNIPPET_REFINED = "snippet_refined"
    LOCATE_HIT = "locate_hit"
    LOCATE_MISS = "locate_miss"
    HIGHLIGHT_ADDED = "highlight_added"
    HIGHLIGHT_REMOVED = "highlight_removed"
    HIGHLIGHTS_CLEARED = "highlights_cleared"

    # 会话
    SESSION_CREATED = "session_created"
    SESSION_CLOSED = "session_closed"
    MATCH_TASK_FAILED = "match_task_failed"
