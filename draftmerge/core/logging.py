"""
结构化日志配置模块 - structlog + 标准库 logging
Events are short snake_case names (see ``LogEvent``); everything else goes
in key/value context, e.g. ``logger.info(LogEvent.MERGE_COMPLETED,
manuscript_id=..., documents_created=...)``.
"""
import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.types import FilteringBoundLogger, Processor

_CALLSITE = structlog.processors.CallsiteParameterAdder(
    parameters=[
        structlog.processors.CallsiteParameter.FILENAME,
        structlog.processors.CallsiteParameter.LINENO,
        structlog.processors.CallsiteParameter.FUNC_NAME,
    ]
)


def _processors() -> List[Processor]:
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _CALLSITE,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.format_exc_info,
        # Rendering happens once, in each handler's ProcessorFormatter
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]


def _formatter(renderer: Processor) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(processor=renderer)


def configure_logging(
    level: str = "INFO",
    json_logs: bool = True,
    log_file: Optional[str] = None
) -> None:
    """
    配置结构化日志系统

    Args:
        level: 日志级别名称，未知名称按 INFO 处理
        json_logs: stdout 输出 JSON，否则彩色控制台
        log_file: 追加 JSON 日志文件（可选，始终为 JSON）
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=_processors(),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(
        _formatter(structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(colors=True))
    )
    logging.basicConfig(handlers=[console], level=log_level)

    if log_file:
        handler = logging.FileHandler(log_file)
        handler.setLevel(log_level)
        handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
        logging.getLogger().addHandler(handler)


def get_logger(name: str, **initial_context: Any) -> FilteringBoundLogger:
    """获取结构化日志记录器，可预先绑定上下文"""
    logger = structlog.get_logger(name)
    return logger.bind(**initial_context) if initial_context else logger


class LogEvent:
    """标准化的日志事件类型"""

    # 应用生命周期
    APP_STARTED = "app_started"
    APP_STOPPED = "app_stopped"

    # API请求
    REQUEST_FAILED = "request_failed"

    # 对比
    COMPARISON_STARTED = "comparison_started"
    COMPARISON_COMPLETED = "comparison_completed"
    DIFF_COMPUTED = "diff_computed"
    CONTENT_MISSING = "content_missing"

    # 合并
    MERGE_STARTED = "merge_started"
    MERGE_COMPLETED = "merge_completed"
    MERGE_FAILED = "merge_failed"
    MERGE_CANCELLED = "merge_cancelled"
    MERGE_VALIDATION_FAILED = "merge_validation_failed"
    MERGE_SIDE_MISSING = "merge_side_missing"
    MERGE_CLEANUP_FAILED = "merge_cleanup_failed"
