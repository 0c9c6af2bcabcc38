"""日志系统模块 - 标准日志 + structlog 结构化输出 + 日志轮换"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from pythonjsonlogger.json import JsonFormatter

DEFAULT_LOG_CONFIG: dict[str, Any] = {
    "level": "INFO",
    "format": "text",  # text or json
    "file": None,
    "max_file_size": 50 * 1024 * 1024,  # 50MB
    "backup_count": 5,
}

_configured_config: Optional[dict[str, Any]] = None


def _build_handlers(
    config: dict[str, Any], log_file: Optional[Path]
) -> list[logging.Handler]:
    """构建 stdout 与轮换文件处理器"""
    log_format = config.get("format", "text")

    if log_format == "json":
        formatter: logging.Formatter = JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s"
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [stream_handler]

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=config.get("max_file_size", 50 * 1024 * 1024),
                backupCount=config.get("backup_count", 5),
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)
        except OSError as e:
            print(f"Failed to setup file logging: {e}", file=sys.stderr)

    return handlers


def setup_logging(
    config: Optional[dict[str, Any]] = None,
    log_file: Optional[Union[str, Path]] = None,
) -> dict[str, Any]:
    """
    设置全局日志系统

    Args:
        config: 日志配置字典 (level / format / file / max_file_size / backup_count)
        log_file: 日志文件路径，优先于 config["file"]

    Returns:
        实际生效的日志配置
    """
    global _configured_config

    effective = {**DEFAULT_LOG_CONFIG, **(config or {})}
    if log_file is not None:
        effective["file"] = str(log_file)

    log_level = str(effective.get("level", "INFO")).upper()
    file_path = Path(effective["file"]) if effective.get("file") else None

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if effective.get("format") == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        handlers=_build_handlers(effective, file_path),
        force=True,  # 覆盖现有配置
    )

    # 禁用第三方库的噪音日志
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    _configured_config = effective
    return effective


def get_logger(name: Optional[str] = None):
    """
    获取日志记录器

    Args:
        name: 日志记录器名称

    Returns:
        structlog 日志记录器
    """
    return structlog.get_logger(name or __name__)


def get_logging_config() -> Optional[dict[str, Any]]:
    """获取当前生效的日志配置，未初始化时返回None"""
    return _configured_config
