"""通用工具：日志与配置"""

from .config import (
    get_config_value,
    load_config,
    load_env_settings,
    load_settings,
    require_env,
)
from .logger import get_logger, setup_logging

__all__ = [
    "get_config_value",
    "get_logger",
    "load_config",
    "load_env_settings",
    "load_settings",
    "require_env",
    "setup_logging",
]
