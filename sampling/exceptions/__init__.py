"""
统一异常处理模块
"""

from .base_exceptions import (
    BaseSamplingException,
    CatalogFetchError,
    ConfigurationException,
    InvalidConfigurationError,
    NetworkException,
    SamplingException,
    StrategyNotFoundError,
)
from .error_codes import ErrorCode, SamplingErrorCodes, get_error_message

__all__ = [
    # 错误码
    "ErrorCode",
    "SamplingErrorCodes",
    "get_error_message",
    # 异常类
    "BaseSamplingException",
    "ConfigurationException",
    "InvalidConfigurationError",
    "NetworkException",
    "CatalogFetchError",
    "StrategyNotFoundError",
    "SamplingException",
]
