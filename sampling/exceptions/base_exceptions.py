"""
统一异常基类
定义采样服务所有异常的基础结构
"""

import traceback
from datetime import datetime
from typing import Any, Optional

from .error_codes import ErrorCode, SamplingErrorCodes, get_error_message


class BaseSamplingException(Exception):
    """采样服务基础异常类"""

    def __init__(
        self,
        error_code: ErrorCode,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ):
        self.error_code = error_code
        self.message = message or get_error_message(error_code)
        self.details = details or {}
        self.cause = cause
        self.context = context or {}
        self.timestamp = datetime.now()
        self.traceback_str = traceback.format_exc() if cause else None

        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """转换为字典格式"""
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
            "traceback": self.traceback_str,
        }

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(error_code={self.error_code.value}, message='{self.message}')"


class ConfigurationException(BaseSamplingException):
    """配置相关异常"""

    def __init__(
        self,
        error_code: ErrorCode,
        message: Optional[str] = None,
        config_path: Optional[str] = None,
        **kwargs: Any,
    ):
        details = kwargs.pop("details", None) or {}
        if config_path:
            details["config_path"] = config_path

        super().__init__(error_code, message, details, **kwargs)


class InvalidConfigurationError(ConfigurationException):
    """配置结构校验失败（构造时立即抛出）"""

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[list[Any]] = None,
        **kwargs: Any,
    ):
        details = kwargs.pop("details", None) or {}
        if errors:
            details["errors"] = errors

        super().__init__(ErrorCode.CONFIG_INVALID, message, details=details, **kwargs)


class NetworkException(BaseSamplingException):
    """网络相关异常"""

    def __init__(
        self,
        error_code: ErrorCode,
        message: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ):
        details = kwargs.pop("details", None) or {}
        if url:
            details["url"] = url
        if status_code:
            details["status_code"] = status_code
        self.url = url
        self.status_code = status_code

        super().__init__(error_code, message, details, **kwargs)


class CatalogFetchError(NetworkException):
    """模型目录获取失败 - 致命错误，直接传播给调用方"""

    def __init__(
        self,
        message: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ):
        super().__init__(
            ErrorCode.MODEL_CATALOG_FETCH_FAILED,
            message,
            url=url,
            status_code=status_code,
            **kwargs,
        )


class StrategyNotFoundError(BaseSamplingException):
    """未注册的采样策略"""

    def __init__(self, strategy: str, available: Optional[list[str]] = None):
        super().__init__(
            ErrorCode.STRATEGY_NOT_FOUND,
            f"Unknown sampling strategy: {strategy}",
            details={"strategy": strategy, "available": available or []},
        )
        self.strategy = strategy


class SamplingException(BaseSamplingException):
    """采样请求异常，携带 JSON-RPC 错误码"""

    def __init__(
        self,
        code: int,
        message: str,
        error_code: ErrorCode = ErrorCode.SAMPLING_FAILED,
        **kwargs: Any,
    ):
        self.code = code
        super().__init__(error_code, message, **kwargs)

    @classmethod
    def invalid_request(cls, message: str) -> "SamplingException":
        return cls(SamplingErrorCodes.SAMPLING_ERROR, message)

    @classmethod
    def execution_failed(
        cls, message: str, cause: Optional[Exception] = None
    ) -> "SamplingException":
        return cls(
            SamplingErrorCodes.SAMPLING_EXECUTION_ERROR,
            message,
            error_code=ErrorCode.SAMPLING_EXECUTION_FAILED,
            cause=cause,
        )
