"""
统一错误码体系
定义采样服务所有错误的标准化错误码
"""

from enum import Enum


class ErrorCode(Enum):
    """系统错误码枚举"""

    # 通用错误 (1000-1099)
    UNKNOWN_ERROR = "E1000"

    # 配置错误 (1100-1199)
    CONFIG_LOAD_FAILED = "E1100"
    CONFIG_INVALID = "E1101"
    CONFIG_MISSING_REQUIRED = "E1102"
    CONFIG_PARSE_ERROR = "E1103"

    # 策略错误 (1200-1299)
    STRATEGY_NOT_FOUND = "E1200"
    SAMPLING_FAILED = "E1201"
    SAMPLING_EXECUTION_FAILED = "E1202"

    # 模型目录错误 (1400-1499)
    MODEL_CATALOG_FETCH_FAILED = "E1400"

    # 网络错误 (1500-1599)
    NETWORK_ERROR = "E1500"


class SamplingErrorCodes:
    """JSON-RPC 采样错误码（MCP sampling 约定）"""

    SAMPLING_ERROR = -32008
    SAMPLING_EXECUTION_ERROR = -32009


ERROR_MESSAGES = {
    ErrorCode.UNKNOWN_ERROR: "未知错误",
    ErrorCode.CONFIG_LOAD_FAILED: "配置加载失败",
    ErrorCode.CONFIG_INVALID: "配置无效",
    ErrorCode.CONFIG_MISSING_REQUIRED: "缺少必需的配置项",
    ErrorCode.CONFIG_PARSE_ERROR: "配置解析错误",
    ErrorCode.STRATEGY_NOT_FOUND: "采样策略未找到",
    ErrorCode.SAMPLING_FAILED: "采样请求失败",
    ErrorCode.SAMPLING_EXECUTION_FAILED: "采样执行失败",
    ErrorCode.MODEL_CATALOG_FETCH_FAILED: "模型目录获取失败",
    ErrorCode.NETWORK_ERROR: "网络错误",
}


def get_error_message(error_code: ErrorCode, default: str = "未知错误") -> str:
    """获取错误码对应的消息"""
    return ERROR_MESSAGES.get(error_code, default)
