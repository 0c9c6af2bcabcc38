"""
采样策略模块
提供统一的采样（LLM completion）接口
"""

from .adapters.anthropic import AnthropicStrategy
from .adapters.openrouter import OpenRouterStrategy
from .adapters.stub import StubStrategy
from .base import (
    BaseSamplingStrategy,
    MessageContent,
    ProviderAuthError,
    ProviderError,
    ProviderRateLimitError,
    ProviderRequestError,
    ProviderServerError,
    SamplingMessage,
    SamplingRequest,
    SamplingResult,
)
from .registry import (
    SamplingConfigField,
    SamplingStrategyDefinition,
    StrategyRegistry,
    create_default_registry,
)

__all__ = [
    # 基础类
    "BaseSamplingStrategy",
    "MessageContent",
    "SamplingMessage",
    "SamplingRequest",
    "SamplingResult",
    # 异常类
    "ProviderError",
    "ProviderAuthError",
    "ProviderRateLimitError",
    "ProviderRequestError",
    "ProviderServerError",
    # 注册中心
    "SamplingConfigField",
    "SamplingStrategyDefinition",
    "StrategyRegistry",
    "create_default_registry",
    # 具体策略
    "AnthropicStrategy",
    "OpenRouterStrategy",
    "StubStrategy",
]
