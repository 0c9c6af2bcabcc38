"""
Sampling strategies for different AI service providers
各种AI服务提供商的采样策略实现
"""

from .anthropic import AnthropicStrategy
from .openrouter import OpenRouterStrategy
from .stub import StubStrategy

__all__ = [
    "AnthropicStrategy",
    "OpenRouterStrategy",
    "StubStrategy",
]
