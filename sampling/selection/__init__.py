"""
模型选择模块
把客户端偏好解析为具体的模型 id
"""

from .catalog import ModelCatalog, OpenRouterModelCatalog, StaticModelCatalog
from .resolver import BASE_WEIGHT, ModelSelector, resolve_model, score_model
from .score_table import ModelScoreTable
from .types import (
    EXTENDED_THINKING,
    ModelDescriptor,
    ModelHint,
    ModelPreferences,
    ModelScore,
    RequestParams,
)

__all__ = [
    "BASE_WEIGHT",
    "EXTENDED_THINKING",
    "ModelCatalog",
    "ModelDescriptor",
    "ModelHint",
    "ModelPreferences",
    "ModelScore",
    "ModelScoreTable",
    "ModelSelector",
    "OpenRouterModelCatalog",
    "RequestParams",
    "StaticModelCatalog",
    "resolve_model",
    "score_model",
]
