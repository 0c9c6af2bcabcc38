"""
偏好到模型的解析

resolve_model() 是纯函数，只依赖已加载的目录；ModelSelector 负责在需要时
才加载目录，并把评分表、默认模型绑定在一起。
"""

from typing import Iterable, Optional, Sequence

from ..exceptions import InvalidConfigurationError
from ..utils.logger import get_logger
from .catalog import ModelCatalog
from .score_table import ModelScoreTable
from .types import (
    EXTENDED_THINKING,
    ModelDescriptor,
    ModelPreferences,
    ModelScore,
    RequestParams,
)

logger = get_logger(__name__)

BASE_WEIGHT = 100.0


def score_model(
    score: ModelScore,
    preferences: ModelPreferences,
    descriptor: Optional[ModelDescriptor] = None,
    extended_thinking_bonus: float = 0.0,
) -> float:
    """按优先级加权计算模型得分，优先级为 0 或未设置时不计分"""
    total = 0.0

    if preferences.cost_priority:
        total += score.cost_score * (preferences.cost_priority * BASE_WEIGHT)
    if preferences.speed_priority:
        total += score.speed_score * (preferences.speed_priority * BASE_WEIGHT)
    if preferences.intelligence_priority:
        total += score.intelligence_score * (
            preferences.intelligence_priority * BASE_WEIGHT
        )

    if (
        extended_thinking_bonus
        and preferences.extended_thinking_required
        and descriptor is not None
        and descriptor.supports(EXTENDED_THINKING)
    ):
        total += extended_thinking_bonus * BASE_WEIGHT

    return total


def _match_hints(
    candidates: Sequence[ModelDescriptor], preferences: ModelPreferences
) -> Sequence[ModelDescriptor]:
    """按顺序尝试 hints，第一个有匹配的 hint 决定候选集"""
    for hint in preferences.hints:
        if not hint.name:
            continue
        needle = hint.name.lower()
        matching = [model for model in candidates if needle in model.id.lower()]
        if matching:
            logger.debug(f"hint '{hint.name}' 匹配 {len(matching)} 个模型")
            return matching

    return candidates


def resolve_model(
    preferences: ModelPreferences,
    params: RequestParams,
    models: Iterable[ModelDescriptor],
    score_table: ModelScoreTable,
    default_model_id: str,
    capability_aware: bool = True,
    extended_thinking_bonus: float = 0.0,
) -> str:
    """
    根据偏好从目录中选出一个模型 id

    Args:
        preferences: 客户端偏好
        params: 请求参数（用于计算所需上下文）
        models: 已加载的模型目录，迭代顺序即平分时的优先顺序
        score_table: 评分表（允许列表）
        default_model_id: 无法满足偏好时返回的默认模型
        capability_aware: 目录是否记录能力标记
        extended_thinking_bonus: 需要扩展思考且模型支持时的额外权重

    Returns:
        已知的模型 id，或 default_model_id
    """
    # 已知模型：评分表与目录的交集，保持目录顺序
    known = [model for model in models if model.id in score_table]

    if preferences.model and any(model.id == preferences.model for model in known):
        return preferences.model

    if not preferences.has_preferences():
        return default_model_id

    required_context = params.required_context
    check_thinking = preferences.extended_thinking_required and capability_aware

    eligible = [
        model
        for model in known
        if required_context <= model.context_length
        and (not check_thinking or model.supports(EXTENDED_THINKING))
    ]

    if not eligible:
        logger.info(
            f"没有满足要求的模型 (required_context={required_context}), 使用默认模型 {default_model_id}"
        )
        return default_model_id

    candidates = _match_hints(eligible, preferences) if preferences.hints else eligible

    best_model: Optional[ModelDescriptor] = None
    best_score = float("-inf")
    for model in candidates:
        score = score_model(
            score_table.get(model.id),
            preferences,
            descriptor=model,
            extended_thinking_bonus=extended_thinking_bonus,
        )
        # 严格大于：平分时保留先出现的模型
        if score > best_score:
            best_score = score
            best_model = model

    if best_model is None:
        return default_model_id

    return best_model.id


class ModelSelector:
    """绑定评分表、默认模型与模型目录的选择器"""

    def __init__(
        self,
        score_table: ModelScoreTable,
        default_model_id: str,
        catalog: ModelCatalog,
        extended_thinking_bonus: float = 0.0,
    ):
        if not isinstance(default_model_id, str) or not default_model_id.strip():
            raise InvalidConfigurationError("default model id must be a non-empty string")
        if extended_thinking_bonus < 0:
            raise InvalidConfigurationError(
                "extended thinking bonus must not be negative"
            )

        self.score_table = score_table
        self.default_model_id = default_model_id
        self.catalog = catalog
        self.extended_thinking_bonus = extended_thinking_bonus

    async def select_model(
        self, preferences: ModelPreferences, params: RequestParams
    ) -> str:
        """
        选择模型

        没有任何偏好时直接返回默认模型，不会触发目录加载；
        目录加载失败时抛出 CatalogFetchError。
        """
        if not preferences.has_preferences():
            return self.default_model_id

        models = await self.catalog.fetch()
        selected = resolve_model(
            preferences,
            params,
            models,
            self.score_table,
            self.default_model_id,
            capability_aware=self.catalog.capability_aware,
            extended_thinking_bonus=self.extended_thinking_bonus,
        )
        logger.info(f"模型选择结果: {selected}")
        return selected
