"""
采样策略注册中心
策略名称 -> 构造函数的显式映射，在启动时构建一次并按引用传递
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ..exceptions import StrategyNotFoundError
from ..utils.logger import get_logger
from .adapters.anthropic import DEFAULT_ANTHROPIC_MODEL, AnthropicStrategy
from .adapters.openrouter import OpenRouterStrategy
from .adapters.stub import StubStrategy
from .base import BaseSamplingStrategy

logger = get_logger(__name__)

StrategyFactory = Callable[[dict[str, Any]], BaseSamplingStrategy]


@dataclass
class SamplingConfigField:
    """策略配置字段描述（供管理界面渲染表单）"""

    name: str
    type: str
    label: str
    required: bool
    placeholder: Optional[str] = None
    schema: Optional[dict[str, Any]] = None


@dataclass
class SamplingStrategyDefinition:
    id: str
    name: str
    requires_config: bool
    config_fields: list[SamplingConfigField] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "requiresConfig": self.requires_config,
            "configFields": [
                {
                    key: value
                    for key, value in vars(config_field).items()
                    if value is not None
                }
                for config_field in self.config_fields
            ],
        }


_MODEL_SCORE_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "id": {"type": "string"},
            "speedScore": {"type": "number", "min": 0, "max": 1},
            "intelligenceScore": {"type": "number", "min": 0, "max": 1},
            "costScore": {"type": "number", "min": 0, "max": 1},
        },
        "required": ["id", "speedScore", "intelligenceScore", "costScore"],
    },
}

STUB_DEFINITION = SamplingStrategyDefinition(id="stub", name="Stub", requires_config=False)

OPENROUTER_DEFINITION = SamplingStrategyDefinition(
    id="openrouter",
    name="OpenRouter",
    requires_config=False,
    config_fields=[
        SamplingConfigField(
            name="allowedModels",
            type="array",
            label="Allowed models",
            required=False,
            schema=_MODEL_SCORE_SCHEMA,
        ),
        SamplingConfigField(
            name="defaultModel",
            type="string",
            label="Default model",
            required=False,
            placeholder="openai/gpt-4o-mini",
        ),
    ],
)

ANTHROPIC_DEFINITION = SamplingStrategyDefinition(
    id="anthropic",
    name="Anthropic",
    requires_config=True,
    config_fields=[
        SamplingConfigField(
            name="apiKey", type="string", label="API key", required=True
        ),
        SamplingConfigField(
            name="model",
            type="string",
            label="Model",
            required=True,
            placeholder=DEFAULT_ANTHROPIC_MODEL,
        ),
    ],
)


class StrategyRegistry:
    """采样策略注册中心"""

    def __init__(self) -> None:
        self._factories: dict[str, StrategyFactory] = {}
        self._definitions: dict[str, SamplingStrategyDefinition] = {}

    def register(
        self,
        name: str,
        factory: StrategyFactory,
        definition: Optional[SamplingStrategyDefinition] = None,
    ) -> None:
        """
        注册策略

        Args:
            name: 策略名称
            factory: 接收配置字典、返回策略实例的可调用对象
            definition: 策略描述，缺省时生成无配置的描述
        """
        if not callable(factory):
            raise TypeError(f"策略工厂必须可调用: {factory!r}")

        self._factories[name] = factory
        self._definitions[name] = definition or SamplingStrategyDefinition(
            id=name, name=name, requires_config=False
        )
        logger.info(f"注册采样策略: {name}")

    def create(
        self, name: str, config: Optional[dict[str, Any]] = None
    ) -> BaseSamplingStrategy:
        """
        创建策略实例

        Raises:
            StrategyNotFoundError: 策略未注册
            InvalidConfigurationError: 策略配置无效
        """
        factory = self._factories.get(name)
        if factory is None:
            raise StrategyNotFoundError(name, self.available_strategies())

        instance = factory(config or {})
        logger.info(f"创建采样策略实例: {name}")
        return instance

    def available_strategies(self) -> list[str]:
        return list(self._factories)

    def strategy_definition(self, name: str) -> SamplingStrategyDefinition:
        definition = self._definitions.get(name)
        if definition is None:
            raise StrategyNotFoundError(name, self.available_strategies())
        return definition

    def definitions(self) -> list[SamplingStrategyDefinition]:
        return list(self._definitions.values())

    def __contains__(self, name: object) -> bool:
        return name in self._factories


def create_default_registry() -> StrategyRegistry:
    """注册内置策略：stub / openrouter / anthropic"""
    registry = StrategyRegistry()
    registry.register("stub", StubStrategy, STUB_DEFINITION)
    registry.register("openrouter", OpenRouterStrategy, OPENROUTER_DEFINITION)
    registry.register("anthropic", AnthropicStrategy, ANTHROPIC_DEFINITION)
    return registry
