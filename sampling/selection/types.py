"""
模型选择相关的数据模型
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

EXTENDED_THINKING = "extended-thinking"


@dataclass(frozen=True)
class ModelDescriptor:
    """模型目录条目"""

    id: str
    context_length: int
    capabilities: frozenset[str] = frozenset()
    pricing: Optional[dict[str, Any]] = field(default=None, compare=False)
    architecture: Optional[dict[str, Any]] = field(default=None, compare=False)

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities


@dataclass(frozen=True)
class ModelScore:
    """模型能力评分，三项均在 [0,1]"""

    id: str
    speed_score: float
    intelligence_score: float
    cost_score: float


@dataclass(frozen=True)
class ModelHint:
    name: Optional[str] = None


def _as_priority(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


@dataclass
class ModelPreferences:
    """客户端模型偏好（单次请求）"""

    model: Optional[str] = None
    hints: list[ModelHint] = field(default_factory=list)
    cost_priority: Optional[float] = None
    speed_priority: Optional[float] = None
    intelligence_priority: Optional[float] = None
    extended_thinking_required: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ModelPreferences":
        """从 MCP modelPreferences（camelCase）解析"""
        if not data:
            return cls()

        hints = []
        raw_hints = data.get("hints")
        for hint in raw_hints if isinstance(raw_hints, list) else []:
            if isinstance(hint, Mapping):
                name = hint.get("name")
                hints.append(ModelHint(name=name if isinstance(name, str) else None))
            elif isinstance(hint, str):
                hints.append(ModelHint(name=hint))

        model = data.get("model")
        return cls(
            model=model if isinstance(model, str) and model else None,
            hints=hints,
            cost_priority=_as_priority(data.get("costPriority")),
            speed_priority=_as_priority(data.get("speedPriority")),
            intelligence_priority=_as_priority(data.get("intelligencePriority")),
            extended_thinking_required=bool(data.get("extendedThinkingRequired")),
        )

    def has_preferences(self) -> bool:
        """是否携带任何会影响选择的偏好"""
        return bool(
            self.model
            or self.hints
            or self.cost_priority
            or self.speed_priority
            or self.intelligence_priority
            or self.extended_thinking_required
        )


@dataclass(frozen=True)
class RequestParams:
    """用于计算所需上下文的请求参数"""

    prompt_length: int = 0
    max_tokens: int = 0

    @classmethod
    def from_prompt(
        cls, prompt: Optional[str], max_tokens: Optional[int]
    ) -> "RequestParams":
        # 以字符数近似 token 数
        return cls(prompt_length=len(prompt or ""), max_tokens=max_tokens or 0)

    @property
    def required_context(self) -> int:
        return self.prompt_length + self.max_tokens
