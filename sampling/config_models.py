"""
Pydantic models for configuration validation.
"""

from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import InvalidConfigurationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class ModelScoreConfig(BaseModel):
    """单个模型的评分配置，id 集合即允许列表"""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    id: str = Field(..., min_length=1)
    speed_score: float = Field(..., alias="speedScore", ge=0.0, le=1.0, strict=True)
    intelligence_score: float = Field(..., alias="intelligenceScore", ge=0.0, le=1.0, strict=True)
    cost_score: float = Field(..., alias="costScore", ge=0.0, le=1.0, strict=True)

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("model id must not be blank")
        return value


class AnthropicModelConfig(ModelScoreConfig):
    """Anthropic 静态模型目录条目：评分 + 上下文窗口 + 扩展思考能力"""

    context_window: int = Field(200000, alias="contextWindow", gt=0)
    supports_extended_thinking: bool = Field(False, alias="supportsExtendedThinking")


class OpenRouterStrategyConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    allowed_models: Optional[list[ModelScoreConfig]] = Field(
        default=None, alias="allowedModels"
    )
    default_model: Optional[str] = Field(default=None, alias="defaultModel")
    api_key: Optional[str] = Field(default=None, alias="apiKey")
    base_url: str = Field(default="https://openrouter.ai/api/v1", alias="baseUrl")
    site_url: str = Field(default="http://localhost:3000", alias="siteUrl")
    site_title: str = Field(default="MCP Sampling Service", alias="siteTitle")
    timeout: float = 60.0


class AnthropicStrategyConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    api_key: str = Field(..., alias="apiKey", min_length=1)
    model: str = Field(..., min_length=1)
    models: Optional[list[AnthropicModelConfig]] = None
    extended_thinking_bonus: float = Field(
        default=0.0, alias="extendedThinkingBonus", ge=0.0
    )
    base_url: str = Field(default="https://api.anthropic.com", alias="baseUrl")
    api_version: str = Field(default="2023-06-01", alias="apiVersion")
    timeout: float = 60.0


class StrategyConfig(BaseModel):
    """启用哪个采样策略及其配置"""

    strategy: str = "stub"
    config: dict[str, Any] = Field(default_factory=dict)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "text"
    file: Optional[str] = None
    max_file_size: int = 50 * 1024 * 1024
    backup_count: int = 5


class Server(BaseModel):
    host: str = "0.0.0.0"
    port: int = 7610
    request_timeout: int = 300


class System(BaseModel):
    name: str = "MCP Sampling Router"
    version: str = "0.1.0"


class SamplingSettings(BaseModel):
    system: System = Field(default_factory=System)
    server: Server = Field(default_factory=Server)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    sampling: StrategyConfig = Field(default_factory=StrategyConfig)

    model_config = ConfigDict(extra="allow")


def validate_config(model_cls: type[ModelT], data: Any, what: str = "") -> ModelT:
    """
    校验配置并把 pydantic 错误转换为 InvalidConfigurationError

    Args:
        model_cls: 目标 pydantic 模型
        data: 原始配置数据
        what: 出错时用于提示的配置名称

    Returns:
        校验后的模型实例
    """
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        label = what or model_cls.__name__
        raise InvalidConfigurationError(
            f"Invalid {label} configuration: {e.error_count()} error(s)",
            errors=e.errors(include_url=False, include_context=False),
            cause=e,
        ) from e
