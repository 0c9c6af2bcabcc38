"""
Anthropic采样策略
支持Claude系列模型，模型目录为静态配置
"""

from typing import Any, Optional

import httpx

from ...config_models import AnthropicModelConfig, AnthropicStrategyConfig, validate_config
from ...selection import (
    EXTENDED_THINKING,
    ModelDescriptor,
    ModelScoreTable,
    ModelSelector,
    RequestParams,
    StaticModelCatalog,
)
from ...utils.logger import get_logger
from ..base import BaseSamplingStrategy, ProviderError, SamplingRequest, SamplingResult

logger = get_logger(__name__)

DEFAULT_ANTHROPIC_MODELS: list[dict[str, Any]] = [
    {
        "id": "claude-3-7-sonnet-latest",
        "speedScore": 0.8,
        "intelligenceScore": 1.0,
        "costScore": 0.7,
        "contextWindow": 200000,
        "supportsExtendedThinking": True,
    },
    {
        "id": "claude-3-5-haiku-latest",
        "speedScore": 1.0,
        "intelligenceScore": 0.7,
        "costScore": 0.9,
        "contextWindow": 200000,
        "supportsExtendedThinking": False,
    },
    {
        "id": "claude-3-5-sonnet-latest",
        "speedScore": 0.8,
        "intelligenceScore": 0.9,
        "costScore": 0.7,
        "contextWindow": 200000,
        "supportsExtendedThinking": False,
    },
    {
        "id": "claude-3-opus-latest",
        "speedScore": 0.6,
        "intelligenceScore": 0.95,
        "costScore": 0.3,
        "contextWindow": 200000,
        "supportsExtendedThinking": False,
    },
]

DEFAULT_ANTHROPIC_MODEL = "claude-3-5-sonnet-latest"


def build_static_catalog(models: list[AnthropicModelConfig]) -> StaticModelCatalog:
    """由模型配置构建静态目录，保持配置顺序"""
    return StaticModelCatalog(
        ModelDescriptor(
            id=model.id,
            context_length=model.context_window,
            capabilities=frozenset({EXTENDED_THINKING})
            if model.supports_extended_thinking
            else frozenset(),
        )
        for model in models
    )


class AnthropicStrategy(BaseSamplingStrategy):
    """Anthropic采样策略"""

    def __init__(
        self,
        config: Optional[dict[str, Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = validate_config(AnthropicStrategyConfig, config or {}, "Anthropic")
        super().__init__("anthropic", timeout=self.settings.timeout, client=client)

        models = self.settings.models
        if models is None:
            models = [
                validate_config(AnthropicModelConfig, entry, "Anthropic model")
                for entry in DEFAULT_ANTHROPIC_MODELS
            ]

        self.base_url = self.settings.base_url.rstrip("/")
        self.catalog = build_static_catalog(models)
        self.selector = ModelSelector(
            ModelScoreTable(models),
            self.settings.model,
            self.catalog,
            extended_thinking_bonus=self.settings.extended_thinking_bonus,
        )

    @property
    def messages_url(self) -> str:
        return f"{self.base_url}/v1/messages"

    def get_request_headers(self) -> dict[str, str]:
        """获取Anthropic认证头"""
        return {
            **self.get_auth_headers(self.settings.api_key, auth_type="x-api-key"),
            "anthropic-version": self.settings.api_version,
            "content-type": "application/json",
        }

    def build_messages(self, request: SamplingRequest) -> list[dict[str, str]]:
        """只转发 user / assistant 消息，系统提示单独放在 system 字段"""
        messages = []
        for msg in request.messages:
            content = msg.content.value
            if content and msg.role in ("user", "assistant"):
                messages.append({"role": msg.role, "content": content})
        return messages

    def transform_request(self, request: SamplingRequest, model: str) -> dict[str, Any]:
        """转换为Anthropic格式请求"""
        payload: dict[str, Any] = {
            "model": model,
            "messages": self.build_messages(request),
            "max_tokens": request.max_tokens or 1024,  # Anthropic要求max_tokens
            "temperature": request.temperature if request.temperature is not None else 0.7,
            "stream": False,
        }
        if request.system_prompt:
            payload["system"] = request.system_prompt
        if request.stop_sequences:
            payload["stop_sequences"] = request.stop_sequences
        return payload

    async def handle_sampling_request(self, request: SamplingRequest) -> SamplingResult:
        """Anthropic消息完成"""
        model = await self.selector.select_model(
            request.model_preferences,
            RequestParams.from_prompt(request.last_message_text(), request.max_tokens),
        )
        payload = self.transform_request(request, model)

        logger.info(f"Anthropic API请求 - 模型: {model}, 消息数: {len(payload['messages'])}")

        try:
            response = await self.client.post(
                self.messages_url, headers=self.get_request_headers(), json=payload
            )
        except httpx.HTTPError as e:
            logger.error(f"Anthropic API网络请求失败: {e}")
            raise ProviderError(f"Anthropic 网络请求失败: {e}") from e

        if not response.is_success:
            logger.error(f"Anthropic API错误响应: {response.status_code} - {response.text}")
            raise await self.handle_error(response)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError("Anthropic API error: invalid JSON response") from e

        return self.transform_response(data, model)

    def transform_response(self, data: dict[str, Any], requested_model: str) -> SamplingResult:
        """转换Anthropic响应为标准格式，取第一个文本块"""
        text = ""
        for block in data.get("content") or []:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text") or ""
                break

        logger.info(
            f"Anthropic API成功响应 - 模型: {data.get('model')}, 结束原因: {data.get('stop_reason')}"
        )
        return SamplingResult(
            model=data.get("model") or requested_model,
            text=text,
            stop_reason=data.get("stop_reason") or "stop",
        )
