# -*- coding: utf-8 -*-
"""
OpenRouter采样策略 - 基于实时模型目录与偏好评分选择模型
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import httpx

from ...config_models import OpenRouterStrategyConfig, validate_config
from ...selection import (
    ModelScoreTable,
    ModelSelector,
    OpenRouterModelCatalog,
    RequestParams,
)
from ...utils.config import require_env
from ...utils.logger import get_logger
from ..base import BaseSamplingStrategy, ProviderError, SamplingRequest, SamplingResult

logger = get_logger(__name__)

DEFAULT_MODELS_FILE = Path(__file__).parent.parent.parent / "data" / "default-models.json"


def load_default_allowed_models(path: Path = DEFAULT_MODELS_FILE) -> list[dict[str, Any]]:
    """读取内置的 OpenRouter 默认模型评分"""
    with open(path, encoding="utf-8") as f:
        return json.load(f)["allowedModels"]


class OpenRouterStrategy(BaseSamplingStrategy):
    """
    OpenRouter采样策略
    - 模型由 ModelSelector 按客户端偏好选出
    - 带 HTTP-Referer 和 X-Title 头部
    """

    def __init__(
        self,
        config: Optional[dict[str, Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = validate_config(OpenRouterStrategyConfig, config or {}, "OpenRouter")
        super().__init__("openrouter", timeout=self.settings.timeout, client=client)

        self.api_key = self.settings.api_key or require_env("OPENROUTER_API_KEY")["OPENROUTER_API_KEY"]
        default_model = self.settings.default_model or os.getenv("DEFAULT_MODEL_NAME")
        if not default_model:
            default_model = require_env("DEFAULT_MODEL_NAME")["DEFAULT_MODEL_NAME"]

        allowed_models = self.settings.allowed_models
        if allowed_models is None:
            allowed_models = load_default_allowed_models()

        self.base_url = self.settings.base_url.rstrip("/")
        self.catalog = OpenRouterModelCatalog(
            self.api_key, base_url=self.base_url, client=client, timeout=self.timeout
        )
        self.selector = ModelSelector(
            ModelScoreTable(allowed_models), default_model, self.catalog
        )

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def build_messages(self, request: SamplingRequest) -> list[dict[str, str]]:
        """系统提示在前，随后是有内容的消息"""
        messages = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})

        for msg in request.messages:
            content = msg.content.value
            if content:
                messages.append({"role": msg.role, "content": content})

        return messages

    def get_request_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", **self.get_auth_headers(self.api_key)}
        # OpenRouter推荐的头部，用于在openrouter.ai上的排名
        headers.update(
            {
                "HTTP-Referer": self.settings.site_url,
                "X-Title": self.settings.site_title,
            }
        )
        return headers

    async def handle_sampling_request(self, request: SamplingRequest) -> SamplingResult:
        messages = self.build_messages(request)
        prompt = messages[-1]["content"] if messages else ""

        model = await self.selector.select_model(
            request.model_preferences,
            RequestParams.from_prompt(prompt, request.max_tokens),
        )

        payload: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "max_tokens": request.max_tokens or 1000,
            "temperature": request.temperature if request.temperature is not None else 0.2,
        }
        if request.stop_sequences:
            payload["stop"] = request.stop_sequences

        logger.info(
            f"OpenRouter API请求 - URL: {self.completions_url}, 模型: {model}, 消息数: {len(messages)}"
        )

        try:
            response = await self.client.post(
                self.completions_url, headers=self.get_request_headers(), json=payload
            )
        except httpx.HTTPError as e:
            logger.error(f"OpenRouter API网络请求失败: {e}")
            raise ProviderError(f"OpenRouter 网络请求失败: {e}") from e

        if not response.is_success:
            logger.error(f"OpenRouter API错误响应: {response.status_code} - {response.text}")
            raise await self.handle_error(response)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError("OpenRouter API error: invalid JSON response") from e

        return self.transform_response(data, model)

    def transform_response(self, data: dict[str, Any], requested_model: str) -> SamplingResult:
        """转换OpenRouter响应为标准格式"""
        choices = data.get("choices") or []
        if not choices:
            raise ProviderError("OpenRouter API error: response contains no choices")

        choice = choices[0]
        message = choice.get("message") or {}
        logger.info(
            f"OpenRouter API成功响应 - 模型: {data.get('model')}, 结束原因: {choice.get('finish_reason')}"
        )

        return SamplingResult(
            model=data.get("model") or requested_model,
            text=message.get("content") or "",
            stop_reason=choice.get("finish_reason") or "stop",
        )
