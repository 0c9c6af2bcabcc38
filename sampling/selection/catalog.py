"""
模型目录
首次 fetch() 加载并缓存，之后直接返回缓存；并发的首次加载共享同一个请求
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional, Sequence

import httpx

from ..exceptions import CatalogFetchError
from ..utils.logger import get_logger
from .types import EXTENDED_THINKING, ModelDescriptor

logger = get_logger(__name__)

OPENROUTER_API_URL = "https://openrouter.ai/api/v1"

# OpenRouter supported_parameters 中代表推理能力的参数
_REASONING_PARAMETERS = ("reasoning", "include_reasoning")


class ModelCatalog(ABC):
    """模型目录基类"""

    # 是否记录能力标记；为 False 时跳过能力过滤
    capability_aware: bool = True

    def __init__(self) -> None:
        self._models: Optional[tuple[ModelDescriptor, ...]] = None
        self._inflight: Optional[asyncio.Future] = None

    @property
    def is_loaded(self) -> bool:
        return self._models is not None

    async def fetch(self) -> tuple[ModelDescriptor, ...]:
        """
        获取模型目录

        Raises:
            CatalogFetchError: 加载失败，不缓存失败结果
        """
        if self._models is not None:
            return self._models

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._fill())
            self._inflight.add_done_callback(self._retrieve_exception)

        return await asyncio.shield(self._inflight)

    @staticmethod
    def _retrieve_exception(task: asyncio.Future) -> None:
        # 所有等待方都被取消时，失败结果仍需被取走
        if not task.cancelled():
            task.exception()

    async def _fill(self) -> tuple[ModelDescriptor, ...]:
        try:
            models = tuple(await self._load())
            self._models = models
            logger.info(f"{type(self).__name__}: 已加载 {len(models)} 个模型")
            return models
        finally:
            self._inflight = None

    @abstractmethod
    async def _load(self) -> Sequence[ModelDescriptor]:
        """从数据源加载模型目录"""


class StaticModelCatalog(ModelCatalog):
    """静态模型目录"""

    def __init__(self, models: Iterable[ModelDescriptor], capability_aware: bool = True):
        super().__init__()
        self._static = tuple(models)
        self.capability_aware = capability_aware

    async def _load(self) -> Sequence[ModelDescriptor]:
        return self._static


class OpenRouterModelCatalog(ModelCatalog):
    """
    OpenRouter 实时模型目录
    GET {base_url}/models，进程内只请求一次
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = OPENROUTER_API_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        super().__init__()
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @property
    def models_url(self) -> str:
        return f"{self.base_url}/models"

    async def _load(self) -> Sequence[ModelDescriptor]:
        url = self.models_url
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            if self._client is not None:
                response = await self._client.get(url, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"获取OpenRouter模型列表失败: {e}")
            raise CatalogFetchError(
                f"OpenRouter API error: {e}", url=url, cause=e
            ) from e

        if not response.is_success:
            logger.error(
                f"OpenRouter模型列表错误响应: {response.status_code} {response.reason_phrase}"
            )
            raise CatalogFetchError(
                f"OpenRouter API error: {response.status_code} {response.reason_phrase}",
                url=url,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise CatalogFetchError(
                "OpenRouter API error: invalid JSON in model list",
                url=url,
                status_code=response.status_code,
                cause=e,
            ) from e

        entries = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            raise CatalogFetchError(
                "OpenRouter API error: model list is missing 'data'",
                url=url,
                status_code=response.status_code,
            )

        models: list[ModelDescriptor] = []
        seen: set[str] = set()
        for entry in entries:
            descriptor = self._parse_model(entry)
            if descriptor is None or descriptor.id in seen:
                continue
            seen.add(descriptor.id)
            models.append(descriptor)

        return models

    def _parse_model(self, model_data: Any) -> Optional[ModelDescriptor]:
        """解析单个模型条目，缺少 id 或上下文长度的条目被跳过"""
        if not isinstance(model_data, dict):
            return None

        model_id = model_data.get("id")
        context_length = model_data.get("context_length")
        if not isinstance(model_id, str) or not model_id:
            return None
        if (
            isinstance(context_length, bool)
            or not isinstance(context_length, int)
            or context_length <= 0
        ):
            logger.warning(f"跳过缺少有效上下文长度的模型: {model_id}")
            return None

        return ModelDescriptor(
            id=model_id,
            context_length=context_length,
            capabilities=self._get_capabilities(model_data),
            pricing=model_data.get("pricing"),
            architecture=model_data.get("architecture"),
        )

    @staticmethod
    def _get_capabilities(model_data: dict[str, Any]) -> frozenset[str]:
        """从 OpenRouter 模型数据提取能力标记"""
        capabilities = {"text"}

        supported_parameters = model_data.get("supported_parameters")
        if not isinstance(supported_parameters, list):
            supported_parameters = []
        architecture = model_data.get("architecture")
        if not isinstance(architecture, dict):
            architecture = {}
        input_modalities = architecture.get("input_modalities") or []

        if any(param in supported_parameters for param in _REASONING_PARAMETERS):
            capabilities.add(EXTENDED_THINKING)
        if any(param in supported_parameters for param in ("tools", "tool_choice")):
            capabilities.add("function_calling")
        if "image" in input_modalities:
            capabilities.add("vision")

        return frozenset(capabilities)
