"""
采样策略基础类
所有采样策略的基类，定义标准接口
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from ..selection import ModelPreferences
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class MessageContent:
    """消息内容：text 或 image"""

    type: str = "text"
    text: Optional[str] = None
    data: Optional[str] = None
    mime_type: Optional[str] = None

    @property
    def value(self) -> Optional[str]:
        """文本消息返回文本，其它类型返回数据"""
        return self.text if self.type == "text" else self.data


@dataclass
class SamplingMessage:
    role: str
    content: MessageContent


@dataclass
class SamplingRequest:
    """标准化的采样请求"""

    messages: list[SamplingMessage]
    max_tokens: Optional[int] = None
    system_prompt: Optional[str] = None
    include_context: Optional[str] = None
    temperature: Optional[float] = None
    stop_sequences: Optional[list[str]] = None
    model_preferences: ModelPreferences = field(default_factory=ModelPreferences)
    metadata: Optional[dict[str, Any]] = None

    @classmethod
    def from_params(cls, params: dict[str, Any]) -> "SamplingRequest":
        """从 MCP sampling/createMessage 参数（camelCase）构建"""
        messages = []
        for msg in params.get("messages") or []:
            content = msg.get("content") or {}
            messages.append(
                SamplingMessage(
                    role=msg.get("role", "user"),
                    content=MessageContent(
                        type=content.get("type", "text"),
                        text=content.get("text"),
                        data=content.get("data"),
                        mime_type=content.get("mimeType"),
                    ),
                )
            )

        return cls(
            messages=messages,
            max_tokens=params.get("maxTokens"),
            system_prompt=params.get("systemPrompt"),
            include_context=params.get("includeContext"),
            temperature=params.get("temperature"),
            stop_sequences=params.get("stopSequences"),
            model_preferences=ModelPreferences.from_dict(params.get("modelPreferences")),
            metadata=params.get("metadata"),
        )

    def last_message_text(self) -> str:
        for msg in reversed(self.messages):
            if msg.content.value:
                return msg.content.value
        return ""


@dataclass
class SamplingResult:
    """标准化的采样结果"""

    model: str
    text: str
    stop_reason: str = "endTurn"
    role: str = "assistant"

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "stopReason": self.stop_reason,
            "role": self.role,
            "content": {"type": "text", "text": self.text},
        }


class BaseSamplingStrategy(ABC):
    """采样策略基类"""

    def __init__(
        self,
        name: str,
        timeout: float = 60.0,
        default_headers: Optional[dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        初始化采样策略

        Args:
            name: 策略名称
            timeout: HTTP 超时（秒）
            default_headers: 每个请求都会带上的请求头
            client: 外部注入的 HTTP 客户端，未提供时懒加载
        """
        self.name = name
        self.timeout = timeout
        self.default_headers = default_headers or {}
        self._client = client
        self._owns_client = client is None

        logger.info(f"初始化{name}采样策略")

    @property
    def client(self) -> httpx.AsyncClient:
        """获取HTTP客户端（懒加载）"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self.default_headers,
                timeout=self.timeout,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """关闭自己创建的HTTP客户端"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @abstractmethod
    async def handle_sampling_request(self, request: SamplingRequest) -> SamplingResult:
        """
        处理采样请求

        Args:
            request: 标准化采样请求

        Returns:
            标准化采样结果
        """

    def get_auth_headers(self, api_key: str, auth_type: str = "bearer") -> dict[str, str]:
        """
        获取认证头

        Args:
            api_key: API密钥
            auth_type: bearer / x-api-key
        """
        if auth_type == "bearer":
            return {"Authorization": f"Bearer {api_key}"}
        elif auth_type == "x-api-key":
            return {"x-api-key": api_key}
        else:
            logger.warning(f"未知的认证类型: {auth_type}")
            return {"Authorization": f"Bearer {api_key}"}

    async def handle_error(self, response: httpx.Response) -> "ProviderError":
        """
        把HTTP错误响应转换为对应的异常

        Args:
            response: HTTP响应
        """
        try:
            error_data = response.json()
            error = error_data.get("error") if isinstance(error_data, dict) else None
            if isinstance(error, dict):
                error_msg = error.get("message", str(error_data))
            else:
                error_msg = str(error or error_data)
        except ValueError:
            error_msg = response.text

        status = response.status_code
        if status == 401:
            return ProviderAuthError(f"{self.name} 认证失败: {error_msg}", status)
        elif status == 429:
            return ProviderRateLimitError(f"{self.name} 速率限制: {error_msg}", status)
        elif status == 400:
            return ProviderRequestError(f"{self.name} 请求错误: {error_msg}", status)
        elif status >= 500:
            return ProviderServerError(f"{self.name} 服务器错误: {error_msg}", status)
        else:
            return ProviderError(f"{self.name} 未知错误 ({status}): {error_msg}", status)


# 自定义异常类
class ProviderError(Exception):
    """Provider基础异常"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProviderAuthError(ProviderError):
    """认证错误"""


class ProviderRateLimitError(ProviderError):
    """速率限制错误"""


class ProviderRequestError(ProviderError):
    """请求错误"""


class ProviderServerError(ProviderError):
    """服务器错误"""
