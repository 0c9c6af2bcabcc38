"""
采样服务
校验请求、调用当前策略，并格式化为 JSON-RPC 2.0 响应
"""

import math
from typing import Any

from ..exceptions import CatalogFetchError, SamplingErrorCodes, SamplingException
from ..providers.base import (
    BaseSamplingStrategy,
    ProviderError,
    SamplingRequest,
    SamplingResult,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SamplingService:
    """采样服务"""

    def __init__(self, strategy: BaseSamplingStrategy):
        self.strategy = strategy

    async def handle_sampling_request(
        self, params: dict[str, Any], request_id: Any
    ) -> dict[str, Any]:
        """
        处理一次采样请求

        Args:
            params: MCP sampling/createMessage 参数
            request_id: JSON-RPC 请求 id

        Returns:
            JSON-RPC 响应，成功时带 result，失败时带 error
        """
        try:
            self.validate_request(params)
            request = SamplingRequest.from_params(self.process_messages(params))
            result = await self.make_completion_request(request)
            return self.format_success_response(result, request_id)
        except Exception as e:
            return self.format_error_response(e, request_id)

    @staticmethod
    def validate_request(params: Any) -> None:
        if not isinstance(params, dict):
            raise SamplingException.invalid_request("Request params must be an object")

        messages = params.get("messages")
        if not isinstance(messages, list) or not messages:
            raise SamplingException.invalid_request(
                "Messages array is required and cannot be empty"
            )

        max_tokens = params.get("maxTokens")
        if (
            isinstance(max_tokens, bool)
            or not isinstance(max_tokens, (int, float))
            or max_tokens <= 0
        ):
            raise SamplingException.invalid_request("maxTokens must be a positive number")

    @staticmethod
    def process_messages(params: dict[str, Any]) -> dict[str, Any]:
        """把消息规范化为 text / image 两种内容"""
        messages = []
        for msg in params["messages"]:
            msg = msg if isinstance(msg, dict) else {}
            content = msg.get("content")
            content = content if isinstance(content, dict) else {}

            if content.get("type", "text") == "text":
                normalized = {"type": "text", "text": content.get("text") or ""}
            else:
                normalized = {
                    "type": "image",
                    "data": content.get("data") or "",
                    "mimeType": content.get("mimeType") or "image/jpeg",
                }
            messages.append({"role": msg.get("role", "user"), "content": normalized})

        return {**params, "messages": messages, "maxTokens": math.ceil(params["maxTokens"])}

    async def make_completion_request(self, request: SamplingRequest) -> SamplingResult:
        try:
            return await self.strategy.handle_sampling_request(request)
        except (ProviderError, CatalogFetchError) as e:
            raise SamplingException.execution_failed(
                f"Failed to get completion: {e}", cause=e
            ) from e

    @staticmethod
    def format_success_response(result: SamplingResult, request_id: Any) -> dict[str, Any]:
        body = result.to_dict()
        body["stopReason"] = result.stop_reason or "endTurn"
        return {"jsonrpc": "2.0", "id": request_id, "result": body}

    @staticmethod
    def format_error_response(error: Exception, request_id: Any) -> dict[str, Any]:
        logger.error(f"Error handling sampling request: {error}", exc_info=error)

        if isinstance(error, SamplingException):
            error_body = {"code": error.code, "message": error.message}
        else:
            error_body = {
                "code": SamplingErrorCodes.SAMPLING_ERROR,
                "message": f"Failed to handle sampling request: {error}",
            }

        return {"jsonrpc": "2.0", "id": request_id, "error": error_body}
