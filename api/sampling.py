"""
MCP Sampling API
sampling/createMessage 请求的 JSON-RPC 入口
"""

from typing import Any, Optional, Union

from fastapi import APIRouter
from pydantic import BaseModel, Field

from sampling.providers import StrategyRegistry
from sampling.services import SamplingService
from sampling.utils.logger import get_logger

logger = get_logger(__name__)


class SamplingRpcRequest(BaseModel):
    """JSON-RPC 采样请求"""

    jsonrpc: str = Field("2.0", description="JSON-RPC 版本")
    id: Optional[Union[int, str]] = Field(None, description="请求ID")
    method: str = Field("sampling/createMessage", description="方法名")
    params: dict[str, Any] = Field(default_factory=dict, description="采样参数")


def create_sampling_router(service: SamplingService, registry: StrategyRegistry) -> APIRouter:
    """创建采样相关的API路由"""

    router = APIRouter(prefix="/v1", tags=["sampling"])

    @router.post("/sampling")
    async def create_message(request: SamplingRpcRequest):
        """处理采样请求，错误以 JSON-RPC error 返回"""
        logger.info(
            f"收到采样请求 - id: {request.id}, 策略: {service.strategy.name}"
        )
        return await service.handle_sampling_request(request.params, request.id)

    @router.get("/strategies")
    async def list_strategies():
        """列出已注册的采样策略"""
        return {
            "active": service.strategy.name,
            "strategies": [definition.to_dict() for definition in registry.definitions()],
        }

    return router
