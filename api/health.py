"""
Health check API endpoints
健康检查API接口
"""

import time

from fastapi import APIRouter

from sampling.config_models import SamplingSettings
from sampling.providers import StrategyRegistry


def create_health_router(settings: SamplingSettings, registry: StrategyRegistry) -> APIRouter:
    """创建健康检查相关的API路由"""

    router = APIRouter(tags=["health"])

    @router.get("/")
    async def root():
        """根路径健康检查"""
        return {
            "message": settings.system.name,
            "version": settings.system.version,
            "status": "running",
            "strategy": settings.sampling.strategy,
        }

    @router.get("/health")
    async def health_check():
        """系统健康检查"""
        return {
            "status": "healthy",
            "version": settings.system.version,
            "timestamp": int(time.time()),
            "strategy": settings.sampling.strategy,
            "available_strategies": registry.available_strategies(),
        }

    return router
