#!/usr/bin/env python3
"""
MCP Sampling Router - 统一采样接口服务
"""

import argparse
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from api.health import create_health_router
from api.sampling import create_sampling_router
from sampling.config_models import SamplingSettings
from sampling.providers import BaseSamplingStrategy, StrategyRegistry, create_default_registry
from sampling.services import SamplingService
from sampling.utils.config import load_settings
from sampling.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(
    settings: Optional[SamplingSettings] = None,
    registry: Optional[StrategyRegistry] = None,
    strategy: Optional[BaseSamplingStrategy] = None,
) -> FastAPI:
    """
    创建FastAPI应用

    Args:
        settings: 服务配置，缺省时从 config/ 加载
        registry: 策略注册中心，缺省时使用内置策略
        strategy: 直接指定的策略实例，缺省时按配置创建
    """
    settings = settings or load_settings()
    registry = registry or create_default_registry()

    setup_logging(settings.logging.model_dump())

    if strategy is None:
        strategy = registry.create(settings.sampling.strategy, settings.sampling.config)
    service = SamplingService(strategy)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """应用生命周期管理"""
        logger.info(f"{settings.system.name} started with strategy '{strategy.name}'")
        yield
        await strategy.close()
        logger.info(f"{settings.system.name} shutdown complete")

    app = FastAPI(
        title=settings.system.name,
        description="Uniform MCP sampling interface over interchangeable LLM providers",
        version=settings.system.version,
        lifespan=lifespan,
    )

    app.include_router(create_health_router(settings, registry))
    app.include_router(create_sampling_router(service, registry))

    app.state.settings = settings
    app.state.registry = registry
    app.state.sampling_service = service
    return app


def main():
    """主函数"""
    parser = argparse.ArgumentParser(description="MCP Sampling Router")
    parser.add_argument("--config", default=None, help="Path to the YAML config file")
    parser.add_argument("--host", default=None, help="Host to bind to")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to")

    args = parser.parse_args()

    settings = load_settings(args.config)
    app = create_app(settings)

    host = args.host or settings.server.host
    port = args.port or settings.server.port
    logger.info(f"Serving on http://{host}:{port} (strategy: {settings.sampling.strategy})")

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_config=None,  # 使用我们自己的日志配置
    )


if __name__ == "__main__":
    main()
