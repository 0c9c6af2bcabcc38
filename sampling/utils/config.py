"""配置管理模块"""

import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from dotenv import load_dotenv

from ..config_models import SamplingSettings, validate_config
from ..exceptions import ConfigurationException, ErrorCode
from .logger import get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent

ENV_VARS = ("OPENROUTER_API_KEY", "ANTHROPIC_API_KEY", "DEFAULT_MODEL_NAME")


def load_config(config_path: Optional[Union[str, Path]] = None) -> dict[str, Any]:
    """
    加载配置文件

    Args:
        config_path: 配置文件路径，默认为 config/sampling.yaml

    Returns:
        配置字典
    """
    # 加载环境变量
    load_dotenv()

    # 确定配置文件路径
    if config_path is None:
        config_path = PROJECT_ROOT / "config" / "sampling.yaml"

        # 如果 sampling.yaml 不存在，尝试 example.yaml
        if not config_path.exists():
            config_path = PROJECT_ROOT / "config" / "example.yaml"
            logger.warning(f"配置文件 config/sampling.yaml 不存在，使用示例配置 {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigurationException(
            ErrorCode.CONFIG_LOAD_FAILED,
            f"配置文件未找到: {config_path}",
            config_path=str(config_path),
        ) from None
    except yaml.YAMLError as e:
        raise ConfigurationException(
            ErrorCode.CONFIG_PARSE_ERROR,
            f"配置文件格式错误: {e}",
            config_path=str(config_path),
            cause=e,
        ) from e

    if not isinstance(config, dict):
        raise ConfigurationException(
            ErrorCode.CONFIG_PARSE_ERROR,
            "配置文件顶层必须是映射",
            config_path=str(config_path),
        )

    # 环境变量替换
    return _replace_env_vars(config)


def load_settings(config_path: Optional[Union[str, Path]] = None) -> SamplingSettings:
    """加载并校验完整的服务配置"""
    return validate_config(SamplingSettings, load_config(config_path), "service")


def _replace_env_vars(obj: Any) -> Any:
    """
    递归替换配置中的环境变量占位符

    支持 ${VAR_NAME} 与 ${VAR_NAME:default_value}
    """
    if isinstance(obj, dict):
        return {key: _replace_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_replace_env_vars(item) for item in obj]
    elif isinstance(obj, str) and obj.startswith("${") and obj.endswith("}"):
        env_var = obj[2:-1]
        default_value = None

        if ":" in env_var:
            env_var, default_value = env_var.split(":", 1)

        value = os.getenv(env_var, default_value)
        if value is None:
            logger.warning(f"环境变量 {env_var} 未设置，保留占位符")
            return obj
        return value
    else:
        return obj


def get_config_value(config: dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    获取嵌套配置值

    Args:
        config: 配置字典
        key_path: 配置路径，如 'sampling.strategy'
        default: 默认值
    """
    value: Any = config
    for key in key_path.split("."):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def load_env_settings() -> dict[str, Optional[str]]:
    """读取服务关心的环境变量（会先加载 .env）"""
    load_dotenv()
    return {name: os.getenv(name) or None for name in ENV_VARS}


def require_env(*names: str) -> dict[str, str]:
    """
    要求环境变量必须存在

    Raises:
        ConfigurationException: 列出所有缺失的变量
    """
    load_dotenv()
    missing = [name for name in names if not os.getenv(name)]
    if missing:
        raise ConfigurationException(
            ErrorCode.CONFIG_MISSING_REQUIRED,
            f"Missing required environment variables: {', '.join(missing)}. "
            "Please create a .env file in the root directory with these variables.",
            details={"missing": missing},
        )
    return {name: os.environ[name] for name in names}
