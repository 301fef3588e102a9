"""Docker镜像管理器模块

该模块包含各种管理器类，用于读取配置并构建、保存、推送Docker镜像。
"""

from .base_manager import BaseManager
from .config_manager import (
    ConfigError,
    ConfigManager,
    ImageDefinition,
    ProjectSettings,
    RegistryCredentials,
    RunOptions,
)
from .image_manager import ImageManager

__all__ = [
    "BaseManager",
    "ConfigError",
    "ConfigManager",
    "ImageDefinition",
    "ImageManager",
    "ProjectSettings",
    "RegistryCredentials",
    "RunOptions",
]
