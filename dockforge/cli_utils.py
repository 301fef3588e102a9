"""CLI工具模块，包含CLI命令行接口的辅助函数"""

import os
from dataclasses import replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

from .constants import DEFAULT_CONFIG_FILES, ENV_DOCKER_PASSWORD, ENV_DOCKER_USERNAME, ERROR_MESSAGES
from .managers.config_manager import ConfigError, ConfigManager, RegistryCredentials
from .managers.image_manager import ImageManager
from .utils import CommandRunner, split_names


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """
    从指定目录开始向上查找配置文件

    Args:
        start: 起始目录，默认为当前目录

    Returns:
        Optional[Path]: 找到的配置文件路径，未找到则返回None
    """
    current = (start or Path.cwd()).resolve()
    while True:
        for filename in DEFAULT_CONFIG_FILES:
            candidate = current / filename
            if candidate.exists():
                return candidate
        if current == current.parent:
            return None
        current = current.parent


def resolve_config_path(config: Optional[str]) -> Path:
    """
    确定要使用的配置文件

    Raises:
        ConfigError: 配置文件不存在时抛出
    """
    if config:
        path = Path(config)
        if not path.exists():
            raise ConfigError(ERROR_MESSAGES["config_not_found"].format(path))
        return path

    path = find_config_file()
    if path is None:
        raise ConfigError(ERROR_MESSAGES["config_not_found"].format(" / ".join(DEFAULT_CONFIG_FILES)))
    return path


def resolve_credentials(
    configured: RegistryCredentials,
    server: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> RegistryCredentials:
    """
    合并命令行、环境变量和配置文件中的仓库登录信息

    用户名: 命令行 > DOCKER_USERNAME > 配置文件
    密码: 命令行 > DOCKER_PASSWORD_<用户名> > DOCKER_PASSWORD > 配置文件

    Args:
        configured: 配置文件中的登录信息
        server: 命令行指定的仓库地址
        username: 命令行指定的用户名
        password: 命令行指定的密码

    Returns:
        RegistryCredentials: 合并后的登录信息
    """
    server = server or configured.server
    username = username or os.environ.get(ENV_DOCKER_USERNAME) or configured.username

    if not password and username:
        env_var_name = f"{ENV_DOCKER_PASSWORD}_{username.upper()}"
        password = os.environ.get(env_var_name)
        if password:
            logger.info(f"已从环境变量 {env_var_name} 获取密码")
    if not password:
        password = os.environ.get(ENV_DOCKER_PASSWORD)
        if password:
            logger.info(f"已从环境变量 {ENV_DOCKER_PASSWORD} 获取密码")
    if not password:
        password = configured.password

    return RegistryCredentials(server=server or "", username=username or "", password=password or "")


def create_runner() -> CommandRunner:
    """创建外部命令执行器"""
    return CommandRunner()


def get_image_manager(
    config: Optional[str] = None,
    include_images: Optional[str] = None,
    exclude_images: Optional[str] = None,
    continue_on_failure: Optional[bool] = None,
    delete_older_images: Optional[bool] = None,
    remove_dangling_images: Optional[bool] = None,
    registry_server: Optional[str] = None,
    registry_username: Optional[str] = None,
    registry_password: Optional[str] = None,
    project_version: Optional[str] = None,
) -> ImageManager:
    """
    读取配置并创建镜像管理器，命令行参数优先于配置文件

    Returns:
        ImageManager: 镜像管理器实例

    Raises:
        ConfigError: 配置无效时抛出
    """
    config_manager = ConfigManager(resolve_config_path(config))
    config_manager.load_config()

    # 项目目录下的.env不会覆盖已有的环境变量
    load_dotenv(config_manager.project_dir / ".env")

    options = config_manager.get_run_options(
        include_names=split_names(include_images) or None,
        exclude_names=split_names(exclude_images) or None,
        continue_on_failure=continue_on_failure,
        delete_older_images=delete_older_images,
        remove_dangling_images=remove_dangling_images,
    )
    credentials = resolve_credentials(options.registry, registry_server, registry_username, registry_password)
    options = replace(options, registry=credentials)

    return ImageManager(
        config_manager.get_definitions(),
        options,
        config_manager.get_settings(project_version),
        runner=create_runner(),
    )
