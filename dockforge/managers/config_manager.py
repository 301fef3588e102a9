"""配置管理器类"""

import copy
import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type, Union

import yaml
from loguru import logger

from ..constants import (
    DEFAULT_PROJECT_CONFIG,
    ERROR_MESSAGES,
    IMAGE_DEFINITION_KEYS,
    IMAGE_TAG_DIR_NAME,
    IMAGES_DIR_NAME,
    UNSPECIFIED_PROJECT_VERSION,
    DefaultProjectConfig,
)
from ..utils import split_names


class ConfigError(Exception):
    """配置错误"""

    pass


ValidationStructure = Dict[str, Union[Type[Any], "ValidationStructure"]]


def generate_validation_structure(config_template: Dict[str, Any]) -> ValidationStructure:
    """
    从配置模板生成验证结构

    Args:
        config_template: 配置模板

    Returns:
        ValidationStructure: 验证结构
    """
    validation_structure: ValidationStructure = {}

    for key, value in config_template.items():
        if isinstance(value, dict):
            validation_structure[key] = generate_validation_structure(value)
        elif isinstance(value, list):
            validation_structure[key] = list
        elif value is None:
            validation_structure[key] = str
        else:
            validation_structure[key] = type(value)

    return validation_structure


def friendly_image_name(name: str) -> str:
    """将镜像名中的 / 替换为 -，用于文件名"""
    return name.replace("/", "-")


def resolve_image_name(name: Optional[str], repository: Optional[str], index: int = 1) -> str:
    """
    解析镜像的有效名称：优先使用 name，其次使用已弃用的 repository

    Args:
        name: 镜像名称
        repository: 已弃用的镜像名称字段
        index: 镜像定义的序号，用于错误提示

    Returns:
        str: 有效的镜像名称

    Raises:
        ConfigError: 两者都为空时抛出
    """
    name = (name or "").strip()
    if name:
        return name
    repository = (repository or "").strip()
    if repository:
        logger.warning(f"镜像定义 [{repository}] 使用了已弃用的 repository 字段，请改用 name")
        return repository
    raise ConfigError(ERROR_MESSAGES["image_name_missing"].format(index))


@dataclass(frozen=True)
class ImageDefinition:
    """单个可构建镜像的定义"""

    source_file: Path
    name: str
    tags: Tuple[str, ...] = ()
    build_args: Tuple[str, ...] = ()
    target: Optional[str] = None
    context_dir: Optional[Path] = None

    @property
    def effective_context_dir(self) -> Path:
        """构建上下文目录，未配置时为Dockerfile所在目录"""
        return self.context_dir or self.source_file.parent

    @property
    def friendly_name(self) -> str:
        return friendly_image_name(self.name)


@dataclass(frozen=True)
class RegistryCredentials:
    """私有仓库登录信息"""

    server: str = ""
    username: str = ""
    password: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.server.strip() and self.username.strip() and self.password.strip())

    @property
    def is_partial(self) -> bool:
        provided = [bool(value.strip()) for value in (self.server, self.username, self.password)]
        return any(provided) and not all(provided)


@dataclass(frozen=True)
class RunOptions:
    """一次运行的全局选项"""

    include_names: Tuple[str, ...] = ()
    exclude_names: Tuple[str, ...] = ()
    continue_on_failure: bool = False
    delete_older_images: bool = False
    remove_dangling_images: bool = False
    registry: RegistryCredentials = field(default_factory=RegistryCredentials)


@dataclass(frozen=True)
class ProjectSettings:
    """项目级设置"""

    project_dir: Path
    project_version: str = UNSPECIFIED_PROJECT_VERSION
    build_dir: Optional[Path] = None
    docker_binary: str = "docker"
    git_binary: str = "git"

    @property
    def effective_build_dir(self) -> Path:
        return self.build_dir or self.project_dir / "build"

    @property
    def image_tag_dir(self) -> Path:
        return self.effective_build_dir / IMAGE_TAG_DIR_NAME

    @property
    def images_dir(self) -> Path:
        return self.effective_build_dir / IMAGES_DIR_NAME


class ConfigManager:
    """配置管理器类，负责读取配置文件并生成镜像定义与运行选项"""

    config_file: Path
    project_dir: Path
    config: DefaultProjectConfig
    REQUIRED_CONFIG_FIELDS: ValidationStructure

    def __init__(self, config_file: Union[str, Path], config: Optional[Dict[str, Any]] = None) -> None:
        """
        初始化配置管理器

        Args:
            config_file: 配置文件路径，相对路径都基于其所在目录解析
            config: 已加载的配置，默认为None（调用load_config读取）
        """
        self.config_file = Path(config_file).resolve()
        self.project_dir = self.config_file.parent
        self.REQUIRED_CONFIG_FIELDS = generate_validation_structure(DEFAULT_PROJECT_CONFIG)
        self.config = self._merge_defaults(config) if config is not None else copy.deepcopy(DEFAULT_PROJECT_CONFIG)

    def load_config(self) -> DefaultProjectConfig:
        """
        加载配置文件，支持YAML和JSON

        Returns:
            DefaultProjectConfig: 加载的配置

        Raises:
            ConfigError: 配置加载失败时抛出
        """
        if not self.config_file.exists():
            raise ConfigError(ERROR_MESSAGES["config_not_found"].format(self.config_file))

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                if self.config_file.suffix == ".json":
                    raw = json.load(f)
                else:
                    raw = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigError(ERROR_MESSAGES["config_validation"].format(f"无法解析 {self.config_file}: {e}"))

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(ERROR_MESSAGES["config_validation"].format("配置文件顶层必须是字典"))

        self.config = self._merge_defaults(raw)
        self.validate_config()
        logger.debug(f"已加载配置文件: {self.config_file}")
        return self.config

    def _merge_defaults(self, config: Dict[str, Any]) -> DefaultProjectConfig:
        """以默认配置为基础，递归合并用户配置"""

        def recursive_update(current, updates):
            for key, value in updates.items():
                if key in current and isinstance(value, dict) and isinstance(current[key], dict):
                    recursive_update(current[key], value)
                else:
                    current[key] = value

        merged = copy.deepcopy(DEFAULT_PROJECT_CONFIG)
        recursive_update(merged, config)
        return merged

    def validate_config(self) -> None:
        """
        验证配置的完整性和正确性

        Raises:
            ConfigError: 配置验证失败时抛出
        """
        try:
            self._validate_config_structure(self.config, self.REQUIRED_CONFIG_FIELDS)
            self._validate_images()
        except ConfigError as e:
            raise ConfigError(ERROR_MESSAGES["config_validation"].format(e))

    def _validate_config_structure(self, config: Dict[str, Any], required: ValidationStructure) -> None:
        """
        递归验证配置结构

        Args:
            config: 要验证的配置
            required: 必需的配置结构

        Raises:
            ConfigError: 配置结构验证失败时抛出
        """
        for key, value_type in required.items():
            if key not in config:
                raise ConfigError(f"缺少必需的配置项: {key}")

            if isinstance(value_type, dict):
                if not isinstance(config[key], dict):
                    raise ConfigError(f"配置项类型错误: {key} 应为字典")
                self._validate_config_structure(config[key], value_type)
            elif config[key] is None:
                continue
            elif value_type is str and not isinstance(config[key], str):
                # YAML会把 1.10 解析为浮点数 1.1，无法还原
                raise ConfigError(ERROR_MESSAGES["value_not_string"].format(key, config[key]))
            elif value_type is list and isinstance(config[key], str):
                # 允许逗号分隔的字符串
                continue
            elif not isinstance(config[key], value_type):
                raise ConfigError(f"配置项类型错误: {key} 应为 {value_type.__name__}")

    def _validate_images(self) -> None:
        """验证每个镜像定义的字段"""
        for index, image in enumerate(self.config["images"], start=1):
            if not isinstance(image, dict):
                raise ConfigError(f"第 {index} 个镜像定义应为字典")
            unknown = [key for key in image if key not in IMAGE_DEFINITION_KEYS]
            if unknown:
                raise ConfigError(f"第 {index} 个镜像定义包含未知字段: {', '.join(unknown)}")
            if not image.get("dockerfile"):
                raise ConfigError(ERROR_MESSAGES["dockerfile_missing"].format(index))
            for key in ("tags", "build_args"):
                if image.get(key) is not None and not isinstance(image[key], list):
                    raise ConfigError(f"第 {index} 个镜像定义的 {key} 应为列表")
                for value in image.get(key) or []:
                    if not isinstance(value, str):
                        raise ConfigError(ERROR_MESSAGES["value_not_string"].format(f"images[{index}].{key}", value))
            for key in ("name", "repository", "dockerfile", "target", "context_dir"):
                if image.get(key) is not None and not isinstance(image[key], str):
                    raise ConfigError(ERROR_MESSAGES["value_not_string"].format(f"images[{index}].{key}", image[key]))

    def _resolve_path(self, value: Union[str, Path]) -> Path:
        path = Path(value)
        return path if path.is_absolute() else self.project_dir / path

    def get_definitions(self) -> List[ImageDefinition]:
        """
        生成镜像定义列表，保持配置中的顺序

        Returns:
            List[ImageDefinition]: 镜像定义

        Raises:
            ConfigError: 镜像名称缺失时抛出
        """
        definitions = []
        for index, image in enumerate(self.config["images"], start=1):
            name = resolve_image_name(image.get("name"), image.get("repository"), index)
            context_dir = image.get("context_dir")
            definitions.append(
                ImageDefinition(
                    source_file=self._resolve_path(image["dockerfile"]),
                    name=name,
                    tags=tuple(image.get("tags") or []),
                    build_args=tuple(image.get("build_args") or []),
                    target=image.get("target") or None,
                    context_dir=self._resolve_path(context_dir) if context_dir else None,
                )
            )
        return definitions

    def get_run_options(self, **overrides: Any) -> RunOptions:
        """
        生成运行选项，命令行传入的非None值优先于配置文件

        Args:
            overrides: RunOptions字段的覆盖值

        Returns:
            RunOptions: 运行选项
        """
        options = self.config["options"]
        registry = self.config["registry"]
        run_options = RunOptions(
            include_names=split_names(options.get("include_images")),
            exclude_names=split_names(options.get("exclude_images")),
            continue_on_failure=bool(options.get("continue_on_failure")),
            delete_older_images=bool(options.get("delete_older_images")),
            remove_dangling_images=bool(options.get("remove_dangling_images")),
            registry=RegistryCredentials(
                server=registry.get("server") or "",
                username=registry.get("username") or "",
                password=registry.get("password") or "",
            ),
        )
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(run_options, **changes) if changes else run_options

    def get_settings(self, project_version: Optional[str] = None) -> ProjectSettings:
        """
        生成项目设置

        Args:
            project_version: 命令行指定的项目版本，优先于配置文件

        Returns:
            ProjectSettings: 项目设置
        """
        project = self.config["project"]
        build_dir = project.get("build_dir")
        return ProjectSettings(
            project_dir=self.project_dir,
            project_version=project_version or project.get("version") or UNSPECIFIED_PROJECT_VERSION,
            build_dir=self._resolve_path(build_dir) if build_dir else None,
            docker_binary=project.get("docker_binary") or "docker",
            git_binary=project.get("git_binary") or "git",
        )
