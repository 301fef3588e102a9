"""常量配置模块"""

from typing import Any, Dict, List, Optional, TypedDict

# 配置文件查找顺序
DEFAULT_CONFIG_FILES: List[str] = ["dockforge.yml", "dockforge.yaml", "dockforge.json"]

# 版本占位符
UNKNOWN_REPOSITORY_VERSION: str = "0.0.0-UNKNOWN"
UNKNOWN_COMMIT: str = "UNKNOWN-COMMIT"
UNSPECIFIED_PROJECT_VERSION: str = "unspecified"

# 生成文件的命名
TAG_RECORD_PREFIX: str = "VERSION.DOCKER-IMAGE."
IMAGE_TAG_DIR_NAME: str = "imageTags"
IMAGES_DIR_NAME: str = "images"


def image_archive_name(friendly_name: str, version: str) -> str:
    """docker save 输出文件名"""
    return f"docker-image-{friendly_name}-{version}.tar"


# 项目默认配置
class ProjectSection(TypedDict):
    version: Optional[str]
    build_dir: str
    docker_binary: str
    git_binary: str


class OptionsSection(TypedDict):
    continue_on_failure: bool
    delete_older_images: bool
    remove_dangling_images: bool
    include_images: List[str]
    exclude_images: List[str]


class RegistrySection(TypedDict):
    server: str
    username: str
    password: str


class DefaultProjectConfig(TypedDict):
    project: ProjectSection
    images: List[Dict[str, Any]]
    options: OptionsSection
    registry: RegistrySection


DEFAULT_PROJECT_CONFIG: DefaultProjectConfig = {
    "project": {
        "version": None,  # 未设置时使用 unspecified
        "build_dir": "build",
        "docker_binary": "docker",
        "git_binary": "git",
    },
    "images": [],
    "options": {
        "continue_on_failure": False,
        "delete_older_images": False,
        "remove_dangling_images": False,
        "include_images": [],
        "exclude_images": [],
    },
    "registry": {
        "server": "",
        "username": "",
        "password": "",
    },
}

# 镜像定义中允许出现的键
IMAGE_DEFINITION_KEYS: List[str] = [
    "name",
    "repository",
    "dockerfile",
    "tags",
    "build_args",
    "target",
    "context_dir",
]

# 环境变量
ENV_DOCKER_USERNAME: str = "DOCKER_USERNAME"
ENV_DOCKER_PASSWORD: str = "DOCKER_PASSWORD"

# 错误消息
class ErrorMessages(TypedDict):
    config_not_found: str
    config_validation: str
    image_name_missing: str
    dockerfile_missing: str
    no_definitions: str
    build_failed: str
    save_failed: str
    push_failed: str
    login_failed: str
    run_failed: str
    value_not_string: str


ERROR_MESSAGES: ErrorMessages = {
    "config_not_found": "项目配置文件不存在: {}",
    "config_validation": "配置验证失败: {}",
    "image_name_missing": "第 {} 个镜像定义缺少 name（或已弃用的 repository）",
    "dockerfile_missing": "第 {} 个镜像定义缺少 dockerfile",
    "no_definitions": "应用包含/排除规则后没有可构建的镜像定义 (包含: {}, 排除: {})",
    "build_failed": "无法构建Dockerfile [{}]",
    "save_failed": "无法保存Docker镜像 [{}]",
    "push_failed": "无法推送Docker镜像 [{}]",
    "login_failed": "以 [{}] 身份登录Docker仓库 [{}] 失败 - {}",
    "run_failed": "以下镜像操作失败:",
    "value_not_string": "配置项 {} 的值 {!r} 不是字符串，版本号和标签请加引号（例如 version: \"1.10\"）",
}
