"""CLI命令行接口模块"""

import sys
from typing import Optional

import typer
from loguru import logger

from dockforge.cli_utils import get_image_manager
from dockforge.formatters.summary import format_definitions, format_run_summary
from dockforge.managers.config_manager import ConfigError
from dockforge.managers.image.base import AggregateFailureError, DockforgeError

# 创建CLI应用
app = typer.Typer(
    help="多镜像项目的Docker镜像构建工具",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# 各命令共用的选项
CONFIG_OPTION = typer.Option(None, "-c", "--config", help="配置文件路径，默认向上查找dockforge.yml")
INCLUDE_OPTION = typer.Option(None, "--include-images", help="只处理这些镜像，逗号分隔")
EXCLUDE_OPTION = typer.Option(None, "--exclude-images", help="跳过这些镜像，逗号分隔")
CONTINUE_OPTION = typer.Option(
    None, "--continue-on-failure/--fail-fast", help="单个镜像失败时是否继续处理其余镜像"
)
DELETE_OLDER_OPTION = typer.Option(
    None, "--delete-older-images/--keep-older-images", help="构建成功后删除旧的同名镜像"
)
REMOVE_DANGLING_OPTION = typer.Option(
    None, "--remove-dangling-images/--keep-dangling-images", help="运行结束时删除悬空镜像"
)
SERVER_OPTION = typer.Option(None, "--registry-server", help="私有仓库地址")
USERNAME_OPTION = typer.Option(None, "--registry-username", help="私有仓库用户名，默认读取DOCKER_USERNAME")
PASSWORD_OPTION = typer.Option(None, "--registry-password", help="私有仓库密码，默认读取DOCKER_PASSWORD")
VERSION_OPTION = typer.Option(None, "--project-version", help="项目版本，覆盖配置文件中的project.version")


def _run_images(save: bool, publish: bool, **kwargs) -> None:
    """创建镜像管理器并执行一次运行，失败时以状态码1退出"""
    try:
        image_manager = get_image_manager(**kwargs)

        if not image_manager.check_docker_connection():
            logger.error("无法连接到Docker，请确保Docker服务正在运行")
            sys.exit(1)

        result = image_manager.run(save=save, publish=publish)
        format_run_summary(result)
        logger.success("所有镜像处理完成")
    except AggregateFailureError as e:
        if e.result is not None:
            format_run_summary(e.result)
        logger.error(str(e))
        sys.exit(1)
    except (ConfigError, DockforgeError) as e:
        logger.error(f"错误：{e}")
        sys.exit(1)


@app.command("build")
def build_images(
    config: Optional[str] = CONFIG_OPTION,
    include_images: Optional[str] = INCLUDE_OPTION,
    exclude_images: Optional[str] = EXCLUDE_OPTION,
    continue_on_failure: Optional[bool] = CONTINUE_OPTION,
    delete_older_images: Optional[bool] = DELETE_OLDER_OPTION,
    remove_dangling_images: Optional[bool] = REMOVE_DANGLING_OPTION,
    registry_server: Optional[str] = SERVER_OPTION,
    registry_username: Optional[str] = USERNAME_OPTION,
    registry_password: Optional[str] = PASSWORD_OPTION,
    project_version: Optional[str] = VERSION_OPTION,
):
    """构建Docker镜像"""
    _run_images(
        save=False,
        publish=False,
        config=config,
        include_images=include_images,
        exclude_images=exclude_images,
        continue_on_failure=continue_on_failure,
        delete_older_images=delete_older_images,
        remove_dangling_images=remove_dangling_images,
        registry_server=registry_server,
        registry_username=registry_username,
        registry_password=registry_password,
        project_version=project_version,
    )


@app.command("save")
def save_images(
    config: Optional[str] = CONFIG_OPTION,
    include_images: Optional[str] = INCLUDE_OPTION,
    exclude_images: Optional[str] = EXCLUDE_OPTION,
    continue_on_failure: Optional[bool] = CONTINUE_OPTION,
    delete_older_images: Optional[bool] = DELETE_OLDER_OPTION,
    remove_dangling_images: Optional[bool] = REMOVE_DANGLING_OPTION,
    registry_server: Optional[str] = SERVER_OPTION,
    registry_username: Optional[str] = USERNAME_OPTION,
    registry_password: Optional[str] = PASSWORD_OPTION,
    project_version: Optional[str] = VERSION_OPTION,
):
    """构建Docker镜像并保存为TAR文件"""
    _run_images(
        save=True,
        publish=False,
        config=config,
        include_images=include_images,
        exclude_images=exclude_images,
        continue_on_failure=continue_on_failure,
        delete_older_images=delete_older_images,
        remove_dangling_images=remove_dangling_images,
        registry_server=registry_server,
        registry_username=registry_username,
        registry_password=registry_password,
        project_version=project_version,
    )


@app.command("publish")
def publish_images(
    config: Optional[str] = CONFIG_OPTION,
    include_images: Optional[str] = INCLUDE_OPTION,
    exclude_images: Optional[str] = EXCLUDE_OPTION,
    continue_on_failure: Optional[bool] = CONTINUE_OPTION,
    delete_older_images: Optional[bool] = DELETE_OLDER_OPTION,
    remove_dangling_images: Optional[bool] = REMOVE_DANGLING_OPTION,
    registry_server: Optional[str] = SERVER_OPTION,
    registry_username: Optional[str] = USERNAME_OPTION,
    registry_password: Optional[str] = PASSWORD_OPTION,
    project_version: Optional[str] = VERSION_OPTION,
    save: bool = typer.Option(False, "-s", "--save", help="推送前同时保存为TAR文件"),
):
    """构建Docker镜像并推送到仓库"""
    _run_images(
        save=save,
        publish=True,
        config=config,
        include_images=include_images,
        exclude_images=exclude_images,
        continue_on_failure=continue_on_failure,
        delete_older_images=delete_older_images,
        remove_dangling_images=remove_dangling_images,
        registry_server=registry_server,
        registry_username=registry_username,
        registry_password=registry_password,
        project_version=project_version,
    )


@app.command("list")
def list_images(
    config: Optional[str] = CONFIG_OPTION,
    include_images: Optional[str] = INCLUDE_OPTION,
    exclude_images: Optional[str] = EXCLUDE_OPTION,
):
    """显示将要处理的镜像定义"""
    try:
        image_manager = get_image_manager(
            config=config, include_images=include_images, exclude_images=exclude_images
        )
        format_definitions(image_manager.select_definitions())
    except (ConfigError, DockforgeError) as e:
        logger.error(f"错误：{e}")
        sys.exit(1)


def main():
    """主入口函数"""
    app()


if __name__ == "__main__":
    main()
