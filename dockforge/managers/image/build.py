"""镜像构建相关功能"""

from pathlib import Path
from typing import List, Optional

from loguru import logger

from ...constants import ERROR_MESSAGES, TAG_RECORD_PREFIX
from ...utils import CommandRunner
from ..base_manager import BaseManager
from ..config_manager import ImageDefinition
from .base import BuildOutcome, ImageBuildError
from .tag import BuildContext, ImageTagger, derive_tags


def build_command(
    definition: ImageDefinition, tags: List[str], context: BuildContext, path_commit: str
) -> List[str]:
    """
    生成 docker build 的参数列表（不含docker可执行文件本身）

    Args:
        definition: 镜像定义
        tags: 按顺序应用的镜像标签
        context: 本次运行的版本信息
        path_commit: Dockerfile所在目录的最近提交

    Returns:
        List[str]: 参数列表
    """
    command = ["build"]
    for tag in tags:
        command += ["-t", tag]

    # Dockerfile中可以引用的构建参数
    command += ["--build-arg", f"BUILD_DATE={context.build_timestamp}"]
    command += ["--build-arg", f"VCS_REF={path_commit}"]
    command += ["--build-arg", f"APP_VERSION={context.project_version}"]

    command += ["-f", str(definition.source_file), str(definition.effective_context_dir)]

    if definition.target:
        command += ["--target", definition.target]

    # 自定义参数原样追加
    command.extend(definition.build_args)
    return command


class ImageBuilder(BaseManager):
    """镜像构建器类"""

    def __init__(
        self,
        tagger: ImageTagger,
        image_tag_dir: Path,
        runner: Optional[CommandRunner] = None,
        docker_binary: str = "docker",
    ) -> None:
        """
        初始化镜像构建器

        Args:
            tagger: 镜像标签推导器
            image_tag_dir: 保存镜像版本记录的目录
            runner: 外部命令执行器
            docker_binary: docker可执行文件
        """
        super().__init__(runner, docker_binary)
        self.tagger = tagger
        self.image_tag_dir = image_tag_dir

    def build(self, definition: ImageDefinition, context: BuildContext) -> BuildOutcome:
        """
        构建单个镜像，构建输出直接显示在终端

        非零退出码不会抛出异常，失败信息记录在返回结果中。

        Args:
            definition: 镜像定义
            context: 本次运行的版本信息

        Returns:
            BuildOutcome: 构建结果
        """
        path_commit = self.tagger.path_commit(definition.source_file.parent)
        tags = derive_tags(definition, context, path_commit)
        command = self._docker(*build_command(definition, tags, context, path_commit))

        try:
            return_code = self.runner.stream(command, cwd=self.tagger.work_dir)
        except OSError as e:
            logger.error(f"无法执行docker命令: {e}")
            return_code = -1

        if return_code != 0:
            error = ERROR_MESSAGES["build_failed"].format(definition.source_file)
            logger.error(f"{error}，退出码 {return_code}")
            return BuildOutcome(name=definition.name, succeeded=False, error_message=error)

        self.write_tag_record(definition, context.repository_version)
        logger.success(f"镜像 {definition.name} 构建成功，标签: {', '.join(tags)}")
        return BuildOutcome(name=definition.name, tags_applied=tags)

    def write_tag_record(self, definition: ImageDefinition, repository_version: str) -> Path:
        """
        记录镜像的版本标签

        Returns:
            Path: 记录文件路径
        """
        self.image_tag_dir.mkdir(parents=True, exist_ok=True)
        record = self.image_tag_dir / f"{TAG_RECORD_PREFIX}{definition.friendly_name}"
        record.write_text(repository_version, encoding="utf-8")
        logger.debug(f"已写入版本记录 {record}")
        return record

    @staticmethod
    def as_error(outcome: BuildOutcome) -> ImageBuildError:
        """将失败的构建结果转换为异常"""
        return ImageBuildError(outcome.error_message or "", image_name=outcome.name)
