"""镜像标签推导相关功能"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ...constants import UNKNOWN_COMMIT, UNKNOWN_REPOSITORY_VERSION
from ...time_utils import get_build_timestamp, timestamp_tag
from ...utils import CommandRunner
from ..config_manager import ImageDefinition


@dataclass(frozen=True)
class BuildContext:
    """一次运行内所有镜像共享的版本信息"""

    repository_version: str
    project_version: str
    build_timestamp: str

    @property
    def timestamp_tag(self) -> str:
        return timestamp_tag(self.build_timestamp)


def derive_tags(definition: ImageDefinition, context: BuildContext, path_commit: str) -> List[str]:
    """
    按固定顺序生成镜像的全部标签，不去重

    Args:
        definition: 镜像定义
        context: 本次运行的版本信息
        path_commit: Dockerfile所在目录的最近提交

    Returns:
        List[str]: 完整的镜像标签列表
    """
    name = definition.name
    tags = [
        f"{name}:latest",
        f"{name}:{context.repository_version}",
        f"{name}:{path_commit}",
    ]
    tags.extend(f"{name}:{tag}" for tag in definition.tags)
    tags.append(f"{name}:{context.project_version}")
    tags.append(f"{name}:{context.timestamp_tag}")
    return tags


class ImageTagger:
    """镜像标签推导器类，通过git查询版本信息"""

    def __init__(self, runner: CommandRunner, work_dir: Path, git_binary: str = "git") -> None:
        """
        初始化镜像标签推导器

        Args:
            runner: 外部命令执行器
            work_dir: 执行git命令的目录
            git_binary: git可执行文件
        """
        self.runner = runner
        self.work_dir = work_dir
        self.git_binary = git_binary

    def _git(self, *args: str) -> str:
        """执行git命令并返回去除首尾空白的标准输出，失败时返回空字符串"""
        try:
            return_code, stdout, stderr = self.runner.run([self.git_binary, *args], cwd=self.work_dir)
        except OSError as e:
            logger.warning(f"无法执行git命令: {e}")
            return ""
        if return_code != 0:
            logger.debug(f"git {' '.join(args)} 返回 {return_code}: {stderr.strip()}")
        return stdout.strip()

    def repository_version(self) -> str:
        """
        获取仓库版本（git describe --dirty）

        Returns:
            str: 仓库版本，没有标签时为 0.0.0-UNKNOWN
        """
        return self._git("describe", "--dirty") or UNKNOWN_REPOSITORY_VERSION

    def path_commit(self, path: Path) -> str:
        """
        获取最近一次修改指定路径的提交短哈希

        Returns:
            str: 提交短哈希，查询不到时为 UNKNOWN-COMMIT
        """
        return self._git("log", "-n", "1", "--pretty=format:%h", "--", str(path)) or UNKNOWN_COMMIT

    def create_context(self, project_version: str, build_timestamp: Optional[str] = None) -> BuildContext:
        """生成本次运行的版本信息，仓库版本和时间戳只计算一次"""
        context = BuildContext(
            repository_version=self.repository_version(),
            project_version=project_version,
            build_timestamp=build_timestamp or get_build_timestamp(),
        )
        logger.info(f"仓库版本: {context.repository_version}，项目版本: {context.project_version}")
        return context
