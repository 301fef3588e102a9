"""镜像保存相关功能"""

from pathlib import Path
from typing import Optional

from loguru import logger

from ...constants import ERROR_MESSAGES, image_archive_name
from ...utils import CommandRunner
from ..base_manager import BaseManager
from ..config_manager import ImageDefinition
from .base import ImageSaveError


class ImageSaver(BaseManager):
    """镜像保存器类，将镜像导出为TAR文件"""

    def __init__(
        self, images_dir: Path, runner: Optional[CommandRunner] = None, docker_binary: str = "docker"
    ) -> None:
        """
        初始化镜像保存器

        Args:
            images_dir: TAR文件输出目录
            runner: 外部命令执行器
            docker_binary: docker可执行文件
        """
        super().__init__(runner, docker_binary)
        self.images_dir = images_dir

    def save(self, definition: ImageDefinition, version: str) -> Path:
        """
        执行 docker save <name>:<version>，标准输出写入TAR文件

        Args:
            definition: 镜像定义
            version: 项目版本

        Returns:
            Path: TAR文件路径

        Raises:
            ImageSaveError: 保存失败时抛出
        """
        reference = f"{definition.name}:{version}"
        self.images_dir.mkdir(parents=True, exist_ok=True)
        archive = self.images_dir / image_archive_name(definition.friendly_name, version)

        logger.warning(f"开始保存镜像 {reference} 到 {archive}...")
        try:
            with open(archive, "wb") as f:
                return_code = self.runner.stream(self._docker("save", reference), cwd=self.images_dir, stdout=f)
        except OSError as e:
            logger.error(f"无法执行docker命令: {e}")
            return_code = -1

        if return_code != 0:
            # 不保留不完整的TAR文件
            if archive.exists():
                archive.unlink()
            raise ImageSaveError(ERROR_MESSAGES["save_failed"].format(reference), image_name=definition.name)

        logger.success(f"镜像 {reference} 已保存到 {archive}")
        return archive
