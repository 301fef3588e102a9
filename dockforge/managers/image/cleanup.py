"""镜像清理相关功能"""

from typing import List

from loguru import logger

from ...utils import unique_lines
from ..base_manager import BaseManager


class ImageCleaner(BaseManager):
    """镜像清理器类，所有错误只记录日志，不会中断运行"""

    def remove_older_images(self, image_name: str) -> List[str]:
        """
        删除早于 <image_name>:latest 的同名镜像

        Args:
            image_name: 镜像名称

        Returns:
            List[str]: 已删除的镜像ID
        """
        image_ids = self._list_images("-f", f"before={image_name}:latest", "-f", f"reference={image_name}")
        if not image_ids:
            logger.info(f"没有需要删除的旧 [{image_name}] 镜像")
            return []
        deleted = self._remove_images(image_ids)
        if deleted:
            logger.info(f"已删除旧的 [{image_name}] 镜像: {', '.join(deleted)}")
        return deleted

    def remove_dangling_images(self) -> List[str]:
        """
        删除所有悬空镜像

        Returns:
            List[str]: 已删除的镜像ID
        """
        image_ids = self._list_images("-f", "dangling=true")
        if not image_ids:
            logger.info("没有悬空镜像")
            return []
        deleted = self._remove_images(image_ids)
        if deleted:
            logger.info(f"已删除悬空镜像: {', '.join(deleted)}")
        return deleted

    def _list_images(self, *filters: str) -> List[str]:
        try:
            return_code, stdout, stderr = self.runner.run(self._docker("images", *filters, "-q"))
        except OSError as e:
            logger.error(f"查询镜像失败: {e}")
            return []
        if return_code != 0:
            logger.error(f"查询镜像失败: {stderr.strip()}")
            return []
        return unique_lines(stdout)

    def _remove_images(self, image_ids: List[str]) -> List[str]:
        try:
            return_code, stdout, stderr = self.runner.run(self._docker("rmi", "-f", *image_ids))
        except OSError as e:
            logger.error(f"删除镜像失败: {e}")
            return []
        if return_code != 0:
            logger.error(f"删除镜像 {' '.join(image_ids)} 失败: {stderr.strip()}")
            return []
        logger.debug(stdout.strip())
        return image_ids
