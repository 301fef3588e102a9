"""镜像推送与仓库登录相关功能"""

from typing import Optional

from loguru import logger

from ...constants import ERROR_MESSAGES
from ...utils import CommandRunner
from ..base_manager import BaseManager
from ..config_manager import ImageDefinition, RegistryCredentials
from .base import ImagePushError, LoginError


class RegistrySession(BaseManager):
    """私有仓库登录会话，在整个运行前后各执行一次登录和登出"""

    def __init__(
        self,
        credentials: RegistryCredentials,
        runner: Optional[CommandRunner] = None,
        docker_binary: str = "docker",
    ) -> None:
        """
        初始化仓库会话

        Args:
            credentials: 仓库地址、用户名和密码
            runner: 外部命令执行器
            docker_binary: docker可执行文件
        """
        super().__init__(runner, docker_binary)
        self.credentials = credentials
        self.logged_in = False

    @property
    def required(self) -> bool:
        """仓库地址、用户名、密码都不为空时才需要登录"""
        return self.credentials.is_complete

    def login(self) -> bool:
        """
        登录私有仓库

        Returns:
            bool: 是否执行了登录

        Raises:
            LoginError: 登录失败时抛出，不受 continue_on_failure 影响
        """
        if not self.required:
            if self.credentials.is_partial:
                logger.warning("私有仓库的地址、用户名和密码必须同时提供，跳过登录")
            return False

        server = self.credentials.server
        username = self.credentials.username
        logger.info(f"正在登录私有仓库 [{server}] 用户名: [{username}]")
        try:
            return_code, stdout, stderr = self.runner.run(
                self._docker("login", "-u", username, "--password-stdin", server),
                input_text=self.credentials.password,
            )
        except OSError as e:
            raise LoginError(ERROR_MESSAGES["login_failed"].format(username, server, e))

        if return_code != 0:
            raise LoginError(ERROR_MESSAGES["login_failed"].format(username, server, stderr.strip()))

        self.logged_in = True
        logger.info(stdout.strip())
        logger.success("登录仓库成功")
        return True

    def logout(self) -> bool:
        """
        登出私有仓库，失败只记录日志

        Returns:
            bool: 是否执行了登出
        """
        if not self.logged_in:
            return False

        server = self.credentials.server
        logger.info(f"正在登出私有仓库 [{server}]")
        try:
            return_code, stdout, stderr = self.runner.run(self._docker("logout", server))
        except OSError as e:
            logger.error(f"登出仓库失败: {e}")
            return False
        self.logged_in = False
        if return_code != 0:
            logger.error(f"登出仓库 [{server}] 失败: {stderr.strip()}")
        else:
            logger.info(stdout.strip())
        return True


class ImagePusher(BaseManager):
    """镜像推送器类"""

    def push(self, definition: ImageDefinition, version: str) -> str:
        """
        推送 <name>:<version> 到仓库，推送输出直接显示在终端

        Args:
            definition: 镜像定义
            version: 项目版本

        Returns:
            str: 已推送的镜像引用

        Raises:
            ImagePushError: 推送失败时抛出
        """
        reference = f"{definition.name}:{version}"
        logger.warning(f"开始推送镜像 {reference}...")
        try:
            return_code = self.runner.stream(self._docker("push", reference))
        except OSError as e:
            logger.error(f"无法执行docker命令: {e}")
            return_code = -1

        if return_code != 0:
            raise ImagePushError(ERROR_MESSAGES["push_failed"].format(reference), image_name=definition.name)

        logger.success(f"镜像 {reference} 推送成功")
        return reference
