"""基础管理器类"""

from typing import Optional

from loguru import logger

from ..utils import CommandRunner


class BaseManager:
    """所有管理器类的基类，持有外部命令执行器和docker可执行文件"""

    runner: CommandRunner
    docker_binary: str

    def __init__(self, runner: Optional[CommandRunner] = None, docker_binary: str = "docker") -> None:
        """
        初始化基础管理器

        Args:
            runner: 外部命令执行器，默认使用subprocess
            docker_binary: docker可执行文件
        """
        self.runner = runner or CommandRunner()
        self.docker_binary = docker_binary

    def _docker(self, *args: str) -> list:
        """拼接docker命令"""
        return [self.docker_binary, *args]

    def check_docker_connection(self) -> bool:
        """
        检查Docker守护进程连接状态

        Returns:
            bool: 连接是否正常
        """
        try:
            return_code, _, stderr = self.runner.run(self._docker("version", "--format", "{{.Server.Version}}"))
        except OSError as e:
            logger.error(f"Docker连接检查失败: {e}")
            return False
        if return_code != 0:
            logger.error(f"Docker连接检查失败: {stderr.strip()}")
            return False
        return True
