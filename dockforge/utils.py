"""工具函数模块"""

import subprocess
from pathlib import Path
from typing import IO, List, Optional, Sequence, Tuple, Union

from loguru import logger

PathLike = Union[str, Path]


def run_command(
    command: Sequence[str],
    check: bool = False,
    cwd: Optional[PathLike] = None,
    input_text: Optional[str] = None,
) -> Tuple[int, str, str]:
    """
    运行外部命令并返回结果，不经过shell

    Args:
        command: 命令参数列表
        check: 是否检查返回码
        cwd: 工作目录
        input_text: 写入标准输入的内容

    Returns:
        (返回码, 标准输出, 标准错误)
    """
    args = [str(arg) for arg in command]
    logger.debug(f"执行命令: {' '.join(args)}")

    process = subprocess.Popen(
        args,
        cwd=str(cwd) if cwd else None,
        stdin=subprocess.PIPE if input_text is not None else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        universal_newlines=True,
    )

    # 获取输出
    stdout, stderr = process.communicate(input=input_text)
    return_code = process.returncode

    # 检查返回码
    if check and return_code != 0:
        logger.error(f"命令执行失败: {' '.join(args)}")
        logger.error(f"错误输出: {stderr}")
        raise subprocess.CalledProcessError(return_code, args, stdout, stderr)

    return return_code, stdout, stderr


def stream_command(
    command: Sequence[str],
    cwd: Optional[PathLike] = None,
    stdout: Optional[IO] = None,
) -> int:
    """
    运行外部命令，输出直接交给终端（或指定的文件），只返回退出码

    非零退出码不会抛出异常，由调用方决定如何处理。
    """
    args = [str(arg) for arg in command]
    logger.debug(f"执行命令: {' '.join(args)}")
    return subprocess.call(args, cwd=str(cwd) if cwd else None, stdout=stdout)


class CommandRunner:
    """外部命令执行器，便于在测试中替换"""

    def run(
        self,
        command: Sequence[str],
        cwd: Optional[PathLike] = None,
        input_text: Optional[str] = None,
    ) -> Tuple[int, str, str]:
        """执行命令并捕获输出"""
        return run_command(command, cwd=cwd, input_text=input_text)

    def stream(
        self,
        command: Sequence[str],
        cwd: Optional[PathLike] = None,
        stdout: Optional[IO] = None,
    ) -> int:
        """执行命令，输出实时显示"""
        return stream_command(command, cwd=cwd, stdout=stdout)


def split_names(value: Optional[Union[str, Sequence[str]]]) -> Tuple[str, ...]:
    """
    解析逗号分隔的名称列表

    Args:
        value: 逗号分隔的字符串，或字符串列表（每项也可包含逗号）

    Returns:
        Tuple[str, ...]: 去除空白后的名称，保持原顺序
    """
    if not value:
        return ()
    items: List[str] = [value] if isinstance(value, str) else list(value)
    names: List[str] = []
    for item in items:
        for name in str(item).split(","):
            name = name.strip()
            if name and name not in names:
                names.append(name)
    return tuple(names)


def unique_lines(output: str) -> List[str]:
    """按行拆分命令输出，去掉空行和重复项"""
    lines: List[str] = []
    for line in output.splitlines():
        line = line.strip()
        if line and line not in lines:
            lines.append(line)
    return lines
