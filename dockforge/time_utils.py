"""时间工具函数模块"""

from datetime import datetime, timezone
from typing import Optional


def get_build_timestamp(now: Optional[datetime] = None) -> str:
    """
    获取UTC构建时间戳，ISO-8601格式，精确到毫秒，例如 2024-05-01T02:03:04.567Z

    Args:
        now: 指定时间，默认为当前时间

    Returns:
        格式化的时间戳字符串
    """
    now = now or datetime.now(timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def timestamp_tag(timestamp: str) -> str:
    """去掉时间戳中的冒号，使其可以用作镜像标签"""
    return timestamp.replace(":", "")
