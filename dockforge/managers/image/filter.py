"""镜像定义过滤"""

from typing import Iterable, List, Sequence

from loguru import logger

from ...constants import ERROR_MESSAGES
from ..config_manager import ImageDefinition
from .base import NoDefinitionsError


def filter_definitions(
    definitions: Sequence[ImageDefinition],
    include_names: Iterable[str] = (),
    exclude_names: Iterable[str] = (),
) -> List[ImageDefinition]:
    """
    按包含/排除名单过滤镜像定义，保持原有顺序

    包含名单为空表示不限制；排除名单总是生效。

    Args:
        definitions: 全部镜像定义
        include_names: 只构建这些镜像
        exclude_names: 跳过这些镜像

    Returns:
        List[ImageDefinition]: 过滤后的镜像定义

    Raises:
        NoDefinitionsError: 过滤结果为空时抛出
    """
    include = set(include_names)
    exclude = set(exclude_names)
    selected = list(definitions)

    if include:
        logger.info(f"只包含以下镜像: {sorted(include)}")
        selected = [definition for definition in selected if definition.name in include]

    if exclude:
        logger.info(f"排除以下镜像: {sorted(exclude)}")
        selected = [definition for definition in selected if definition.name not in exclude]

    if not selected:
        raise NoDefinitionsError(
            ERROR_MESSAGES["no_definitions"].format(sorted(include) or "全部", sorted(exclude) or "无")
        )

    logger.info(f"将处理以下镜像: {[definition.name for definition in selected]}")
    return selected
