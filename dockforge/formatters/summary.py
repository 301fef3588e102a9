"""运行结果格式化模块"""

from typing import Sequence

from loguru import logger

from ..managers.config_manager import ImageDefinition
from ..managers.image.base import RunResult


def format_run_summary(result: RunResult) -> None:
    """格式化并显示运行结果

    Args:
        result: 运行结果
    """
    logger.info("运行结果:")
    if result.context is not None:
        logger.info(f"  仓库版本: {result.context.repository_version}")
        logger.info(f"  项目版本: {result.context.project_version}")

    for outcome in result.outcomes:
        if outcome.succeeded:
            logger.success(f"  {outcome.name}: 构建成功 ({len(outcome.tags_applied)} 个标签)")
        else:
            logger.error(f"  {outcome.name}: {outcome.error_message}")

    for archive in result.saved:
        logger.info(f"  已保存: {archive}")
    for reference in result.pushed:
        logger.info(f"  已推送: {reference}")

    if result.failures:
        logger.error(f"  失败 {len(result.failures)} 项")
    if result.failed_images:
        logger.error(f"  失败的镜像: {', '.join(result.failed_images)}")


def format_definitions(definitions: Sequence[ImageDefinition]) -> None:
    """显示镜像定义列表

    Args:
        definitions: 镜像定义
    """
    logger.info("镜像定义:")
    for definition in definitions:
        logger.info(f"\n- {definition.name}:")
        logger.info(f"  Dockerfile: {definition.source_file}")
        logger.info(f"  构建上下文: {definition.effective_context_dir}")
        if definition.tags:
            logger.info(f"  自定义标签: {', '.join(definition.tags)}")
        if definition.target:
            logger.info(f"  构建阶段: {definition.target}")
        if definition.build_args:
            logger.info(f"  额外参数: {' '.join(definition.build_args)}")
