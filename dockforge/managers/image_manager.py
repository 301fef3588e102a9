"""镜像管理器类 - 门面模式实现，按顺序驱动过滤、构建、保存、发布和清理"""

import shutil
from typing import Iterator, List, Optional, Sequence

from loguru import logger

from ..utils import CommandRunner
from .base_manager import BaseManager
from .config_manager import ImageDefinition, ProjectSettings, RunOptions
from .image.base import ImagePushError, ImageSaveError, RunResult
from .image.build import ImageBuilder
from .image.cleanup import ImageCleaner
from .image.failures import FailureAggregator
from .image.filter import filter_definitions
from .image.push import ImagePusher, RegistrySession
from .image.save import ImageSaver
from .image.tag import ImageTagger


class ImageManager(BaseManager):
    """镜像管理器类，一次运行中顺序处理所有镜像定义"""

    def __init__(
        self,
        definitions: Sequence[ImageDefinition],
        options: RunOptions,
        settings: ProjectSettings,
        runner: Optional[CommandRunner] = None,
    ) -> None:
        """
        初始化镜像管理器

        Args:
            definitions: 全部镜像定义，按配置顺序
            options: 运行选项
            settings: 项目设置
            runner: 外部命令执行器，默认使用subprocess
        """
        super().__init__(runner, settings.docker_binary)
        self.definitions = list(definitions)
        self.options = options
        self.settings = settings

        # 初始化子组件
        self.tagger = ImageTagger(self.runner, settings.project_dir, settings.git_binary)
        self.builder = ImageBuilder(self.tagger, settings.image_tag_dir, self.runner, self.docker_binary)
        self.saver = ImageSaver(settings.images_dir, self.runner, self.docker_binary)
        self.pusher = ImagePusher(self.runner, self.docker_binary)
        self.cleaner = ImageCleaner(self.runner, self.docker_binary)
        self.session = RegistrySession(options.registry, self.runner, self.docker_binary)
        self.failures = FailureAggregator(options.continue_on_failure)

    def select_definitions(self) -> List[ImageDefinition]:
        """
        应用包含/排除规则

        Raises:
            NoDefinitionsError: 过滤结果为空时抛出
        """
        return filter_definitions(self.definitions, self.options.include_names, self.options.exclude_names)

    def run(self, save: bool = False, publish: bool = False, build_timestamp: Optional[str] = None) -> RunResult:
        """
        执行一次完整运行：登录、构建、（保存）、（发布）、清理、登出、汇总失败

        所有阶段共享同一个RunResult，失败在最后统一检查。

        Args:
            save: 构建后是否保存镜像为TAR文件
            publish: 构建后是否推送镜像
            build_timestamp: 指定构建时间戳，默认为当前UTC时间

        Returns:
            RunResult: 运行结果

        Raises:
            NoDefinitionsError: 没有可处理的镜像定义
            LoginError: 仓库登录失败
            ImageOperationError: 未开启 continue_on_failure 时第一个失败的镜像操作
            AggregateFailureError: 开启 continue_on_failure 且存在失败
        """
        result = RunResult()
        definitions = self.select_definitions()
        result.context = self.tagger.create_context(self.settings.project_version, build_timestamp)

        self.session.login()

        self.build_images(definitions, result)
        if save:
            self.save_images(definitions, result)
        if publish:
            self.publish_images(definitions, result)

        if self.options.remove_dangling_images:
            self.cleaner.remove_dangling_images()

        self.session.logout()
        return self.failures.check(result)

    def build_images(self, definitions: Sequence[ImageDefinition], result: RunResult) -> RunResult:
        """
        按顺序构建镜像

        Args:
            definitions: 过滤后的镜像定义
            result: 本次运行结果，需已包含版本信息

        Returns:
            RunResult: 运行结果
        """
        if result.context is None:
            result.context = self.tagger.create_context(self.settings.project_version)
        self._reset_tag_dir()

        total = len(definitions)
        for index, definition in enumerate(definitions, start=1):
            logger.warning("=" * 80)
            logger.warning(f"构建镜像 {index}/{total}: {definition.name} 来自 {definition.source_file}")
            logger.warning("=" * 80)

            outcome = self.builder.build(definition, result.context)
            result.outcomes.append(outcome)

            if not outcome.succeeded:
                self.failures.handle(ImageBuilder.as_error(outcome), result)
                continue

            if self.options.delete_older_images:
                self.cleaner.remove_older_images(definition.name)

        return result

    def save_images(self, definitions: Sequence[ImageDefinition], result: RunResult) -> RunResult:
        """将构建成功的镜像保存为TAR文件"""
        for definition in self._buildable(definitions, result):
            try:
                result.saved.append(self.saver.save(definition, self.settings.project_version))
            except ImageSaveError as e:
                self.failures.handle(e, result)
        return result

    def publish_images(self, definitions: Sequence[ImageDefinition], result: RunResult) -> RunResult:
        """将构建成功的镜像推送到仓库"""
        for definition in self._buildable(definitions, result):
            try:
                result.pushed.append(self.pusher.push(definition, self.settings.project_version))
            except ImagePushError as e:
                self.failures.handle(e, result)
        return result

    def _buildable(self, definitions: Sequence[ImageDefinition], result: RunResult) -> Iterator[ImageDefinition]:
        """跳过本次运行中构建失败的镜像"""
        for definition in definitions:
            outcome = result.outcome_for(definition.name)
            if outcome is not None and not outcome.succeeded:
                logger.warning(f"镜像 {definition.name} 构建失败，跳过")
                continue
            yield definition

    def _reset_tag_dir(self) -> None:
        """清空并重新创建镜像版本记录目录"""
        tag_dir = self.settings.image_tag_dir
        if tag_dir.exists():
            shutil.rmtree(tag_dir)
        tag_dir.mkdir(parents=True, exist_ok=True)
