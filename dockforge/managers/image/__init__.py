"""Docker镜像管理相关功能模块

该子包包含镜像管理相关的各个功能模块，如过滤、标签推导、构建、保存、推送、清理等。
"""

from .base import (
    AggregateFailureError,
    BuildOutcome,
    DockforgeError,
    ImageBuildError,
    ImageOperationError,
    ImagePushError,
    ImageSaveError,
    LoginError,
    NoDefinitionsError,
    RunResult,
)
from .build import ImageBuilder, build_command
from .cleanup import ImageCleaner
from .failures import FailureAggregator
from .filter import filter_definitions
from .push import ImagePusher, RegistrySession
from .save import ImageSaver
from .tag import BuildContext, ImageTagger, derive_tags

__all__ = [
    "AggregateFailureError",
    "BuildContext",
    "BuildOutcome",
    "DockforgeError",
    "FailureAggregator",
    "ImageBuildError",
    "ImageBuilder",
    "ImageCleaner",
    "ImageOperationError",
    "ImagePushError",
    "ImagePusher",
    "ImageSaveError",
    "ImageSaver",
    "ImageTagger",
    "LoginError",
    "NoDefinitionsError",
    "RegistrySession",
    "RunResult",
    "build_command",
    "derive_tags",
    "filter_definitions",
]
