"""镜像管理基础类型定义"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence

from ...constants import ERROR_MESSAGES

if TYPE_CHECKING:
    from .tag import BuildContext


class DockforgeError(Exception):
    """所有运行期错误的基类"""

    # 可恢复的错误在 continue_on_failure 时会被收集而不是立即终止
    recoverable: bool = False


class NoDefinitionsError(DockforgeError):
    """过滤后没有镜像定义"""
    pass


class LoginError(DockforgeError):
    """仓库登录失败，始终立即终止"""
    pass


class ImageOperationError(DockforgeError):
    """单个镜像的外部命令执行失败"""

    recoverable = True

    def __init__(self, message: str, image_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.image_name = image_name


class ImageBuildError(ImageOperationError):
    """镜像构建错误"""
    pass


class ImageSaveError(ImageOperationError):
    """镜像保存错误"""
    pass


class ImagePushError(ImageOperationError):
    """镜像推送错误"""
    pass


@dataclass
class BuildOutcome:
    """单个镜像的构建结果"""

    name: str
    tags_applied: List[str] = field(default_factory=list)
    succeeded: bool = True
    error_message: Optional[str] = None


@dataclass
class RunResult:
    """一次运行的汇总结果，在构建、保存、发布阶段之间传递"""

    outcomes: List[BuildOutcome] = field(default_factory=list)
    saved: List[Path] = field(default_factory=list)
    pushed: List[str] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)
    failed_images: List[str] = field(default_factory=list)
    context: Optional["BuildContext"] = None

    def outcome_for(self, name: str) -> Optional[BuildOutcome]:
        """获取指定镜像最近一次的构建结果"""
        for outcome in reversed(self.outcomes):
            if outcome.name == name:
                return outcome
        return None


class AggregateFailureError(DockforgeError):
    """运行结束时汇总所有被延后的失败"""

    def __init__(self, failures: Sequence[str], result: Optional[RunResult] = None) -> None:
        self.failures = list(failures)
        self.result = result
        lines = [ERROR_MESSAGES["run_failed"]] + [f"- {failure}" for failure in self.failures]
        super().__init__("\n".join(lines))
