"""失败汇总"""

from loguru import logger

from .base import AggregateFailureError, DockforgeError, RunResult


class FailureAggregator:
    """根据 continue_on_failure 决定失败是立即终止还是延后汇总"""

    def __init__(self, continue_on_failure: bool = False) -> None:
        self.continue_on_failure = continue_on_failure

    def handle(self, error: DockforgeError, result: RunResult) -> None:
        """
        处理一次失败

        Args:
            error: 失败对应的异常
            result: 本次运行结果

        Raises:
            DockforgeError: 不可恢复或未开启 continue_on_failure 时原样抛出
        """
        if not error.recoverable or not self.continue_on_failure:
            raise error
        logger.error(f"{error}，继续处理其余镜像")
        result.failures.append(str(error))
        image_name = getattr(error, "image_name", None)
        if image_name and image_name not in result.failed_images:
            result.failed_images.append(image_name)

    def check(self, result: RunResult) -> RunResult:
        """
        运行结束时检查是否有被延后的失败

        Raises:
            AggregateFailureError: 存在失败时抛出
        """
        if result.failures:
            raise AggregateFailureError(result.failures, result)
        return result
