"""并发执行器模块。

提供有上限的并发任务执行：全部成功才返回，任一任务失败或超时即取消未开始的任务并抛出。
"""

import time
from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import TypeVar

from ..config import get_config
from ..exceptions import VariantTimeoutError, log_error
from ..models.generation_config import RenderJob
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()
R = TypeVar("R")


class ConcurrentExecutor:
    """通用并发执行器

    使用线程池：Pillow 在解码和编码时会释放 GIL，且任务共享只读的水印数据。
    """

    def __init__(
        self,
        max_workers: int = 4,
        job_timeout: float | None = None,
        poll_interval: float | None = None,
    ):
        """初始化并发执行器

        Args:
            max_workers: 最大并发数
            job_timeout: 单个任务开始运行后的超时秒数，None 不限制
            poll_interval: 检查超时的间隔秒数
        """
        self.max_workers = max_workers
        self.job_timeout = job_timeout
        self.poll_interval = (
            poll_interval or get_config().concurrency.POLL_INTERVAL_SECONDS
        )

    def execute_tasks(
        self,
        jobs: Sequence[RenderJob],
        task_function: Callable[[RenderJob], R],
    ) -> list[R]:
        """执行并发任务

        Args:
            jobs: 渲染任务列表
            task_function: 要执行的任务函数

        Returns:
            list: 与 jobs 顺序一致的结果

        Raises:
            首个失败任务的异常，或 VariantTimeoutError
        """
        if not jobs:
            return []

        started: dict[str, float] = {}

        def run(job: RenderJob) -> R:
            started[job.key] = time.monotonic()
            return task_function(job)

        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(jobs)),
            thread_name_prefix="variant",
        )
        future_to_job: dict[Future, RenderJob] = {}
        try:
            # 提交任务阶段
            for job in jobs:
                future_to_job[executor.submit(run, job)] = job
                logger.debug(f"已提交变体任务: {job.key}")

            # 收集结果阶段
            self._wait_all(future_to_job, started)
        except BaseException:
            # 未开始的任务直接取消，运行中的任务在后台结束
            executor.shutdown(wait=False, cancel_futures=True)
            raise

        executor.shutdown(wait=True)
        return [future.result() for future in future_to_job]

    def _wait_all(
        self, future_to_job: dict[Future, RenderJob], started: dict[str, float]
    ) -> None:
        """等待全部任务完成，任一失败或超时立即抛出"""
        pending = set(future_to_job)
        while pending:
            done, pending = wait(
                pending, timeout=self.poll_interval, return_when=FIRST_EXCEPTION
            )
            for future in done:
                job = future_to_job[future]
                if (error := future.exception()) is not None:
                    log_error("变体任务", job.key, error)
                    raise error
                logger.debug(f"变体任务完成: {job.key}")

            self._check_timeouts(pending, future_to_job, started)

    def _check_timeouts(
        self,
        pending: set[Future],
        future_to_job: dict[Future, RenderJob],
        started: dict[str, float],
    ) -> None:
        """检查运行中的任务是否超时"""
        if self.job_timeout is None:
            return

        now = time.monotonic()
        for future in pending:
            job = future_to_job[future]
            start = started.get(job.key)
            if start is not None and now - start > self.job_timeout:
                message = MessageFormatter.job_timeout(job.key, self.job_timeout)
                logger.error(message)
                raise VariantTimeoutError(message, job.key)
