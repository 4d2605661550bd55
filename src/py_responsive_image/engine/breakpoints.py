"""断点编排模块。

把断点配置展开成渲染任务（含 _x2 双倍分辨率任务），并发执行并汇总为结果集合。
"""

from collections.abc import Callable

from ..core.variant_renderer import render_variant
from ..core.watermark import WatermarkLayer, synthesize_watermark
from ..models.generation_config import GenerationConfig, RenderJob
from ..models.variant import SourceImage, VariantCollection, VariantDescriptor
from ..utils.logging_helpers import get_logger
from .concurrent_executor import ConcurrentExecutor


logger = get_logger()

X2_SUFFIX = "_x2"


class BreakpointOrchestrator:
    """断点编排器

    单次调用内的状态只有进行中的任务，调用结束即释放。
    """

    def __init__(
        self,
        executor_factory: Callable[[GenerationConfig], ConcurrentExecutor] | None = None,
    ):
        """初始化断点编排器

        Args:
            executor_factory: 根据配置创建并发执行器，默认按 max_workers/job_timeout 创建
        """
        self.executor_factory = executor_factory or _default_executor

    def generate_variants(
        self, source: SourceImage, config: GenerationConfig
    ) -> VariantCollection:
        """生成全部响应式变体

        Args:
            source: 源图
            config: 生成配置

        Returns:
            VariantCollection: 每个断点一个变体，x2 断点额外一个；未启用时为空

        Raises:
            ResponsiveImageError: 任一任务失败时整体失败，不返回部分结果
        """
        if not config.responsive_dimensions:
            logger.debug(f"未启用响应式尺寸，跳过 {source.name}")
            return VariantCollection()

        # 水印只合成一次，所有任务共享
        watermark = None
        if spec := config.watermark:
            watermark = synthesize_watermark(spec.text, spec.color, spec.position)

        jobs = self.build_jobs(source, config)
        logger.info(f"开始生成 {source.name} 的 {len(jobs)} 个变体")

        executor = self.executor_factory(config)
        variants = executor.execute_tasks(
            jobs,
            lambda job: self._generate_breakpoint(job, source, config, watermark),
        )

        collection = VariantCollection(variants=variants)
        logger.info(f"{source.name}: {collection.get_summary()}")
        return collection

    def build_jobs(
        self, source: SourceImage, config: GenerationConfig
    ) -> list[RenderJob]:
        """展开断点为渲染任务，x2 任务排在所有普通任务之后"""
        x1_jobs = []
        x2_jobs = []
        for breakpoint in config.formats:
            x1_jobs.append(RenderJob.create(breakpoint.name, breakpoint, source))
            if breakpoint.x2:
                x2_jobs.append(
                    RenderJob.create(
                        f"{breakpoint.name}{X2_SUFFIX}", breakpoint.doubled(), source
                    )
                )
        return [*x1_jobs, *x2_jobs]

    def _generate_breakpoint(
        self,
        job: RenderJob,
        source: SourceImage,
        config: GenerationConfig,
        watermark: WatermarkLayer | None,
    ) -> VariantDescriptor:
        """渲染单个断点"""
        file = render_variant(
            source,
            job.breakpoint,
            quality=config.quality,
            progressive=config.progressive,
            auto_orientation=config.auto_orientation,
            watermark=watermark,
            output=job.output,
        )
        return VariantDescriptor(key=job.key, file=file)


def _default_executor(config: GenerationConfig) -> ConcurrentExecutor:
    return ConcurrentExecutor(
        max_workers=config.max_workers, job_timeout=config.job_timeout
    )
