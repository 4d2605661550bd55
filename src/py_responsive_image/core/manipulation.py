"""基础图像处理模块。

上传流程中与断点无关的图像操作：元数据读取、类型判断、缩略图和体积优化。
"""

from pathlib import Path

from humanize import naturalsize

from ..config import get_config
from ..models.constants import FitMode
from ..models.generation_config import BreakpointSpec, OutputMeta, RenderJob
from ..models.variant import (
    ImageProbe,
    SourceImage,
    VariantDescriptor,
    VariantFile,
)
from ..utils.logging_helpers import get_logger
from .image_info import ImageInfoExtractor
from .variant_renderer import render_variant
from .watermark import WatermarkLayer


logger = get_logger()

THUMBNAIL_KEY = "thumbnail"

AnyImageFile = SourceImage | VariantFile


class BaseImageManipulation:
    """基础图像处理

    所有方法都通过 ``get_stream()`` 重新打开文件，不持有任何流。
    """

    def __init__(self, info_extractor: ImageInfoExtractor | None = None):
        self.info_extractor = info_extractor or ImageInfoExtractor()

    def get_metadata(self, file: AnyImageFile) -> ImageProbe:
        """读取宽高、格式、字节数等元数据"""
        return self.info_extractor.probe(file.get_stream)

    def get_dimensions(
        self, file: AnyImageFile, auto_orientation: bool = False
    ) -> tuple[int, int]:
        """读取宽高

        Raises:
            ImageIOError: 文件无法读取或不是图片
        """
        return self.info_extractor.dimensions(file.get_stream, auto_orientation)

    def is_image(self, file: AnyImageFile) -> bool:
        """是否为图片，SVG 按 MIME 或扩展名判断"""
        if file.mime == "image/svg+xml" or file.ext.lower() == ".svg":
            return True
        return self.info_extractor.is_image(file.get_stream)

    def is_optimizable_image(self, file: AnyImageFile) -> bool:
        """是否为可优化的位图格式"""
        return self.info_extractor.is_optimizable(file.get_stream)

    def resize(
        self,
        file: SourceImage,
        key: str,
        breakpoint: BreakpointSpec,
        quality: int,
        progressive: bool = False,
        auto_orientation: bool = False,
        watermark: WatermarkLayer | None = None,
    ) -> VariantDescriptor:
        """按单个断点生成变体"""
        job = RenderJob.create(key, breakpoint, file)
        variant = render_variant(
            file,
            job.breakpoint,
            quality=quality,
            progressive=progressive,
            auto_orientation=auto_orientation,
            watermark=watermark,
            output=job.output,
        )
        return VariantDescriptor(key=job.key, file=variant)

    def generate_thumbnail(
        self,
        file: SourceImage,
        quality: int | None = None,
        progressive: bool = False,
        auto_orientation: bool = False,
    ) -> VariantDescriptor | None:
        """生成缩略图

        只有源图宽或高超过缩略图尺寸时才生成，否则返回 None。
        """
        settings = get_config().render
        width, height = self.get_dimensions(file, auto_orientation)
        if width <= settings.THUMBNAIL_WIDTH and height <= settings.THUMBNAIL_HEIGHT:
            logger.debug(f"{file.name} 尺寸 {width}x{height} 无需缩略图")
            return None

        breakpoint = BreakpointSpec(
            name=THUMBNAIL_KEY,
            width=settings.THUMBNAIL_WIDTH,
            height=settings.THUMBNAIL_HEIGHT,
            fit=FitMode.INSIDE,
            without_enlargement=True,
        )
        return self.resize(
            file,
            THUMBNAIL_KEY,
            breakpoint,
            quality=quality or settings.QUALITY,
            progressive=progressive,
            auto_orientation=auto_orientation,
        )

    def optimize(
        self,
        file: SourceImage,
        size_optimization: bool = True,
        auto_orientation: bool = False,
        quality: int | None = None,
        progressive: bool = False,
    ) -> SourceImage | VariantFile:
        """按原格式重新编码以减小体积

        优化后文件变大时返回原文件。

        Returns:
            优化后的文件，或未处理/回退时的原文件
        """
        if not (size_optimization or auto_orientation):
            return file
        if not self.is_optimizable_image(file):
            logger.debug(f"{file.name} 不是可优化的格式，跳过优化")
            return file

        original = self.get_metadata(file)
        width, _ = self.get_dimensions(file, auto_orientation)
        file_path = Path(file.tmp_working_directory) / f"optimized_{file.hash}"

        optimized = render_variant(
            file,
            BreakpointSpec(name="optimized", width=width),
            quality=quality or get_config().render.QUALITY,
            progressive=progressive,
            auto_orientation=auto_orientation,
            watermark=None,
            output=OutputMeta(name=file.name, hash=file.hash, ext=file.ext),
            file_path=file_path,
        )

        optimized_size = optimized.file_path.stat().st_size
        if optimized_size > original.size:
            logger.warning(
                f"{file.name} 优化后变大 "
                f"({naturalsize(original.size)} → {naturalsize(optimized_size)})，保留原文件"
            )
            return file

        return optimized
