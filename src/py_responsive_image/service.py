"""响应式图像服务接口。

``ImageManipulationService`` 描述上传流程需要的全部图像能力；
``ResponsiveImageService`` 组合基础图像处理与断点编排器实现该接口，
生成配置在构造时显式传入。
"""

from typing import Any, Protocol, runtime_checkable

from .core.manipulation import AnyImageFile, BaseImageManipulation
from .engine.breakpoints import BreakpointOrchestrator
from .models import (
    BreakpointSpec,
    GenerationConfig,
    ImageProbe,
    SourceImage,
    VariantCollection,
    VariantDescriptor,
    VariantFile,
)
from .utils.logging_helpers import get_logger


logger = get_logger()


@runtime_checkable
class ImageManipulationService(Protocol):
    """上传流程使用的图像处理能力"""

    def get_metadata(self, file: AnyImageFile) -> ImageProbe: ...

    def get_dimensions(self, file: AnyImageFile) -> tuple[int, int]: ...

    def is_image(self, file: AnyImageFile) -> bool: ...

    def is_optimizable_image(self, file: AnyImageFile) -> bool: ...

    def resize(
        self, file: SourceImage, key: str, breakpoint: BreakpointSpec
    ) -> VariantDescriptor: ...

    def generate_thumbnail(self, file: SourceImage) -> VariantDescriptor | None: ...

    def optimize(self, file: SourceImage) -> SourceImage | VariantFile: ...

    def generate_responsive_formats(self, file: SourceImage) -> VariantCollection: ...


class ResponsiveImageService:
    """响应式图像服务

    基础能力委托给 ``BaseImageManipulation``，响应式变体委托给 ``BreakpointOrchestrator``。

    Examples:
        >>> config = GenerationConfig.from_settings(
        ...     {"responsiveDimensions": True},
        ...     {"formats": [{"name": "small", "width": 500, "x2": True}]},
        ... )
        >>> service = ResponsiveImageService(config)
        >>> source = SourceImage.from_file("photo.jpg", "/tmp/uploads")
        >>> sorted(service.generate_responsive_formats(source).keys())
        ['small', 'small_x2']
    """

    def __init__(
        self,
        config: GenerationConfig | None = None,
        base: BaseImageManipulation | None = None,
        orchestrator: BreakpointOrchestrator | None = None,
    ):
        """初始化服务

        Args:
            config: 生成配置，默认全部使用默认值（响应式生成关闭）
            base: 基础图像处理实现
            orchestrator: 断点编排器
        """
        self.config = config or GenerationConfig()
        self.base = base or BaseImageManipulation()
        self.orchestrator = orchestrator or BreakpointOrchestrator()

        logger.debug("初始化响应式图像服务")

    @classmethod
    def from_settings(
        cls,
        upload_settings: dict[str, Any] | None = None,
        responsive_settings: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> "ResponsiveImageService":
        """由设置存储中的两组设置创建服务"""
        config = GenerationConfig.from_settings(upload_settings, responsive_settings)
        return cls(config, **kwargs)

    def get_metadata(self, file: AnyImageFile) -> ImageProbe:
        """读取图片元数据"""
        return self.base.get_metadata(file)

    def get_dimensions(self, file: AnyImageFile) -> tuple[int, int]:
        """读取宽高，按配置决定是否考虑 EXIF 方向"""
        return self.base.get_dimensions(file, self.config.auto_orientation)

    def is_image(self, file: AnyImageFile) -> bool:
        """是否为图片"""
        return self.base.is_image(file)

    def is_optimizable_image(self, file: AnyImageFile) -> bool:
        """是否为可优化的图片"""
        return self.base.is_optimizable_image(file)

    def resize(
        self, file: SourceImage, key: str, breakpoint: BreakpointSpec
    ) -> VariantDescriptor:
        """按单个断点生成变体，不加水印"""
        return self.base.resize(
            file,
            key,
            breakpoint,
            quality=self.config.quality,
            progressive=self.config.progressive,
            auto_orientation=self.config.auto_orientation,
        )

    def generate_thumbnail(self, file: SourceImage) -> VariantDescriptor | None:
        """生成缩略图"""
        return self.base.generate_thumbnail(
            file,
            quality=self.config.quality,
            progressive=self.config.progressive,
            auto_orientation=self.config.auto_orientation,
        )

    def optimize(self, file: SourceImage) -> SourceImage | VariantFile:
        """体积优化"""
        return self.base.optimize(
            file,
            size_optimization=True,
            auto_orientation=self.config.auto_orientation,
            quality=self.config.quality,
            progressive=self.config.progressive,
        )

    def generate_responsive_formats(self, file: SourceImage) -> VariantCollection:
        """生成全部响应式变体"""
        return self.orchestrator.generate_variants(file, self.config)
