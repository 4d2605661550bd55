"""响应式图像变体生成库。

基于 Pillow 为一张上传图片生成多个断点尺寸的变体，支持格式转换、
双倍分辨率和文字水印。
"""

__version__ = "0.1.0"
__description__ = "响应式图像变体生成库，基于 Pillow 11"

# 核心功能导出
from .core.color import rgba_to_hex
from .engine.breakpoints import BreakpointOrchestrator
from .exceptions import (
    EncodingError,
    ImageIOError,
    InvalidColorFormat,
    RenderError,
    ResponsiveImageError,
    UnsupportedFormatError,
    ValidationError,
    VariantTimeoutError,
)
from .models import (
    BreakpointSpec,
    GenerationConfig,
    SourceImage,
    VariantCollection,
    VariantDescriptor,
    VariantFile,
)
from .service import ImageManipulationService, ResponsiveImageService


__all__ = [
    "BreakpointOrchestrator",
    "BreakpointSpec",
    "EncodingError",
    "GenerationConfig",
    "ImageIOError",
    "ImageManipulationService",
    "InvalidColorFormat",
    "RenderError",
    "ResponsiveImageError",
    "ResponsiveImageService",
    "SourceImage",
    "UnsupportedFormatError",
    "ValidationError",
    "VariantCollection",
    "VariantDescriptor",
    "VariantFile",
    "VariantTimeoutError",
    "get_version",
    "rgba_to_hex",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
