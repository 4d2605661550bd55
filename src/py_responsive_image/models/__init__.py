"""数据模型包。

定义源图、断点、生成配置和变体结果等数据结构。
"""

from .constants import (
    FitMode,
    Gravity,
    ImageFormats,
    OutputFormat,
    get_mime_type,
    get_pillow_format,
    normalize_extension,
)
from .generation_config import (
    BreakpointSpec,
    GenerationConfig,
    OutputMeta,
    RenderJob,
    WatermarkSpec,
    default_breakpoints,
)
from .variant import (
    ImageProbe,
    SourceImage,
    VariantCollection,
    VariantDescriptor,
    VariantFile,
    bytes_to_kbytes,
)


__all__ = [
    # 核心模型
    "BreakpointSpec",
    "FitMode",
    "GenerationConfig",
    "Gravity",
    "ImageFormats",
    "ImageProbe",
    "OutputFormat",
    "OutputMeta",
    "RenderJob",
    "SourceImage",
    "VariantCollection",
    "VariantDescriptor",
    "VariantFile",
    "WatermarkSpec",
    # 常量和工具
    "bytes_to_kbytes",
    "default_breakpoints",
    "get_mime_type",
    "get_pillow_format",
    "normalize_extension",
]
