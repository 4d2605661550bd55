"""核心模块包。

颜色编解码、水印合成、变体渲染和基础图像处理。
"""

from .color import rgba_to_hex
from .formats import FormatProcessor, get_save_parameters
from .image_info import ImageInfoExtractor
from .manipulation import BaseImageManipulation
from .resize import anchor_offset, resize_to_breakpoint
from .variant_renderer import composite_watermark, render_variant
from .watermark import WatermarkLayer, render_markup, synthesize_watermark


__all__ = [
    "BaseImageManipulation",
    "FormatProcessor",
    "ImageInfoExtractor",
    "WatermarkLayer",
    "anchor_offset",
    "composite_watermark",
    "get_save_parameters",
    "render_markup",
    "render_variant",
    "resize_to_breakpoint",
    "rgba_to_hex",
    "synthesize_watermark",
]
