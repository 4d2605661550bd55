"""格式处理器模块。

为目标格式准备色彩模式，并生成各格式的编码参数。
"""

import math
from typing import Any

from PIL import Image

from ..exceptions import EncodingError
from ..models.constants import ImageFormats, get_pillow_format
from ..utils.logging_helpers import get_logger


logger = get_logger()


class FormatProcessor:
    """格式处理器 - 按目标格式调整图像色彩模式"""

    def prepare_for_format(self, img: Image.Image, pillow_format: str) -> Image.Image:
        """为目标格式准备图片

        Args:
            img: PIL图片对象
            pillow_format: Pillow 编码器名称

        Returns:
            Image.Image: 处理后的图片对象
        """
        match pillow_format:
            case "JPEG":
                return self._prepare_for_jpeg(img)
            case "PNG":
                return self._prepare_for_png(img)
            case "WEBP" | "AVIF":
                return self._prepare_for_rgb_or_rgba(img)
            case _:
                return img

    def _prepare_for_jpeg(self, img: Image.Image) -> Image.Image:
        """JPEG不支持透明度，透明区域合成到白色背景"""
        if img.mode == "P":
            if "transparency" not in img.info:
                return img.convert("RGB")
            img = img.convert("RGBA")

        if img.mode in ("RGBA", "LA", "PA"):
            img = img.convert("RGBA")
            background = Image.new("RGB", img.size, (255, 255, 255))
            background.paste(img, mask=img.getchannel("A"))
            return background

        if img.mode in ("RGB", "L", "CMYK"):
            return img

        # 其他模式转换为RGB
        return img.convert("RGB")

    def _prepare_for_png(self, img: Image.Image) -> Image.Image:
        """PNG支持多数模式，只处理CMYK等无法写入的模式"""
        if img.mode == "CMYK":
            return img.convert("RGB")
        if img.mode in ("1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"):
            return img
        return img.convert("RGBA")

    def _prepare_for_rgb_or_rgba(self, img: Image.Image) -> Image.Image:
        """WebP/AVIF只接受RGB和RGBA"""
        if img.mode in ("RGB", "RGBA"):
            return img
        if img.mode in ("LA", "PA") or "transparency" in img.info:
            return img.convert("RGBA")
        return img.convert("RGB")


def get_save_parameters(
    format_name: str | None, quality: int, progressive: bool
) -> dict[str, Any]:
    """获取保存参数

    Args:
        format_name: 目标格式（jpg/png/webp/avif），其他值不附加参数
        quality: 质量 1-100
        progressive: 是否渐进式编码

    Returns:
        dict: 传给 ``Image.save`` 的参数（不含 format）

    Raises:
        EncodingError: 质量越界或当前 Pillow 不支持该格式
    """
    if not isinstance(quality, int) or not (1 <= quality <= 100):
        raise EncodingError(f"质量参数必须在 1-100 之间，当前值: {quality}", "编码参数")

    if format_name is None:
        return {}

    pillow_format = get_pillow_format(format_name)
    if pillow_format in ImageFormats.PILLOW_NAMES.values() and not ImageFormats.is_supported(
        pillow_format
    ):
        raise EncodingError(f"当前 Pillow 不支持编码 {pillow_format}", "编码参数")

    match format_name:
        case "jpg":
            return get_jpeg_params(quality, progressive)
        case "png":
            return get_png_params(quality)
        case "webp":
            return get_webp_params(quality)
        case "avif":
            return get_avif_params(quality)
        case _:
            return {}


def get_jpeg_params(quality: int, progressive: bool) -> dict[str, Any]:
    """获取JPEG压缩参数，质量和渐进式直接透传"""
    return {"quality": quality, "progressive": progressive}


def get_png_params(quality: int) -> dict[str, Any]:
    """获取PNG压缩参数

    PNG 是无损格式，质量映射为压缩级别 ``floor(quality / 100 * 9)``，
    只影响压缩耗时与体积，不影响画质。
    """
    compress_level = math.floor(quality / 100 * 9)
    logger.debug(f"PNG 质量 {quality} 映射为压缩级别 {compress_level}")
    return {"compress_level": compress_level}


def get_webp_params(quality: int) -> dict[str, Any]:
    """获取WebP压缩参数"""
    return {"quality": quality}


def get_avif_params(quality: int) -> dict[str, Any]:
    """获取AVIF压缩参数"""
    return {"quality": quality}
