"""图片信息探测器。

从可重复打开的流中读取尺寸、格式、字节数等元数据，不解码像素。
"""

from collections.abc import Callable
from typing import BinaryIO

from PIL import Image

from ..exceptions import handle_image_errors
from ..models.constants import ImageFormats
from ..models.variant import ImageProbe
from ..utils.logging_helpers import get_logger


logger = get_logger()

_EXIF_ORIENTATION = 0x0112


class ImageInfoExtractor:
    """图片信息提取器

    只读取文件头，适合在渲染后回读变体的最终尺寸。
    """

    @handle_image_errors("元数据探测")
    def probe(self, open_stream: Callable[[], BinaryIO]) -> ImageProbe:
        """探测图片元数据

        Args:
            open_stream: 返回新读取流的工厂

        Returns:
            ImageProbe: 宽高、格式、字节数等信息
        """
        with open_stream() as stream:
            size = _stream_size(stream)
            with Image.open(stream) as img:
                orientation = img.getexif().get(_EXIF_ORIENTATION)
                return ImageProbe(
                    width=img.width,
                    height=img.height,
                    format=img.format,
                    size=size,
                    has_alpha=_has_alpha(img),
                    orientation=int(orientation) if orientation else None,
                )

    @handle_image_errors("尺寸读取")
    def dimensions(
        self, open_stream: Callable[[], BinaryIO], auto_orientation: bool = False
    ) -> tuple[int, int]:
        """读取宽高，auto_orientation 时返回按 EXIF 方向旋转后的宽高"""
        probe = self.probe(open_stream)
        if auto_orientation and probe.orientation in (5, 6, 7, 8):
            return probe.height, probe.width
        return probe.width, probe.height

    def detect_format(self, open_stream: Callable[[], BinaryIO]) -> str | None:
        """识别图片格式，无法识别时返回 None"""
        try:
            with open_stream() as stream, Image.open(stream) as img:
                return img.format
        except Exception as e:
            logger.debug(f"无法识别图片格式: {e}")
            return None

    def is_optimizable(self, open_stream: Callable[[], BinaryIO]) -> bool:
        """是否为可做尺寸优化的格式"""
        return self.detect_format(open_stream) in ImageFormats.OPTIMIZABLE_FORMATS

    def is_image(self, open_stream: Callable[[], BinaryIO]) -> bool:
        """是否为可识别的图片格式"""
        return self.detect_format(open_stream) in ImageFormats.IMAGE_FORMATS


def _stream_size(stream: BinaryIO) -> int:
    """流的总字节数，读取位置恢复到开头"""
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(0)
    return size


def _has_alpha(img: Image.Image) -> bool:
    """检测图片是否有透明度"""
    if img.mode in ("RGBA", "LA", "PA", "RGBa", "La"):
        return True
    return "transparency" in img.info
