"""图像处理相关常量定义。

输出格式、锚点方位和缩放模式的统一定义，避免硬编码重复。
"""

from enum import Enum
from typing import Final

from PIL import Image


class OutputFormat(str, Enum):
    """可转换的目标格式（配置中的 convertToFormat）"""

    JPG = "jpg"
    PNG = "png"
    WEBP = "webp"
    AVIF = "avif"


class Gravity(str, Enum):
    """九宫格锚点方位"""

    NORTH = "north"
    NORTHEAST = "northeast"
    EAST = "east"
    SOUTHEAST = "southeast"
    SOUTH = "south"
    SOUTHWEST = "southwest"
    WEST = "west"
    NORTHWEST = "northwest"
    CENTER = "center"

    @classmethod
    def _missing_(cls, value: object) -> "Gravity | None":
        # 兼容 "centre" 以及 "top-left" 一类的 CSS 写法
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower().replace("_", " ").replace("-", " ")
        return GRAVITY_ALIASES.get(normalized)

    @property
    def factors(self) -> tuple[float, float]:
        """锚点对应的水平、垂直对齐系数（0 左/上，0.5 居中，1 右/下）"""
        return GRAVITY_FACTORS[self]


class FitMode(str, Enum):
    """同时指定宽高时的缩放模式"""

    COVER = "cover"  # 等比缩放后裁剪，填满目标尺寸
    CONTAIN = "contain"  # 等比缩放后留边，完整包含
    FILL = "fill"  # 拉伸到目标尺寸
    INSIDE = "inside"  # 等比缩放到不超过目标尺寸
    OUTSIDE = "outside"  # 等比缩放到不小于目标尺寸，不裁剪


GRAVITY_FACTORS: Final[dict[Gravity, tuple[float, float]]] = {
    Gravity.NORTH: (0.5, 0.0),
    Gravity.NORTHEAST: (1.0, 0.0),
    Gravity.EAST: (1.0, 0.5),
    Gravity.SOUTHEAST: (1.0, 1.0),
    Gravity.SOUTH: (0.5, 1.0),
    Gravity.SOUTHWEST: (0.0, 1.0),
    Gravity.WEST: (0.0, 0.5),
    Gravity.NORTHWEST: (0.0, 0.0),
    Gravity.CENTER: (0.5, 0.5),
}

GRAVITY_ALIASES: Final[dict[str, Gravity]] = {
    "centre": Gravity.CENTER,
    "top": Gravity.NORTH,
    "right top": Gravity.NORTHEAST,
    "top right": Gravity.NORTHEAST,
    "right": Gravity.EAST,
    "right bottom": Gravity.SOUTHEAST,
    "bottom right": Gravity.SOUTHEAST,
    "bottom": Gravity.SOUTH,
    "left bottom": Gravity.SOUTHWEST,
    "bottom left": Gravity.SOUTHWEST,
    "left": Gravity.WEST,
    "left top": Gravity.NORTHWEST,
    "top left": Gravity.NORTHWEST,
}


class ImageFormats:
    """基于 Pillow 的格式映射"""

    # 目标格式到 Pillow 编码器名称
    PILLOW_NAMES: Final[dict[str, str]] = {
        "jpg": "JPEG",
        "png": "PNG",
        "webp": "WEBP",
        "avif": "AVIF",
    }

    # 扩展名别名
    EXTENSION_ALIASES: Final[dict[str, str]] = {
        "jpeg": "jpg",
        "jpe": "jpg",
        "jfif": "jpg",
    }

    # 只定义 Pillow 未提供的特殊 MIME 类型
    SPECIAL_MIME_TYPES: Final[dict[str, str]] = {
        "JPG": "image/jpeg",
        "SVG": "image/svg+xml",
        "TIF": "image/tiff",
    }

    # 可以被尺寸优化的格式（Pillow 格式名）
    OPTIMIZABLE_FORMATS: Final[set[str]] = {"JPEG", "PNG", "WEBP", "TIFF", "AVIF"}

    # 视为图片的格式，SVG 由 MIME 或扩展名判断
    IMAGE_FORMATS: Final[set[str]] = OPTIMIZABLE_FORMATS | {"GIF"}

    @classmethod
    def get_mime_type(cls, format_name: str) -> str:
        """获取格式的 MIME 类型，优先使用 Pillow 注册信息"""
        format_upper = format_name.upper().lstrip(".")

        # 先检查特殊映射
        if format_upper in cls.SPECIAL_MIME_TYPES:
            return cls.SPECIAL_MIME_TYPES[format_upper]

        if mime := Image.MIME.get(format_upper):
            return mime

        # 使用标准映射
        return f"image/{format_upper.lower()}"

    @classmethod
    def is_supported(cls, pillow_name: str) -> bool:
        """检查当前 Pillow 构建是否能编码该格式"""
        # Image.SAVE 在插件首次加载前不完整
        Image.init()
        return pillow_name.upper() in Image.SAVE


# 便捷访问函数
def normalize_extension(ext: str | None) -> str | None:
    """把扩展名规范成目标格式名（".JPEG" -> "jpg"），无法识别返回 None"""
    if not ext:
        return None
    name = ext.lower().lstrip(".")
    name = ImageFormats.EXTENSION_ALIASES.get(name, name)
    return name if name in ImageFormats.PILLOW_NAMES else None


def get_pillow_format(format_name: str) -> str:
    """获取目标格式对应的 Pillow 编码器名称"""
    return ImageFormats.PILLOW_NAMES.get(format_name.lower(), format_name.upper())


def get_mime_type(format_or_ext: str) -> str:
    """获取格式或扩展名的 MIME 类型"""
    return ImageFormats.get_mime_type(format_or_ext)
