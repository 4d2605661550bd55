"""水印合成模块。

把水印文字渲染成带透明通道的独立 PNG 图层。文字先转换成
``<span foreground="#rrggbbaa">`` 标记，再由简易标记渲染器排版绘制。
"""

import io
import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from xml.sax.saxutils import escape, quoteattr

from PIL import Image, ImageColor, ImageDraw, ImageFont

from ..config import get_config
from ..exceptions import RenderError, handle_image_errors
from ..models.constants import Gravity
from ..utils.logging_helpers import get_logger
from .color import rgba_to_hex


logger = get_logger()

FontType = ImageFont.FreeTypeFont | ImageFont.ImageFont

# 未指定 foreground 时的文字颜色
DEFAULT_FOREGROUND = (0, 0, 0, 255)

# 找不到指定字体时依次尝试的字体
FALLBACK_FONTS = (
    "arial.ttf",
    "Arial.ttf",
    "DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
    "C:/Windows/Fonts/arial.ttf",
)


@dataclass(frozen=True)
class WatermarkLayer:
    """合成好的水印图层，只读，可被多个任务同时使用"""

    data: bytes
    position: Gravity

    def open(self) -> Image.Image:
        """解码为新的 RGBA 图像"""
        with Image.open(io.BytesIO(self.data)) as img:
            return img.convert("RGBA")


def build_markup(text: str, color: str) -> str:
    """生成带颜色的文字标记"""
    return f"<span foreground={quoteattr(rgba_to_hex(color))}>{escape(text)}</span>"


@handle_image_errors("水印合成", fallback=RenderError)
def synthesize_watermark(
    text: str,
    color: str,
    position: Gravity | str,
    padding: int | None = None,
) -> WatermarkLayer:
    """把水印文字渲染为透明 PNG 图层

    Args:
        text: 水印文字
        color: rgb()/rgba() 颜色
        position: 叠加锚点
        padding: 四周透明边距，默认 20 像素

    Returns:
        WatermarkLayer: PNG 数据和锚点

    Raises:
        InvalidColorFormat: 颜色不合法
        RenderError: 文字无法渲染
    """
    settings = get_config().render
    padding = settings.WATERMARK_PADDING if padding is None else padding

    markup = build_markup(text, color)
    glyphs = render_markup(markup)

    canvas = Image.new(
        "RGBA",
        (glyphs.width + padding * 2, glyphs.height + padding * 2),
        (0, 0, 0, 0),
    )
    canvas.paste(glyphs, (padding, padding))

    buffer = io.BytesIO()
    canvas.save(buffer, format="PNG")
    logger.debug(f"水印图层已生成: {canvas.size}, 锚点 {Gravity(position).value}")
    return WatermarkLayer(data=buffer.getvalue(), position=Gravity(position))


def render_markup(
    markup: str,
    font_name: str | None = None,
    dpi: int | None = None,
    size_pt: float | None = None,
) -> Image.Image:
    """渲染文字标记为紧贴文字的 RGBA 图像

    支持 ``<span foreground="...">`` 嵌套和换行，未着色的文字为黑色。
    """
    settings = get_config().render
    pixels = _font_pixels(
        size_pt or settings.WATERMARK_FONT_SIZE_PT, dpi or settings.WATERMARK_DPI
    )
    font = load_font(font_name or settings.WATERMARK_FONT, pixels)
    lines = _layout_lines(parse_markup(markup))

    ascent, descent = _font_metrics(font)
    line_height = ascent + descent
    widths = [
        math.ceil(sum(font.getlength(text) for text, _ in line)) for line in lines
    ]
    width, height = max(widths, default=0), line_height * len(lines)
    if width <= 0 or height <= 0:
        raise RenderError(f"文字渲染结果为空: {markup!r}", "水印合成")

    canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(canvas)
    for row, line in enumerate(lines):
        x = 0.0
        for text, fill in line:
            draw.text((x, row * line_height), text, font=font, fill=fill)
            x += font.getlength(text)

    return canvas


def parse_markup(
    markup: str,
) -> list[tuple[str, tuple[int, ...]]]:
    """解析文字标记为 (文字, 颜色) 片段"""
    try:
        root = ET.fromstring(f"<markup>{markup}</markup>")
    except ET.ParseError as e:
        raise RenderError(f"文字标记格式错误: {e}", "水印合成") from e

    segments: list[tuple[str, tuple[int, ...]]] = []

    def walk(element: ET.Element, fill: tuple[int, ...]) -> None:
        if element.tag != "markup":
            if element.tag != "span":
                raise RenderError(f"不支持的标记: <{element.tag}>", "水印合成")
            if foreground := element.get("foreground"):
                fill = _parse_foreground(foreground)
        if element.text:
            segments.append((element.text, fill))
        for child in element:
            walk(child, fill)
            if child.tail:
                segments.append((child.tail, fill))

    walk(root, DEFAULT_FOREGROUND)
    return segments


@lru_cache(maxsize=16)
def load_font(font_name: str, size: int) -> FontType:
    """加载字体，找不到时依次回退到常见系统字体和 Pillow 内置字体"""
    candidates = [font_name, f"{font_name}.ttf", *FALLBACK_FONTS]
    for candidate in candidates:
        if not Path(candidate).suffix:
            continue
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue

    logger.warning(f"未找到字体 {font_name}，使用 Pillow 内置字体")
    return ImageFont.load_default(size)


def _parse_foreground(value: str) -> tuple[int, ...]:
    try:
        return ImageColor.getrgb(value)
    except ValueError as e:
        raise RenderError(f"无法识别的文字颜色: {value}", "水印合成") from e


def _layout_lines(
    segments: list[tuple[str, tuple[int, ...]]],
) -> list[list[tuple[str, tuple[int, ...]]]]:
    """按换行符拆分片段"""
    lines: list[list[tuple[str, tuple[int, ...]]]] = [[]]
    for text, fill in segments:
        for index, part in enumerate(text.split("\n")):
            if index:
                lines.append([])
            if part:
                lines[-1].append((part, fill))
    return lines


def _font_pixels(size_pt: float, dpi: int) -> int:
    return max(1, round(size_pt * dpi / 72))


def _font_metrics(font: FontType) -> tuple[int, int]:
    if isinstance(font, ImageFont.FreeTypeFont):
        return font.getmetrics()
    return font.getbbox("Ag")[3], 0
