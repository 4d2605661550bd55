"""水印合成测试。"""

import io

import pytest
from PIL import Image

from py_responsive_image.core.variant_renderer import composite_watermark
from py_responsive_image.core.watermark import (
    WatermarkLayer,
    build_markup,
    parse_markup,
    render_markup,
    synthesize_watermark,
)
from py_responsive_image.exceptions import InvalidColorFormat, RenderError
from py_responsive_image.models import Gravity


class TestMarkup:
    """文字标记测试"""

    def test_build_markup_escapes_text(self):
        """测试文字被转义且颜色转为十六进制"""
        markup = build_markup("a<b & c", "rgba(255,0,0,1)")
        assert markup == '<span foreground="#ff0000ff">a&lt;b &amp; c</span>'

    def test_build_markup_invalid_color(self):
        """测试非法颜色"""
        with pytest.raises(InvalidColorFormat):
            build_markup("text", "red")

    def test_parse_nested_spans(self):
        """测试嵌套 span 的颜色继承"""
        segments = parse_markup(
            '<span foreground="#ff0000">red <span foreground="#00ff00">green</span>'
            " tail</span>"
        )
        assert segments == [
            ("red ", (255, 0, 0)),
            ("green", (0, 255, 0)),
            (" tail", (255, 0, 0)),
        ]

    def test_parse_plain_text_default_color(self):
        """测试无标记文字使用默认黑色"""
        assert parse_markup("plain") == [("plain", (0, 0, 0, 255))]

    @pytest.mark.parametrize(
        "markup",
        ["<span>unclosed", "<b>bold</b>", '<span foreground="nope">x</span>'],
    )
    def test_parse_invalid_markup(self, markup: str):
        """测试错误标记抛出 RenderError"""
        with pytest.raises(RenderError):
            parse_markup(markup)

    def test_render_multiline_is_taller(self):
        """测试换行文字更高"""
        single = render_markup("<span>line</span>")
        double = render_markup("<span>line\nline</span>")

        assert single.mode == "RGBA"
        assert double.height > single.height
        assert double.width == single.width


class TestSynthesizeWatermark:
    """水印图层测试"""

    def test_layer_is_transparent_png(self):
        """测试水印图层为带透明边距的 PNG"""
        layer = synthesize_watermark("© Photo", "rgba(255,0,0,1)", "southeast")

        assert isinstance(layer, WatermarkLayer)
        assert layer.position == Gravity.SOUTHEAST
        assert layer.data.startswith(b"\x89PNG")

        img = layer.open()
        assert img.mode == "RGBA"
        assert img.width > 40 and img.height > 40
        # 四角位于 20 像素透明边距内
        for corner in [(0, 0), (img.width - 1, 0), (0, img.height - 1)]:
            assert img.getpixel(corner)[3] == 0

    def test_layer_uses_text_color(self):
        """测试文字像素使用指定颜色"""
        img = synthesize_watermark("WWW", "rgba(255,0,0,1)", Gravity.CENTER).open()
        opaque = [p for p in img.getdata() if p[3] == 255]

        assert opaque
        assert all(p[0] == 255 and p[1] == 0 and p[2] == 0 for p in opaque)

    def test_custom_padding(self):
        """测试自定义边距"""
        narrow = synthesize_watermark("abc", "rgb(0,0,0)", "center", padding=0).open()
        wide = synthesize_watermark("abc", "rgb(0,0,0)", "center", padding=10).open()

        assert wide.size == (narrow.width + 20, narrow.height + 20)

    def test_invalid_color(self):
        """测试非法颜色直接抛出颜色错误"""
        with pytest.raises(InvalidColorFormat):
            synthesize_watermark("text", "rgba(0,0,0)x", "center")


class TestCompositeWatermark:
    """水印叠加测试"""

    @staticmethod
    def _layer(size: tuple[int, int], position: Gravity) -> WatermarkLayer:
        buffer = io.BytesIO()
        Image.new("RGBA", size, (0, 0, 0, 255)).save(buffer, "PNG")
        return WatermarkLayer(data=buffer.getvalue(), position=position)

    def test_anchor_southeast(self):
        """测试右下角锚点"""
        img = Image.new("RGB", (100, 100), "white")
        result = composite_watermark(img, self._layer((20, 10), Gravity.SOUTHEAST))

        assert result.mode == "RGB"
        assert result.getpixel((99, 99)) == (0, 0, 0)
        assert result.getpixel((79, 89)) == (255, 255, 255)
        assert result.getpixel((0, 0)) == (255, 255, 255)

    def test_keeps_alpha_channel(self):
        """测试透明图片保持透明通道"""
        img = Image.new("RGBA", (50, 50), (0, 0, 0, 0))
        result = composite_watermark(img, self._layer((10, 10), Gravity.NORTHWEST))

        assert result.mode == "RGBA"
        assert result.getpixel((0, 0))[3] == 255
        assert result.getpixel((49, 49))[3] == 0

    def test_oversized_watermark_is_scaled_down(self):
        """测试大于图片的水印缩小到图片以内"""
        img = Image.new("RGB", (100, 100), "white")
        result = composite_watermark(img, self._layer((500, 100), Gravity.CENTER))

        assert result.size == (100, 100)
        # 缩小后为 100x20，居中放置
        assert result.getpixel((50, 50)) == (0, 0, 0)
        assert result.getpixel((50, 5)) == (255, 255, 255)
