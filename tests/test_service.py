"""响应式图像服务测试。

测试基础图像处理能力和服务组合。
"""

from pathlib import Path

import pytest
from PIL import Image

from py_responsive_image import (
    GenerationConfig,
    ImageManipulationService,
    ResponsiveImageService,
    SourceImage,
    VariantFile,
)
from py_responsive_image.core.manipulation import BaseImageManipulation
from py_responsive_image.exceptions import ImageIOError


class TestBaseImageManipulation:
    """基础图像处理测试"""

    @pytest.fixture
    def base(self):
        return BaseImageManipulation()

    def test_get_metadata(self, base, source_jpeg: SourceImage, photo_jpeg: Path):
        """测试读取元数据"""
        probe = base.get_metadata(source_jpeg)

        assert (probe.width, probe.height) == (1200, 800)
        assert probe.format == "JPEG"
        assert probe.size == photo_jpeg.stat().st_size
        assert probe.has_alpha is False

    def test_get_metadata_alpha(self, base, transparent_png: Path, working_dir: Path):
        """测试透明通道检测"""
        probe = base.get_metadata(SourceImage.from_file(transparent_png, working_dir))
        assert probe.has_alpha is True

    def test_get_dimensions_orientation(
        self, base, rotated_jpeg: Path, working_dir: Path
    ):
        """测试按 EXIF 方向返回宽高"""
        source = SourceImage.from_file(rotated_jpeg, working_dir)

        assert base.get_dimensions(source) == (600, 400)
        assert base.get_dimensions(source, auto_orientation=True) == (400, 600)

    def test_get_dimensions_not_image(self, base, working_dir: Path):
        """测试非图片读取宽高失败"""
        source = SourceImage.from_bytes(b"plain text", "notes.txt", working_dir)
        with pytest.raises(ImageIOError):
            base.get_dimensions(source)

    def test_is_image(self, base, source_jpeg: SourceImage, working_dir: Path):
        """测试图片判断"""
        svg = SourceImage.from_bytes(
            b"<svg xmlns='http://www.w3.org/2000/svg'/>", "logo.svg", working_dir
        )
        text = SourceImage.from_bytes(b"plain text", "notes.txt", working_dir)

        assert base.is_image(source_jpeg) is True
        assert base.is_image(svg) is True
        assert base.is_image(text) is False

    def test_is_optimizable_image(
        self, base, source_png: SourceImage, image_dir: Path, working_dir: Path
    ):
        """测试可优化格式判断"""
        gif_path = image_dir / "anim.gif"
        Image.new("P", (20, 20)).save(gif_path, "GIF")
        gif = SourceImage.from_file(gif_path, working_dir)

        assert base.is_optimizable_image(source_png) is True
        assert base.is_optimizable_image(gif) is False
        assert base.is_image(gif) is True

    def test_generate_thumbnail(self, base, source_jpeg: SourceImage):
        """测试缩略图不超过 245x156"""
        descriptor = base.generate_thumbnail(source_jpeg)

        assert descriptor.key == "thumbnail"
        assert descriptor.file.width <= 245
        assert descriptor.file.height == 156
        assert descriptor.file.hash == "thumbnail_photo_abc123"

    def test_thumbnail_skipped_for_small_image(
        self, base, small_png: Path, working_dir: Path
    ):
        """测试小图不生成缩略图"""
        source = SourceImage.from_file(small_png, working_dir)
        assert base.generate_thumbnail(source) is None

    def test_optimize_reduces_size(
        self, base, source_jpeg: SourceImage, working_dir: Path
    ):
        """测试优化后体积变小"""
        result = base.optimize(source_jpeg, quality=80)

        assert isinstance(result, VariantFile)
        assert result.file_path == working_dir / "optimized_photo_abc123"
        assert result.name == "photo.jpg"
        assert result.hash == "photo_abc123"
        assert (result.width, result.height) == (1200, 800)
        assert result.size < source_jpeg.size

    def test_optimize_keeps_smaller_original(
        self, base, image_dir: Path, working_dir: Path
    ):
        """测试优化后变大时返回原文件"""
        path = image_dir / "low.jpg"
        Image.effect_noise((400, 300), 64).convert("RGB").save(path, "JPEG", quality=20)
        source = SourceImage.from_file(path, working_dir)

        assert base.optimize(source, quality=100) is source

    def test_optimize_disabled(self, base, source_jpeg: SourceImage):
        """测试关闭优化时原样返回"""
        assert base.optimize(source_jpeg, size_optimization=False) is source_jpeg

    def test_optimize_skips_gif(self, base, image_dir: Path, working_dir: Path):
        """测试不可优化格式原样返回"""
        gif_path = image_dir / "anim.gif"
        Image.new("P", (20, 20)).save(gif_path, "GIF")
        source = SourceImage.from_file(gif_path, working_dir)

        assert base.optimize(source) is source


class TestResponsiveImageService:
    """响应式图像服务测试"""

    @pytest.fixture
    def service(self):
        config = GenerationConfig.from_settings(
            {"responsiveDimensions": True, "autoOrientation": True},
            {
                "formats": [
                    {"name": "medium", "width": 300, "x2": True},
                    {"name": "small", "width": 150, "convertToFormat": "webp"},
                ],
                "quality": 80,
            },
        )
        return ResponsiveImageService(config)

    def test_implements_protocol(self, service):
        """测试服务满足接口定义"""
        assert isinstance(service, ImageManipulationService)

    def test_generate_responsive_formats(self, service, source_jpeg: SourceImage):
        """测试生成全部响应式变体"""
        collection = service.generate_responsive_formats(source_jpeg)

        assert collection.keys() == ["medium", "small", "medium_x2"]
        assert collection.get("small").file.ext == ".webp"
        assert collection.get("medium_x2").file.width == 600
        assert "3 个变体" in collection.get_summary()

    def test_dimensions_follow_config(self, service, rotated_jpeg: Path, working_dir: Path):
        """测试宽高读取遵循自动旋转设置"""
        source = SourceImage.from_file(rotated_jpeg, working_dir)
        assert service.get_dimensions(source) == (400, 600)

    def test_resize_single_breakpoint(self, service, source_jpeg: SourceImage):
        """测试单个断点缩放"""
        descriptor = service.resize(source_jpeg, "custom", service.config.formats[0])

        assert descriptor.key == "custom"
        assert descriptor.file.width == 300
        assert descriptor.file.hash == "custom_photo_abc123"

    def test_from_settings(self, source_jpeg: SourceImage):
        """测试由设置创建服务"""
        service = ResponsiveImageService.from_settings({"responsiveDimensions": False}, {})
        assert len(service.generate_responsive_formats(source_jpeg)) == 0
        assert service.generate_thumbnail(source_jpeg).key == "thumbnail"
