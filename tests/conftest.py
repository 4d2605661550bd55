"""测试配置文件。

提供测试所需的fixtures：生成的测试图片和变体工作目录。
"""

from pathlib import Path

import numpy as np
import pytest
from PIL import Image, ImageDraw

from py_responsive_image.config import reset_config
from py_responsive_image.models import SourceImage


def _photo_like(width: int, height: int, seed: int = 7) -> Image.Image:
    """生成带渐变和噪声的照片风格图片，压缩后体积接近真实照片"""
    rng = np.random.default_rng(seed)
    x = np.linspace(0, 255, width)
    y = np.linspace(0, 255, height)[:, None]
    base = np.stack(
        [
            np.broadcast_to(x, (height, width)),
            np.broadcast_to(y, (height, width)),
            (np.broadcast_to(x, (height, width)) + y) / 2,
        ],
        axis=-1,
    )
    noise = rng.normal(0, 18, size=(height, width, 3))
    pixels = np.clip(base + noise, 0, 255).astype(np.uint8)
    return Image.fromarray(pixels, "RGB")


@pytest.fixture(autouse=True)
def fresh_config():
    """每个测试使用新的全局配置"""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def working_dir(tmp_path: Path) -> Path:
    """变体工作目录"""
    directory = tmp_path / "work"
    directory.mkdir()
    return directory


@pytest.fixture
def image_dir(tmp_path: Path) -> Path:
    """测试图片目录"""
    directory = tmp_path / "images"
    directory.mkdir()
    return directory


@pytest.fixture
def photo_jpeg(image_dir: Path) -> Path:
    """1200x800 的照片风格 JPEG，质量 100"""
    path = image_dir / "photo.jpg"
    _photo_like(1200, 800).save(path, "JPEG", quality=100)
    return path


@pytest.fixture
def photo_png(image_dir: Path) -> Path:
    """1000x750 的照片风格 PNG"""
    path = image_dir / "photo.png"
    _photo_like(1000, 750, seed=11).save(path, "PNG")
    return path


@pytest.fixture
def transparent_png(image_dir: Path) -> Path:
    """400x400 的半透明 PNG"""
    path = image_dir / "transparent.png"
    img = Image.new("RGBA", (400, 400), color=(0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    for i in range(10):
        x, y = i * 30, i * 30
        draw.ellipse(
            [x, y, x + 100, y + 100],
            fill=(255 - i * 20, 100 + i * 15, i * 25, 100 + (i * 15) % 155),
        )
    img.save(path, "PNG")
    return path


@pytest.fixture
def rotated_jpeg(image_dir: Path) -> Path:
    """600x400 的 JPEG，EXIF 方向为 6（顺时针旋转 90 度显示）"""
    path = image_dir / "rotated.jpg"
    img = _photo_like(600, 400, seed=3)
    exif = Image.Exif()
    exif[0x0112] = 6
    img.save(path, "JPEG", quality=90, exif=exif)
    return path


@pytest.fixture
def small_png(image_dir: Path) -> Path:
    """100x80 的小图，小于缩略图尺寸"""
    path = image_dir / "small.png"
    Image.new("RGB", (100, 80), color="red").save(path, "PNG")
    return path


@pytest.fixture
def source_jpeg(photo_jpeg: Path, working_dir: Path) -> SourceImage:
    """JPEG 源图"""
    return SourceImage.from_file(photo_jpeg, working_dir, hash="photo_abc123")


@pytest.fixture
def source_png(photo_png: Path, working_dir: Path) -> SourceImage:
    """PNG 源图"""
    return SourceImage.from_file(photo_png, working_dir, hash="photo_png_abc123")
