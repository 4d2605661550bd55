"""源图与变体模型。

定义上传源图、生成的变体文件以及结果集合的数据结构。
"""

import hashlib
import io
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import BinaryIO

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field

from .constants import get_mime_type


StreamFactory = Callable[[], BinaryIO]


class SourceImage(BaseModel):
    """上传的源图

    源图会被每个断点各读一次，因此保存的是可重复打开的流工厂而不是流本身。
    """

    name: str = Field(description="原始文件名")
    hash: str = Field(description="存储用的唯一名称")
    ext: str = Field(description="扩展名，含点号")
    mime: str = Field(description="MIME 类型")
    path: str | None = Field(None, description="存储路径")
    width: int | None = Field(None, description="宽度")
    height: int | None = Field(None, description="高度")
    size: float | None = Field(None, description="大小（KB）")
    tmp_working_directory: Path = Field(description="变体文件的工作目录")
    stream_factory: StreamFactory = Field(exclude=True, repr=False)

    def get_stream(self) -> BinaryIO:
        """打开一个新的读取流"""
        return self.stream_factory()

    @classmethod
    def from_file(
        cls,
        file_path: str | Path,
        tmp_working_directory: str | Path,
        hash: str | None = None,
    ) -> "SourceImage":
        """由磁盘文件构建源图，每次读取都重新打开文件"""
        file_path = Path(file_path)
        ext = file_path.suffix.lower()
        return cls(
            name=file_path.name,
            hash=hash or f"{file_path.stem}_{_content_digest(file_path.read_bytes())}",
            ext=ext,
            mime=get_mime_type(ext) if ext else "application/octet-stream",
            path=None,
            size=bytes_to_kbytes(file_path.stat().st_size),
            tmp_working_directory=Path(tmp_working_directory),
            stream_factory=lambda: file_path.open("rb"),
        )

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        name: str,
        tmp_working_directory: str | Path,
        hash: str | None = None,
    ) -> "SourceImage":
        """由内存数据构建源图，每次读取返回独立的只读缓冲"""
        stem, ext = Path(name).stem, Path(name).suffix.lower()
        return cls(
            name=name,
            hash=hash or f"{stem}_{_content_digest(data)}",
            ext=ext,
            mime=get_mime_type(ext) if ext else "application/octet-stream",
            size=bytes_to_kbytes(len(data)),
            tmp_working_directory=Path(tmp_working_directory),
            stream_factory=lambda: io.BytesIO(data),
        )


class ImageProbe(BaseModel):
    """图像元数据探测结果"""

    width: int = Field(description="宽度")
    height: int = Field(description="高度")
    format: str | None = Field(None, description="Pillow 识别的格式")
    size: int = Field(description="字节数")
    has_alpha: bool = Field(False, description="是否带透明通道")
    orientation: int | None = Field(None, description="EXIF 方向")


class VariantFile(BaseModel):
    """写入工作目录的变体文件"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="文件名")
    hash: str = Field(description="唯一名称，同时是工作目录中的文件名")
    ext: str = Field(description="扩展名，含点号")
    mime: str = Field(description="MIME 类型")
    path: str | None = Field(None, description="源图的存储路径")
    file_path: Path = Field(description="工作目录中的文件路径")
    width: int = Field(description="宽度")
    height: int = Field(description="高度")
    size: float = Field(description="大小（KB）")

    def get_stream(self) -> BinaryIO:
        """打开变体文件的读取流"""
        return self.file_path.open("rb")

    def get_size_human(self) -> str:
        """人类可读的文件大小"""
        return naturalsize(int(self.size * 1000))


class VariantDescriptor(BaseModel):
    """带键名的变体"""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="断点键名，双倍分辨率带 _x2 后缀")
    file: VariantFile = Field(description="变体文件")


class VariantCollection(BaseModel):
    """一次生成的全部变体，顺序不具有含义"""

    variants: list[VariantDescriptor] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.variants)

    def __iter__(self) -> Iterator[VariantDescriptor]:  # type: ignore[override]
        return iter(self.variants)

    def keys(self) -> list[str]:
        """全部键名"""
        return [v.key for v in self.variants]

    def get(self, key: str) -> VariantDescriptor | None:
        """按键名查找变体"""
        return next((v for v in self.variants if v.key == key), None)

    def get_total_size(self) -> float:
        """总大小（KB）"""
        return sum(v.file.size for v in self.variants)

    def get_summary(self) -> str:
        """生成结果摘要"""
        if not self.variants:
            return "未生成变体"
        total = naturalsize(int(self.get_total_size() * 1000))
        return f"生成 {len(self.variants)} 个变体 ({', '.join(self.keys())}), 共 {total}"


def bytes_to_kbytes(size: int) -> float:
    """字节数转 KB，保留两位小数"""
    return round(size / 1000, 2)


def _content_digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()[:10]
