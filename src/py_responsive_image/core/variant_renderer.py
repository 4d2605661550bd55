"""变体渲染模块。

把源图按断点缩放、叠加水印、转换格式后直接写入工作目录，
再回读文件得到最终尺寸和大小。每次调用都会重新打开源图的读取流。
"""

from pathlib import Path
from typing import BinaryIO

from PIL import Image, ImageOps

from ..exceptions import EncodingError, ImageIOError, handle_image_errors
from ..models.constants import get_mime_type, get_pillow_format, normalize_extension
from ..models.generation_config import BreakpointSpec, OutputMeta
from ..models.variant import SourceImage, VariantFile, bytes_to_kbytes
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter, format_file_error
from .formats import FormatProcessor, get_save_parameters
from .image_info import ImageInfoExtractor
from .resize import RESAMPLE, anchor_offset, resize_to_breakpoint
from .watermark import WatermarkLayer


logger = get_logger()


@handle_image_errors("变体渲染")
def render_variant(
    source: SourceImage,
    breakpoint: BreakpointSpec,
    quality: int,
    progressive: bool,
    auto_orientation: bool,
    watermark: WatermarkLayer | None,
    output: OutputMeta,
    file_path: Path | None = None,
) -> VariantFile:
    """渲染单个变体并写入 ``<工作目录>/<hash>``

    处理顺序：EXIF 方向校正 → 缩放 → 叠加水印 → 格式转换与编码。

    Args:
        source: 源图
        breakpoint: 目标尺寸与格式
        quality: 质量 1-100，按格式解释
        progressive: 渐进式编码（JPEG）
        auto_orientation: 缩放前按 EXIF 方向旋转
        watermark: 水印图层，None 不叠加
        output: 输出文件的 name/hash/ext
        file_path: 写入位置，默认 ``<工作目录>/<output.hash>``

    Returns:
        VariantFile: 写入的变体及回读的宽高、大小

    Raises:
        ImageIOError: 源图无法读取或目标文件无法写入
        EncodingError: 目标格式拒绝编码参数
    """
    file_path = file_path or Path(source.tmp_working_directory) / output.hash
    converted = breakpoint.convert_to_format is not None
    target_format = (
        breakpoint.convert_to_format.value
        if converted
        else normalize_extension(source.ext)
    )

    # 先校验编码参数，避免无效任务解码源图
    save_params = get_save_parameters(target_format, quality, progressive)

    with source.get_stream() as stream, Image.open(stream) as img:
        pillow_format = (
            get_pillow_format(target_format) if target_format else img.format
        )
        if not pillow_format:
            raise EncodingError(f"无法确定 {source.name} 的输出格式", "变体渲染")

        processed = _process_image(
            img, breakpoint, auto_orientation, watermark, pillow_format
        )
        _write_image(processed, file_path, pillow_format, save_params)

    probe = ImageInfoExtractor().probe(lambda: file_path.open("rb"))
    logger.debug(
        MessageFormatter.variant_written(
            output.hash, file_path, probe.width, probe.height, probe.size
        )
    )

    return VariantFile(
        name=output.name,
        hash=output.hash,
        ext=output.ext,
        mime=get_mime_type(output.ext) if converted else source.mime,
        path=source.path,
        file_path=file_path,
        width=probe.width,
        height=probe.height,
        size=bytes_to_kbytes(probe.size),
    )


def _process_image(
    img: Image.Image,
    breakpoint: BreakpointSpec,
    auto_orientation: bool,
    watermark: WatermarkLayer | None,
    pillow_format: str,
) -> Image.Image:
    """处理图片：EXIF旋转、尺寸调整、水印、色彩模式"""
    # 方向信息必须在缩放前读取
    if auto_orientation:
        img = ImageOps.exif_transpose(img)

    # 调色板和二值图像先展开，保证缩放插值
    if img.mode == "P":
        img = img.convert("RGBA" if "transparency" in img.info else "RGB")
    elif img.mode == "1":
        img = img.convert("L")

    img = resize_to_breakpoint(img, breakpoint)

    if watermark is not None:
        img = composite_watermark(img, watermark)

    return FormatProcessor().prepare_for_format(img, pillow_format)


def composite_watermark(img: Image.Image, watermark: WatermarkLayer) -> Image.Image:
    """在锚点位置叠加水印，水印大于图片时等比缩小到图片以内"""
    layer = watermark.open()
    if layer.width > img.width or layer.height > img.height:
        layer.thumbnail(img.size, RESAMPLE)
        logger.debug(f"水印大于变体尺寸 {img.size}，缩小为 {layer.size}")

    keep_alpha = img.mode in ("RGBA", "LA")
    base = img.convert("RGBA")
    offset = anchor_offset(base.size, layer.size, watermark.position)
    base.alpha_composite(layer, dest=offset)

    if keep_alpha:
        return base
    return base.convert(img.mode if img.mode in ("RGB", "L") else "RGB")


def _write_image(
    img: Image.Image, file_path: Path, pillow_format: str, save_params: dict
) -> None:
    """把编码结果直接写入文件句柄，不在内存中缓存整张图片"""
    try:
        handle = file_path.open("wb")
    except OSError as e:
        raise ImageIOError(format_file_error("打开", file_path, e), "变体写入") from e

    try:
        with handle:
            _save(img, handle, file_path, pillow_format, save_params)
    except (EncodingError, ImageIOError):
        # 不保留写了一半的文件
        file_path.unlink(missing_ok=True)
        raise


def _save(
    img: Image.Image,
    handle: BinaryIO,
    file_path: Path,
    pillow_format: str,
    save_params: dict,
) -> None:
    try:
        img.save(handle, format=pillow_format, **save_params)
    except (ValueError, TypeError, KeyError) as e:
        raise EncodingError(f"{pillow_format} 编码失败: {e}", "变体编码") from e
    except OSError as e:
        # 编码器错误没有 errno，真正的写入失败才有
        if e.errno is None:
            raise EncodingError(f"{pillow_format} 编码失败: {e}", "变体编码") from e
        raise ImageIOError(format_file_error("写入", file_path, e), "变体写入") from e
