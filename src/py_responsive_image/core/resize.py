"""尺寸调整模块。

按断点的宽高和缩放模式调整图像，并提供九宫格锚点的偏移计算。
"""

from PIL import Image, ImageOps

from ..models.constants import FitMode, Gravity
from ..models.generation_config import BreakpointSpec


RESAMPLE = Image.Resampling.LANCZOS


def anchor_offset(
    container: tuple[int, int], item: tuple[int, int], gravity: Gravity
) -> tuple[int, int]:
    """计算 item 放入 container 时左上角的坐标"""
    fx, fy = gravity.factors
    return (
        round((container[0] - item[0]) * fx),
        round((container[1] - item[1]) * fy),
    )


def resize_to_breakpoint(img: Image.Image, breakpoint: BreakpointSpec) -> Image.Image:
    """调整到断点尺寸

    只有宽度时按原图宽高比计算高度；同时有宽高时按 ``fit`` 处理。
    """
    width, height = breakpoint.width, breakpoint.target_height
    src_width, src_height = img.size

    if height is None:
        if breakpoint.without_enlargement and width >= src_width:
            return img
        new_height = max(1, round(src_height * width / src_width))
        return img.resize((width, new_height), RESAMPLE)

    if breakpoint.without_enlargement:
        width, height = _limit_enlargement(img.size, (width, height), breakpoint.fit)

    match breakpoint.fit:
        case FitMode.FILL:
            return img.resize((width, height), RESAMPLE)
        case FitMode.INSIDE:
            return img.resize(_scaled(img.size, (width, height), min), RESAMPLE)
        case FitMode.OUTSIDE:
            return img.resize(_scaled(img.size, (width, height), max), RESAMPLE)
        case FitMode.CONTAIN:
            return _contain(img, (width, height), breakpoint.position)
        case _:
            return ImageOps.fit(
                img,
                (width, height),
                method=RESAMPLE,
                centering=breakpoint.position.factors,
            )


def _scaled(
    size: tuple[int, int], target: tuple[int, int], pick
) -> tuple[int, int]:
    """按比例缩放，pick 为 min 时不超过目标，为 max 时不小于目标"""
    ratio = pick(target[0] / size[0], target[1] / size[1])
    return max(1, round(size[0] * ratio)), max(1, round(size[1] * ratio))


def _contain(
    img: Image.Image, target: tuple[int, int], position: Gravity
) -> Image.Image:
    """等比缩放后居于画布中，空白处透明（无透明通道时为黑色）"""
    inner = img.resize(_scaled(img.size, target, min), RESAMPLE)
    if inner.mode in ("RGBA", "LA") or "transparency" in inner.info:
        inner = inner.convert("RGBA")
        canvas = Image.new("RGBA", target, (0, 0, 0, 0))
    else:
        inner = inner.convert("RGB")
        canvas = Image.new("RGB", target, (0, 0, 0))
    canvas.paste(inner, anchor_offset(target, inner.size, position))
    return canvas


def _limit_enlargement(
    size: tuple[int, int], target: tuple[int, int], fit: FitMode
) -> tuple[int, int]:
    """禁止放大时收缩目标尺寸，保持目标宽高比"""
    if target[0] <= size[0] and target[1] <= size[1]:
        return target
    if fit in (FitMode.INSIDE, FitMode.OUTSIDE, FitMode.FILL):
        return min(target[0], size[0]), min(target[1], size[1])
    ratio = min(size[0] / target[0], size[1] / target[1], 1)
    return max(1, round(target[0] * ratio)), max(1, round(target[1] * ratio))
