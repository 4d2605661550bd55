"""颜色编解码模块。

把 rgb()/rgba() 函数式颜色转换成十六进制表示，供水印文字标记使用。
"""

import math
import re

from ..exceptions import InvalidColorFormat


_WRAPPER_PATTERN = re.compile(r"^rgba?\(|\s+|\)$", re.IGNORECASE)


def rgba_to_hex(rgba: str, force_remove_alpha: bool = False) -> str:
    """把 rgb/rgba 颜色字符串转换为十六进制颜色。

    透明度从 [0, 1] 映射到 [0, 255] 后四舍五入；三个分量输出 ``#rrggbb``，
    四个分量输出 ``#rrggbbaa``。

    Args:
        rgba: 形如 ``rgba(255, 0, 0, 0.5)`` 或 ``rgb(0,0,0)`` 的字符串
        force_remove_alpha: 是否丢弃透明度分量

    Returns:
        str: 小写十六进制颜色

    Raises:
        InvalidColorFormat: 字符串为空、分量个数不对、分量非数字或越界

    Examples:
        >>> rgba_to_hex("rgba(255,0,0,1)")
        '#ff0000ff'
        >>> rgba_to_hex("rgb(0,0,0)")
        '#000000'
    """
    if not isinstance(rgba, str) or not rgba.strip():
        raise InvalidColorFormat("颜色不能为空", "颜色解析")

    parts = _WRAPPER_PATTERN.sub("", rgba.strip()).split(",")
    if len(parts) not in (3, 4):
        raise InvalidColorFormat(
            f"颜色需要 3 或 4 个分量，得到 {len(parts)} 个: {rgba!r}", "颜色解析"
        )

    if force_remove_alpha:
        parts = parts[:3]

    channels = []
    for index, part in enumerate(parts):
        try:
            value = float(part)
        except ValueError:
            raise InvalidColorFormat(
                f"颜色分量不是数字: {part!r} ({rgba!r})", "颜色解析"
            ) from None

        if index == 3:
            if not 0 <= value <= 1:
                raise InvalidColorFormat(
                    f"透明度必须在 0-1 之间，得到: {part} ({rgba!r})", "颜色解析"
                )
            channels.append(_round_half_up(value * 255))
        else:
            if not (0 <= value <= 255 and value.is_integer()):
                raise InvalidColorFormat(
                    f"颜色通道必须是 0-255 的整数，得到: {part} ({rgba!r})",
                    "颜色解析",
                )
            channels.append(int(value))

    return "#" + "".join(f"{channel:02x}" for channel in channels)


def _round_half_up(value: float) -> int:
    # .5 一律向上取整，不使用 round() 的银行家舍入
    return math.floor(value + 0.5)
