"""响应式图像异常处理模块。

定义统一的异常类和错误处理机制，包含现代化的异常处理装饰器。
"""

from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


# 统一的异常类型
class ResponsiveImageError(Exception):
    """响应式图像处理错误基类"""

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class ValidationError(ResponsiveImageError):
    """参数验证错误 - 统一的验证错误类型"""

    pass


class InvalidColorFormat(ValidationError):
    """颜色字符串格式错误"""

    pass


class ImageIOError(ResponsiveImageError):
    """源图读取或目标文件写入失败"""

    pass


class UnsupportedFormatError(ImageIOError):
    """无法识别的图像数据"""

    pass


class EncodingError(ResponsiveImageError):
    """目标格式拒绝编码参数"""

    pass


class RenderError(ResponsiveImageError):
    """水印文字渲染失败"""

    pass


class VariantTimeoutError(ResponsiveImageError):
    """变体任务超时"""

    pass


# 现代化异常处理装饰器
def handle_image_errors(
    operation_name: str = "图像处理",
    fallback: type[ResponsiveImageError] = EncodingError,
):
    """统一的图像处理异常处理装饰器

    已属于本模块的异常原样抛出，Pillow 与系统异常映射为对应的错误类型。

    Args:
        operation_name: 操作名称，用于日志记录和错误阶段标记
        fallback: 参数错误及未知错误映射到的异常类型
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except ResponsiveImageError:
                raise
            except UnidentifiedImageError as e:
                logger.error(f"{operation_name} - 无法识别图像格式: {e}")
                raise UnsupportedFormatError(
                    f"不支持的图像格式: {e}", operation_name
                ) from e
            except DecompressionBombError as e:
                logger.error(f"{operation_name} - 图像过大: {e}")
                raise ImageIOError(
                    f"图像文件过大，可能存在安全风险: {e}", operation_name
                ) from e
            except OSError as e:
                logger.error(f"{operation_name} - 文件操作失败: {e}")
                raise ImageIOError(f"文件操作失败: {e}", operation_name) from e
            except (ValueError, TypeError, KeyError) as e:
                logger.error(f"{operation_name} - 参数错误: {e}")
                raise fallback(f"参数错误: {e}", operation_name) from e
            except Exception as e:
                logger.error(f"{operation_name} - 未知错误: {e}")
                raise fallback(f"处理失败: {e}", operation_name) from e

        return wrapper

    return decorator


def log_error(
    operation: str, target: str | Path, error: Exception, level: str = "error"
) -> None:
    """标准化的错误日志记录

    Args:
        operation: 操作名称（如"变体生成"、"文件读取"等）
        target: 相关文件路径或任务标识
        error: 异常对象
        level: 日志级别 ("error", "warning", "debug")
    """
    log_msg = MessageFormatter.format_error(operation, target, error)
    getattr(logger, level, logger.error)(log_msg)
