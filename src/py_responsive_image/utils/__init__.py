"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

# 从日志工具模块导入
from .logging_helpers import get_logger, setup_logging

# 从消息格式化模块导入
from .message_formatter import (
    MessageFormatter,
    format_file_error,
)


__all__ = [
    "MessageFormatter",
    "format_file_error",
    "get_logger",
    "setup_logging",
]
