"""消息格式化工具模块。

提供统一的错误消息、进度消息格式化功能。
"""

from pathlib import Path

from humanize import naturalsize


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def format_error(operation: str, target: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{target}]: {error}"

    @staticmethod
    def variant_written(
        key: str, file_path: Path, width: int, height: int, size_bytes: int
    ) -> str:
        """变体写入完成消息"""
        return (
            f"变体 {key} 已写入 {file_path} "
            f"({width}x{height}, {naturalsize(size_bytes, binary=True)})"
        )

    @staticmethod
    def job_timeout(key: str, timeout: float) -> str:
        """任务超时消息"""
        return f"变体任务 {key} 超过 {timeout:g} 秒未完成"


# 便捷函数
def format_file_error(operation: str, file_path: str | Path, error: Exception) -> str:
    """格式化文件操作错误消息"""
    return MessageFormatter.format_error(operation, file_path, error)
