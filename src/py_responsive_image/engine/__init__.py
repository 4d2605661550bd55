"""响应式生成引擎模块。

包含断点编排和并发执行等核心处理逻辑。
"""

from .breakpoints import BreakpointOrchestrator
from .concurrent_executor import ConcurrentExecutor


__all__ = [
    "BreakpointOrchestrator",
    "ConcurrentExecutor",
]
