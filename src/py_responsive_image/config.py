"""统一配置管理模块。

提供应用程序的全局配置管理，包括默认值、环境变量支持等。
单次生成所需的业务配置见 models.generation_config.GenerationConfig。
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class RenderDefaults:
    """渲染相关的默认配置"""

    # 质量设置
    QUALITY: int = 87
    PROGRESSIVE: bool = True

    # 水印设置
    WATERMARK_COLOR: str = "rgba(255,255,255,0.5)"
    WATERMARK_PADDING: int = 20
    WATERMARK_FONT: str = "Arial"
    WATERMARK_FONT_SIZE_PT: float = 12.0
    WATERMARK_DPI: int = 250

    # 缩略图尺寸
    THUMBNAIL_WIDTH: int = 245
    THUMBNAIL_HEIGHT: int = 156


@dataclass(frozen=True)
class ConcurrencyDefaults:
    """并发相关的默认配置"""

    MAX_WORKERS: int = 4
    JOB_TIMEOUT_SECONDS: float = 120.0
    POLL_INTERVAL_SECONDS: float = 0.5


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    # 日志级别
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # 文件日志
    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "py_responsive_image.log"
    LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT: int = 5


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.render = RenderDefaults()
        self.concurrency = ConcurrencyDefaults()
        self.logging = LoggingDefaults()

        # 从环境变量加载配置
        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        # 渲染配置
        if quality := os.getenv("RIV_QUALITY"):
            object.__setattr__(self.render, "QUALITY", int(quality))

        if font := os.getenv("RIV_WATERMARK_FONT"):
            object.__setattr__(self.render, "WATERMARK_FONT", font)

        # 并发配置
        if max_workers := os.getenv("RIV_MAX_WORKERS"):
            object.__setattr__(self.concurrency, "MAX_WORKERS", int(max_workers))

        if job_timeout := os.getenv("RIV_JOB_TIMEOUT"):
            object.__setattr__(
                self.concurrency, "JOB_TIMEOUT_SECONDS", float(job_timeout)
            )

        # 日志配置
        if log_level := os.getenv("RIV_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

        if enable_file_log := os.getenv("RIV_ENABLE_FILE_LOGGING"):
            object.__setattr__(
                self.logging,
                "ENABLE_FILE_LOGGING",
                enable_file_log.lower() in ("true", "1", "yes"),
            )


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
