"""生成配置模型。

定义断点、水印和单次生成所需的全部配置，配置由调用方显式传入。
字段同时接受设置存储中的驼峰命名（如 ``convertToFormat``）。
"""

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ..config import get_config
from .constants import FitMode, Gravity, OutputFormat, normalize_extension
from .variant import SourceImage


_SETTINGS_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
)


class BreakpointSpec(BaseModel):
    """单个断点定义"""

    model_config = ConfigDict(**_SETTINGS_MODEL_CONFIG, frozen=True)

    name: str = Field(min_length=1, description="断点名称，同一配置内唯一")
    width: int = Field(gt=0, description="目标宽度")
    height: int | None = Field(None, ge=0, description="目标高度，空或 0 时按宽度等比缩放")
    x2: bool = Field(False, description="是否额外生成双倍分辨率变体")

    # 透传给缩放流程的选项
    convert_to_format: OutputFormat | None = Field(None, description="转换的目标格式")
    fit: FitMode = Field(FitMode.COVER, description="同时指定宽高时的缩放模式")
    position: Gravity = Field(Gravity.CENTER, description="裁剪/留边时的锚点")
    without_enlargement: bool = Field(False, description="禁止放大")

    @field_validator("convert_to_format", mode="before")
    @classmethod
    def normalize_format(cls, v: Any) -> Any:
        if v in (None, ""):
            return None
        if isinstance(v, str):
            return normalize_extension(v) or v.lower()
        return v

    @property
    def target_height(self) -> int | None:
        """有效的目标高度"""
        return self.height or None

    def doubled(self) -> "BreakpointSpec":
        """双倍分辨率的断点"""
        return self.model_copy(
            update={
                "width": self.width * 2,
                "height": self.height * 2 if self.height else None,
            }
        )


class WatermarkSpec(BaseModel):
    """水印配置"""

    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1, description="水印文字")
    position: Gravity = Field(Gravity.CENTER, description="叠加锚点")
    color: str = Field(
        default_factory=lambda: get_config().render.WATERMARK_COLOR,
        description="rgb()/rgba() 颜色",
    )

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        # 导入颜色编解码（避免循环导入）
        from ..core.color import rgba_to_hex

        rgba_to_hex(v)
        return v


class OutputMeta(BaseModel):
    """单个变体文件的命名信息"""

    model_config = ConfigDict(frozen=True)

    name: str
    hash: str
    ext: str


class RenderJob(BaseModel):
    """一次变体渲染任务"""

    model_config = ConfigDict(frozen=True)

    key: str
    breakpoint: BreakpointSpec
    output: OutputMeta

    @classmethod
    def create(
        cls, key: str, breakpoint: BreakpointSpec, source: SourceImage
    ) -> "RenderJob":
        """创建任务，输出命名为 ``{key}_{源文件名}`` / ``{key}_{源 hash}``

        转换格式时扩展名为 ``.{格式}``，否则沿用源图扩展名。
        """
        ext = (
            f".{breakpoint.convert_to_format.value}"
            if breakpoint.convert_to_format is not None
            else source.ext
        )
        return cls(
            key=key,
            breakpoint=breakpoint,
            output=OutputMeta(
                name=f"{key}_{source.name}", hash=f"{key}_{source.hash}", ext=ext
            ),
        )


def default_breakpoints() -> list[BreakpointSpec]:
    """默认断点列表"""
    return [
        BreakpointSpec(name="xlarge", width=1920),
        BreakpointSpec(name="large", width=1000),
        BreakpointSpec(name="medium", width=750),
        BreakpointSpec(name="small", width=500),
        BreakpointSpec(name="xsmall", width=64),
    ]


class GenerationConfig(BaseModel):
    """单次响应式生成的完整配置"""

    model_config = _SETTINGS_MODEL_CONFIG

    # 上传设置
    responsive_dimensions: bool = Field(False, description="是否生成响应式变体")
    auto_orientation: bool = Field(False, description="是否按 EXIF 方向自动旋转")

    # 响应式图片设置
    formats: list[BreakpointSpec] = Field(
        default_factory=default_breakpoints, description="断点列表"
    )
    quality: int = Field(
        default_factory=lambda: get_config().render.QUALITY,
        ge=1,
        le=100,
        description="压缩质量",
    )
    progressive: bool = Field(
        default_factory=lambda: get_config().render.PROGRESSIVE,
        description="渐进式编码",
    )
    watermark_text: str | None = Field(None, description="水印文字，空则不加水印")
    watermark_position: Gravity = Field(Gravity.CENTER, description="水印锚点")
    watermark_color: str | None = Field(None, description="水印颜色")

    # 执行设置
    max_workers: int = Field(
        default_factory=lambda: get_config().concurrency.MAX_WORKERS,
        gt=0,
        description="最大并发渲染数",
    )
    job_timeout: float | None = Field(
        default_factory=lambda: get_config().concurrency.JOB_TIMEOUT_SECONDS,
        gt=0,
        description="单个变体任务超时（秒），None 不限制",
    )

    @field_validator("watermark_position", mode="before")
    @classmethod
    def default_watermark_position(cls, v: Any) -> Any:
        # 设置存储中未填写的锚点为 null 或空字符串
        if v in (None, ""):
            return Gravity.CENTER
        return v

    @field_validator("watermark_color")
    @classmethod
    def validate_watermark_color(cls, v: str | None) -> str | None:
        if not v:
            return None
        from ..core.color import rgba_to_hex

        rgba_to_hex(v)
        return v

    @model_validator(mode="after")
    def validate_unique_names(self) -> "GenerationConfig":
        seen: set[str] = set()
        for breakpoint in self.formats:
            if breakpoint.name in seen:
                raise ValueError(f"断点名称重复: {breakpoint.name}")
            seen.add(breakpoint.name)
        return self

    @property
    def watermark(self) -> WatermarkSpec | None:
        """水印配置，未设置水印文字时为 None"""
        if not self.watermark_text:
            return None
        return WatermarkSpec(
            text=self.watermark_text,
            position=self.watermark_position,
            color=self.watermark_color or get_config().render.WATERMARK_COLOR,
        )

    @classmethod
    def from_settings(
        cls,
        upload_settings: dict[str, Any] | None = None,
        responsive_settings: dict[str, Any] | None = None,
        **overrides: Any,
    ) -> "GenerationConfig":
        """由上传设置和响应式图片设置构建配置

        Args:
            upload_settings: 如 ``{"responsiveDimensions": True, "autoOrientation": False}``
            responsive_settings: 如 ``{"formats": [...], "quality": 87, ...}``
            **overrides: 直接覆盖的字段

        Raises:
            ValidationError: 配置不合法
            InvalidColorFormat: 水印颜色不合法
        """
        from ..exceptions import ValidationError

        data = {**(upload_settings or {}), **(responsive_settings or {}), **overrides}
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(format_validation_error(e), "配置构建") from e


def format_validation_error(error: PydanticValidationError) -> str:
    """格式化 pydantic 验证错误"""
    messages = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err["loc"])
        msg = err["msg"]
        if field:
            messages.append(f"{field}: {msg}")
        else:
            messages.append(msg)
    return "; ".join(messages)
