"""
配置管理 - 使用Pydantic Settings实现环境变量管理
语义匹配服务、模糊匹配阈值与调色板都在这里集中配置
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# 白色色块表示"无颜色"，选中它即进入清除模式
CLEAR_COLOR = "#FFFFFF"


class Settings(BaseSettings):
    """应用配置类 - 所有配置项通过环境变量管理"""

    # API配置
    api_v1_prefix: str = Field(default="/api/v1", description="API路由前缀")
    project_name: str = Field(default="Revision Compare", description="项目名称")
    version: str = Field(default="1.0.0", description="版本号")

    # 语义匹配服务 (DeepSeek, OpenAI兼容接口)
    deepseek_api_key: Optional[str] = Field(default=None, description="DeepSeek API key")
    deepseek_base_url: str = Field(default="https://api.deepseek.com/v1", description="API base URL")
    similarity_model: str = Field(default="deepseek-chat", description="语义匹配模型")
    request_timeout: int = Field(default=30, description="请求超时时间(秒)")
    max_retries: int = Field(default=3, description="语义匹配请求最大尝试次数")

    # 匹配配置
    fuzzy_threshold: float = Field(default=0.3, description="模糊匹配阈值，越小越严格")
    notification_dismiss_seconds: float = Field(default=3.0, description="未找到提示自动消失时间(秒)")

    # 调色板，逗号分隔
    highlight_palette: str = Field(
        default="#FFD700,#FF6347,#7FFFD4,#DDA0DD,#90EE90",
        description="可用高亮颜色，逗号分隔"
    )

    # 日志配置
    log_level: str = Field(default="INFO", description="日志级别")
    json_logs: bool = Field(default=False, description="是否输出JSON格式日志")

    # CORS 配置
    cors_allow_origins: str = Field(default="http://localhost:3000", description="允许的跨域来源，逗号分隔")
    cors_allow_credentials: bool = Field(default=False, description="是否允许携带凭据")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # 忽略未定义的环境变量
    )

    @property
    def has_similarity_credentials(self) -> bool:
        """是否配置了语义匹配服务密钥"""
        return bool(self.deepseek_api_key)

    def get_palette(self) -> list[str]:
        """返回调色板颜色列表（统一为大写）"""
        return [c.strip().upper() for c in self.highlight_palette.split(",") if c.strip()]

    def get_cors_origins(self) -> list[str]:
        """返回允许的 CORS 来源列表"""
        raw = (self.cors_allow_origins or "").strip()
        if not raw:
            return ["*"]
        return [o.strip() for o in raw.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    获取配置单例
    使用lru_cache确保全局只有一个Settings实例
    """
    return Settings()
