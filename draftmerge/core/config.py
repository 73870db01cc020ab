"""
配置管理 - 环境变量 / .env 驱动的服务配置
Matching thresholds are constants of the matcher module, not settings.
"""
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """服务配置，键名不区分大小写，例如 DATABASE_URL / DATA_ROOT"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # 服务信息
    project_name: str = Field(default="Draft Merge", description="服务名称")
    version: str = Field(default="1.0.0", description="版本号")
    api_v1_prefix: str = Field(default="/api/v1", description="API路由前缀")

    # 存储: 结构化数据在 SQL 中，文档正文为磁盘上的 HTML 文件
    database_url: str = Field(
        default="sqlite+aiosqlite:///./draftmerge.db",
        description="异步 SQLAlchemy 连接字符串",
    )
    data_root: str = Field(default="./data", description="文档正文根目录，每个稿件一个子目录")

    # 日志
    log_level: str = Field(default="INFO", description="日志级别")
    json_logs: bool = Field(default=True, description="stdout 是否输出 JSON")
    log_file: Optional[str] = Field(default=None, description="额外的 JSON 日志文件")

    # CORS，逗号分隔，例如 "http://localhost:5173,https://editor.example.com"
    cors_allow_origins: str = Field(default="http://localhost:5173", description="允许的跨域来源")
    cors_allow_credentials: bool = Field(default=False, description="是否允许携带凭据")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @property
    def data_path(self) -> Path:
        return Path(self.data_root).expanduser().resolve()

    def get_cors_origins(self) -> list[str]:
        """CORS 来源列表；未配置时放开为 ["*"]"""
        origins = [origin.strip() for origin in (self.cors_allow_origins or "").split(",")]
        return [origin for origin in origins if origin] or ["*"]


@lru_cache()
def get_settings() -> Settings:
    """配置单例；测试中修改环境变量后调用 ``get_settings.cache_clear()``"""
    return Settings()
