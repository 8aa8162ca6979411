"""
配置管理模块

从命令行参数和环境变量加载配置，命令行参数优先于环境变量。
"""

from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from silence_reporter.exceptions import ConfigError


# 必填字段 -> (命令行参数, 环境变量)
REQUIRED_FIELDS: Dict[str, tuple] = {
    "alertmanager_url": ("--alertmanager-url", "ALERTMANAGER_URL"),
    "slack_bot_token": ("--slack-bot-token", "SLACK_BOT_TOKEN"),
    "slack_channel_id": ("--slack-channel-id", "SLACK_CHANNEL_ID"),
}


class ReporterConfig(BaseSettings):
    """报告运行所需的三个必填参数"""

    # 空字符串的环境变量视为未设置
    model_config = SettingsConfigDict(
        extra="ignore",
        env_ignore_empty=True,
        frozen=True
    )

    alertmanager_url: str = Field(..., description="Alertmanager 基础地址")
    slack_bot_token: str = Field(..., description="Slack Bot Token")
    slack_channel_id: str = Field(..., description="Slack 频道ID")

    @property
    def alertmanager_base_url(self) -> str:
        """去掉末尾斜杠的 Alertmanager 地址"""
        return self.alertmanager_url.rstrip("/")


class HttpConfig(BaseSettings):
    """HTTP 客户端配置"""

    model_config = SettingsConfigDict(
        env_prefix="HTTP_",
        extra="ignore"
    )

    timeout: float = Field(default=30.0, description="请求超时(秒)")
    user_agent: str = Field(default="silence-reporter/1.0", description="User-Agent 请求头")


class SlackApiConfig(BaseSettings):
    """Slack Web API 配置"""

    model_config = SettingsConfigDict(
        env_prefix="SLACK_",
        extra="ignore"
    )

    api_url: str = Field(default="https://slack.com/api", description="Slack Web API 地址")

    @property
    def post_message_url(self) -> str:
        """chat.postMessage 端点"""
        return f"{self.api_url.rstrip('/')}/chat.postMessage"


class LoggingConfig(BaseSettings):
    """日志配置"""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        extra="ignore"
    )

    level: str = Field(default="INFO", description="日志级别")
    format: str = Field(default="text", description="日志格式: json/text")


class Settings(BaseSettings):
    """可选运行参数，均有默认值"""

    model_config = SettingsConfigDict(extra="ignore")

    http: HttpConfig = Field(default_factory=HttpConfig)
    slack: SlackApiConfig = Field(default_factory=SlackApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache()
def get_settings() -> Settings:
    """
    获取可选运行参数(带缓存)

    Raises:
        ConfigError: 环境变量取值非法(如 HTTP_TIMEOUT=abc)
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def _missing_fields(error: ValidationError) -> List[str]:
    """从校验错误中提取缺失的字段名"""
    missing = []
    for item in error.errors():
        if item.get("type") == "missing" and item.get("loc"):
            field = str(item["loc"][0])
            if field in REQUIRED_FIELDS and field not in missing:
                missing.append(field)
    return missing


def resolve_config(
    alertmanager_url: Optional[str] = None,
    slack_bot_token: Optional[str] = None,
    slack_channel_id: Optional[str] = None
) -> ReporterConfig:
    """
    解析运行配置

    显式传入的参数(来自命令行)覆盖同名环境变量；
    任一字段在两处都缺失时抛出 ConfigError，不做任何网络访问。

    Args:
        alertmanager_url: --alertmanager-url 参数值
        slack_bot_token: --slack-bot-token 参数值
        slack_channel_id: --slack-channel-id 参数值

    Returns:
        ReporterConfig

    Raises:
        ConfigError: 缺少必填参数
    """
    overrides = {
        "alertmanager_url": alertmanager_url,
        "slack_bot_token": slack_bot_token,
        "slack_channel_id": slack_channel_id,
    }
    overrides = {key: value for key, value in overrides.items() if value}

    try:
        return ReporterConfig(**overrides)
    except ValidationError as e:
        missing = _missing_fields(e)
        if not missing:
            raise ConfigError(f"Invalid configuration: {e}") from e
        raise ConfigError.for_missing(
            [(field, *REQUIRED_FIELDS[field]) for field in missing]
        ) from e
