"""
异常定义

每种错误对应一个独立的进程退出码，所有错误都直接终止本次运行。
"""

from typing import Any, Dict, List, Optional, Tuple


class ReporterError(Exception):
    """报告工具基础异常"""

    exit_code: int = 1

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        """错误类型名称"""
        return type(self).__name__


class ConfigError(ReporterError):
    """缺少必填参数"""

    exit_code = 2

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        self.missing_fields = missing_fields or []
        super().__init__(message, {"missing_fields": self.missing_fields})

    @classmethod
    def for_missing(cls, fields: List[Tuple[str, str, str]]) -> "ConfigError":
        """
        根据缺失字段构建异常

        Args:
            fields: (字段名, 命令行参数, 环境变量) 列表
        """
        described = ", ".join(f"{flag} / {env}" for _, flag, env in fields)
        return cls(
            f"Missing required parameter(s): {described}",
            missing_fields=[name for name, _, _ in fields]
        )


class ConnectivityError(ReporterError):
    """无法连接远端服务(DNS、拒绝连接、超时)"""

    exit_code = 3

    def __init__(self, message: str, url: str):
        self.url = url
        super().__init__(message, {"url": url})


class UpstreamError(ReporterError):
    """远端返回了非预期的 HTTP 状态码"""

    exit_code = 4

    def __init__(self, url: str, status_code: int, body: str = ""):
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"{url} returned HTTP {status_code}: {body}",
            {"url": url, "status_code": status_code, "body": body}
        )


class DeserializationError(ReporterError):
    """响应体结构与预期不符"""

    exit_code = 5

    def __init__(self, message: str, url: str):
        self.url = url
        super().__init__(message, {"url": url})


class PublishRejectedError(ReporterError):
    """Slack 接受了请求但在应用层拒绝(ok=false)"""

    exit_code = 6

    def __init__(self, error_code: str):
        self.error_code = error_code
        super().__init__(
            f"Slack API rejected the message: {error_code}",
            {"error_code": error_code}
        )
