"""
静默规则报告服务

按顺序执行 拉取 -> 格式化 -> 发送，任一步失败立即终止。

运行状态:
    INIT -> CONFIG_RESOLVED -> SILENCES_FETCHED -> REPORT_FORMATTED -> PUBLISHED
任一非终止状态出错都会进入 FAILED。
"""

import logging
from enum import Enum
from typing import Optional

import httpx

from silence_reporter.config import ReporterConfig, Settings, get_settings
from silence_reporter.exceptions import ReporterError
from silence_reporter.services.alertmanager_client import AlertmanagerClient
from silence_reporter.services.report_formatter import (
    blocks_within_slack_limits,
    build_report_blocks,
    format_report,
)
from silence_reporter.services.slack_client import SlackClient

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    """运行状态枚举"""
    INIT = "init"
    CONFIG_RESOLVED = "config_resolved"
    SILENCES_FETCHED = "silences_fetched"
    REPORT_FORMATTED = "report_formatted"
    PUBLISHED = "published"
    FAILED = "failed"


class SilenceReportService:
    """静默规则报告服务"""

    def __init__(
        self,
        config: ReporterConfig,
        http_client: Optional[httpx.Client] = None,
        settings: Optional[Settings] = None
    ):
        """
        初始化服务

        Args:
            config: 已解析的运行配置
            http_client: 可选的 HTTP 客户端，未传入时自行创建并在 close() 时释放
            settings: 可选运行参数，默认读取环境变量
        """
        self.state = RunState.INIT
        self.error: Optional[ReporterError] = None

        settings = settings or get_settings()
        self.config = config
        self.http_config = settings.http
        self._owns_client = http_client is None
        self._client = http_client or self._create_client()

        self.alertmanager = AlertmanagerClient(config.alertmanager_base_url, self._client)
        self.slack = SlackClient(config.slack_bot_token, self._client, settings.slack)

        self.state = RunState.CONFIG_RESOLVED

    def _create_client(self) -> httpx.Client:
        """创建 HTTP 客户端"""
        return httpx.Client(
            timeout=httpx.Timeout(self.http_config.timeout),
            headers={"User-Agent": self.http_config.user_agent}
        )

    def close(self):
        """关闭自行创建的客户端"""
        if self._owns_client and not self._client.is_closed:
            self._client.close()

    def __enter__(self) -> "SilenceReportService":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def run(self) -> int:
        """
        执行一次完整的报告流程

        Returns:
            报告中的静默规则数量

        Raises:
            ReporterError: 任一步骤失败
        """
        try:
            silences = self.alertmanager.get_silences()
            self.state = RunState.SILENCES_FETCHED

            text = format_report(silences)
            blocks = build_report_blocks(silences)
            if not blocks_within_slack_limits(blocks):
                # 超出 Slack 限制时只发送文本
                logger.warning(
                    f"Report blocks exceed Slack limits ({len(blocks)} blocks), sending text only"
                )
                blocks = None
            self.state = RunState.REPORT_FORMATTED

            self.slack.post_message(self.config.slack_channel_id, text, blocks=blocks)
            self.state = RunState.PUBLISHED

        except ReporterError as e:
            logger.debug(f"Run failed in state {self.state.value}")
            self.state = RunState.FAILED
            self.error = e
            raise

        return len(silences)
