"""
Slack Web API 客户端

通过 chat.postMessage 把报告发送到指定频道。
Slack 对大多数应用层错误仍返回 HTTP 200，因此需要检查响应体中的 ok 字段。
"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from silence_reporter.config import SlackApiConfig, get_settings
from silence_reporter.exceptions import (
    ConnectivityError,
    DeserializationError,
    PublishRejectedError,
    UpstreamError,
)
from silence_reporter.models.slack import SlackApiResponse, SlackPostMessage

logger = logging.getLogger(__name__)


class SlackClient:
    """Slack Web API 客户端"""

    def __init__(
        self,
        bot_token: str,
        http_client: httpx.Client,
        config: Optional[SlackApiConfig] = None
    ):
        """
        初始化客户端

        Args:
            bot_token: Slack Bot Token
            http_client: 由调用方创建并负责关闭的 HTTP 客户端
            config: Slack API 配置
        """
        self.config = config or get_settings().slack
        self._bot_token = bot_token
        self._client = http_client

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._bot_token}",
            "Content-Type": "application/json; charset=utf-8",
        }

    def post_message(
        self,
        channel_id: str,
        text: str,
        blocks: Optional[List[Dict[str, Any]]] = None
    ) -> None:
        """
        发送消息

        Args:
            channel_id: 频道ID
            text: 消息文本
            blocks: 可选的 Block Kit 结构

        Raises:
            ConnectivityError: 网络错误或超时
            UpstreamError: 状态码不是 200
            DeserializationError: 响应体不是合法的 Slack API 响应
            PublishRejectedError: ok=false
        """
        url = self.config.post_message_url
        message = SlackPostMessage(channel=channel_id, text=text, blocks=blocks)
        # 保留原始 Unicode 字符
        content = json.dumps(message.to_dict(), ensure_ascii=False).encode("utf-8")

        logger.info(f"Posting report to Slack channel {channel_id}")
        logger.debug(f"Slack payload size: {len(content)} bytes")

        try:
            response = self._client.post(url, content=content, headers=self._headers)
        except httpx.InvalidURL as e:
            raise ConnectivityError(f"Invalid Slack API URL: {e}", url) from e
        except httpx.TimeoutException as e:
            raise ConnectivityError(f"Request to Slack API timed out: {e}", url) from e
        except httpx.TransportError as e:
            raise ConnectivityError(f"Failed to connect to Slack API: {e}", url) from e
        except httpx.RequestError as e:
            raise ConnectivityError(f"Request to Slack API failed: {e}", url) from e

        if response.status_code != 200:
            raise UpstreamError(url, response.status_code, response.text)

        try:
            result = SlackApiResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise DeserializationError(f"Unexpected Slack API response: {e}", url) from e

        if not result.ok:
            raise PublishRejectedError(result.error or "unknown_error")

        logger.info("Report sent to Slack successfully")
