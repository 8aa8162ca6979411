"""
Alertmanager API 客户端

查询 Prometheus Alertmanager 当前的静默规则。
每次运行只请求一次，不做重试，重试由外部调度器负责。
"""

import logging
from typing import List

import httpx
from pydantic import ValidationError

from silence_reporter.exceptions import ConnectivityError, DeserializationError, UpstreamError
from silence_reporter.models.silence import SilenceRecord

logger = logging.getLogger(__name__)


class AlertmanagerClient:
    """Alertmanager API 客户端"""

    api_version = "v2"

    def __init__(self, base_url: str, http_client: httpx.Client):
        """
        初始化客户端

        Args:
            base_url: Alertmanager 基础地址
            http_client: 由调用方创建并负责关闭的 HTTP 客户端
        """
        self.base_url = base_url.rstrip("/")
        self._client = http_client

    @property
    def silences_url(self) -> str:
        """静默API端点"""
        return f"{self.base_url}/api/{self.api_version}/silences"

    def get_silences(self) -> List[SilenceRecord]:
        """
        获取所有静默规则

        保持 Alertmanager 返回的顺序，不做排序和分页。

        Returns:
            静默规则列表，可能为空

        Raises:
            ConnectivityError: 网络错误或超时
            UpstreamError: 状态码不是 200
            DeserializationError: 响应体不是合法的静默规则数组
        """
        url = self.silences_url
        logger.info(f"Fetching silences from Alertmanager: {url}")

        try:
            response = self._client.get(url)
        except httpx.InvalidURL as e:
            raise ConnectivityError(f"Invalid Alertmanager URL: {e}", url) from e
        except httpx.TimeoutException as e:
            raise ConnectivityError(f"Request to Alertmanager timed out: {e}", url) from e
        except httpx.TransportError as e:
            raise ConnectivityError(f"Failed to connect to Alertmanager: {e}", url) from e
        except httpx.RequestError as e:
            raise ConnectivityError(f"Request to Alertmanager failed: {e}", url) from e

        if response.status_code != 200:
            raise UpstreamError(url, response.status_code, response.text)

        silences = self._parse_silences(response, url)
        logger.info(f"Found {len(silences)} silence(s)")
        return silences

    @staticmethod
    def _parse_silences(response: httpx.Response, url: str) -> List[SilenceRecord]:
        """将响应体解析为静默规则列表"""
        try:
            payload = response.json()
        except ValueError as e:
            raise DeserializationError(f"Alertmanager response is not valid JSON: {e}", url) from e

        if not isinstance(payload, list):
            raise DeserializationError(
                f"Expected a JSON array of silences, got {type(payload).__name__}", url
            )

        try:
            return [SilenceRecord.model_validate(item) for item in payload]
        except ValidationError as e:
            raise DeserializationError(f"Unexpected silence format: {e}", url) from e
