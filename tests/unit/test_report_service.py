"""
报告服务端到端测试

通过 pytest-httpx 模拟 Alertmanager 和 Slack，覆盖完整流程。
"""

import json

import httpx
import pytest
from pytest_httpx import HTTPXMock

from silence_reporter.exceptions import ConfigError, PublishRejectedError, UpstreamError
from silence_reporter.services.report_formatter import COMMENT_PLACEHOLDER, EMPTY_REPORT_MESSAGE
from silence_reporter.services.report_service import RunState, SilenceReportService

SILENCES_URL = "http://localhost:9093/api/v2/silences"
SLACK_POST_URL = "https://slack.com/api/chat.postMessage"


def _posted_body(httpx_mock: HTTPXMock) -> dict:
    request = httpx_mock.get_request(url=SLACK_POST_URL)
    return json.loads(request.content)


class TestSilenceReportService:
    """完整流程测试"""

    def test_empty_silences(self, reporter_config, slack_ok_response, httpx_mock: HTTPXMock):
        """没有静默规则时发送固定文本"""
        httpx_mock.add_response(url=SILENCES_URL, method="GET", json=[])
        httpx_mock.add_response(url=SLACK_POST_URL, method="POST", json=slack_ok_response)

        with SilenceReportService(reporter_config) as service:
            count = service.run()

        assert count == 0
        assert service.state == RunState.PUBLISHED
        body = _posted_body(httpx_mock)
        assert body["text"] == EMPTY_REPORT_MESSAGE
        assert body["channel"] == "C0123456"

    def test_single_silence(self, reporter_config, silence_payload, slack_ok_response, httpx_mock: HTTPXMock):
        """单条静默规则"""
        httpx_mock.add_response(url=SILENCES_URL, method="GET", json=[silence_payload])
        httpx_mock.add_response(url=SLACK_POST_URL, method="POST", json=slack_ok_response)

        with SilenceReportService(reporter_config) as service:
            assert service.run() == 1

        text = _posted_body(httpx_mock)["text"]
        assert "s1" in text
        assert "alice" in text
        assert COMMENT_PLACEHOLDER in text
        assert "severity=critical" in text

    def test_fetch_failure_skips_publish(self, reporter_config, httpx_mock: HTTPXMock):
        """Alertmanager 返回 503 时不发送消息"""
        httpx_mock.add_response(url=SILENCES_URL, method="GET", status_code=503, text="unavailable")

        service = SilenceReportService(reporter_config)
        with pytest.raises(UpstreamError) as exc_info:
            service.run()
        service.close()

        assert exc_info.value.status_code == 503
        assert service.state == RunState.FAILED
        assert service.error is exc_info.value
        assert len(httpx_mock.get_requests()) == 1

    def test_publish_rejected(self, reporter_config, silence_payload, httpx_mock: HTTPXMock):
        """Slack ok=false 时失败且不重试"""
        httpx_mock.add_response(url=SILENCES_URL, method="GET", json=[silence_payload])
        httpx_mock.add_response(
            url=SLACK_POST_URL,
            method="POST",
            json={"ok": False, "error": "channel_not_found"}
        )

        with SilenceReportService(reporter_config) as service:
            with pytest.raises(PublishRejectedError) as exc_info:
                service.run()

        assert exc_info.value.error_code == "channel_not_found"
        assert service.state == RunState.FAILED
        assert len(httpx_mock.get_requests(url=SLACK_POST_URL)) == 1

    def test_blocks_dropped_when_over_limit(self, reporter_config, silence_payload, slack_ok_response,
                                            httpx_mock: HTTPXMock):
        """超过 Slack block 上限时只发送文本"""
        payload = [{**silence_payload, "id": f"s{i}"} for i in range(30)]
        httpx_mock.add_response(url=SILENCES_URL, method="GET", json=payload)
        httpx_mock.add_response(url=SLACK_POST_URL, method="POST", json=slack_ok_response)

        with SilenceReportService(reporter_config) as service:
            assert service.run() == 30

        body = _posted_body(httpx_mock)
        assert "blocks" not in body
        assert body["text"].count("*ID:*") == 30

    def test_injected_client_not_closed(self, reporter_config, slack_ok_response, httpx_mock: HTTPXMock):
        """外部传入的客户端由调用方关闭"""
        httpx_mock.add_response(url=SILENCES_URL, method="GET", json=[])
        httpx_mock.add_response(url=SLACK_POST_URL, method="POST", json=slack_ok_response)

        with httpx.Client() as http_client:
            with SilenceReportService(reporter_config, http_client=http_client) as service:
                service.run()
            assert not http_client.is_closed

    def test_blocks_dropped_when_section_too_long(self, reporter_config, silence_payload, slack_ok_response,
                                                  httpx_mock: HTTPXMock):
        """单个 section 超过 3000 字符时只发送文本"""
        matchers = [
            {"name": f"label_{i}", "value": "v" * 40, "isRegex": False, "isEqual": True}
            for i in range(80)
        ]
        httpx_mock.add_response(url=SILENCES_URL, method="GET", json=[{**silence_payload, "matchers": matchers}])
        httpx_mock.add_response(url=SLACK_POST_URL, method="POST", json=slack_ok_response)

        with SilenceReportService(reporter_config) as service:
            assert service.run() == 1

        body = _posted_body(httpx_mock)
        assert "blocks" not in body
        assert "label_79=" in body["text"]

    def test_blocks_sent_when_within_limits(self, reporter_config, silence_payload, slack_ok_response,
                                            httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=SILENCES_URL, method="GET", json=[silence_payload])
        httpx_mock.add_response(url=SLACK_POST_URL, method="POST", json=slack_ok_response)

        with SilenceReportService(reporter_config) as service:
            service.run()

        assert _posted_body(httpx_mock)["blocks"][0]["type"] == "header"

    def test_state_after_init(self, reporter_config):
        """构造完成后处于 CONFIG_RESOLVED"""
        with SilenceReportService(reporter_config) as service:
            assert service.state == RunState.CONFIG_RESOLVED
            assert service.error is None

    def test_invalid_settings_raise_config_error(self, reporter_config, monkeypatch):
        monkeypatch.setenv("HTTP_TIMEOUT", "abc")

        with pytest.raises(ConfigError):
            SilenceReportService(reporter_config)
