"""
服务模块
"""

from .alertmanager_client import AlertmanagerClient
from .report_service import RunState, SilenceReportService
from .slack_client import SlackClient

__all__ = [
    "AlertmanagerClient",
    "RunState",
    "SilenceReportService",
    "SlackClient",
]
