"""
数据模型模块
"""

from .silence import SilenceMatcher, SilenceRecord, SilenceStatus
from .slack import SlackApiResponse, SlackPostMessage

__all__ = [
    "SilenceMatcher",
    "SilenceRecord",
    "SilenceStatus",
    "SlackApiResponse",
    "SlackPostMessage",
]
