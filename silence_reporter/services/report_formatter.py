"""
静默规则报告格式化

把静默规则列表转换为 Slack mrkdwn 文本和 Block Kit 结构。
本模块只有纯函数，不做任何 I/O。
"""

import re
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Sequence

from silence_reporter.models.silence import SilenceRecord

EMPTY_REPORT_MESSAGE = "No active silences in Alertmanager."
REPORT_TITLE = "Alertmanager Silences Report"
COMMENT_PLACEHOLDER = "_(no comment)_"

# 长注释截断长度
COMMENT_PREVIEW_LENGTH = 100

# 视为"无注释"的占位写法
_BLANK_COMMENTS = {"", "-", "."}

# 汇总行中的状态顺序
_SUMMARY_STATES = ("active", "pending", "expired")

_FRACTION_RE = re.compile(r"(T\d{2}:\d{2}:\d{2})\.\d+")

# Slack 单条消息最多 50 个 block，每个 section 文本最多 3000 字符
SLACK_MAX_BLOCKS = 50
SLACK_MAX_SECTION_TEXT = 3000


def format_timestamp(timestamp: str) -> str:
    """
    把 ISO-8601 时间格式化为易读形式

    "2024-01-01T10:00:00.123Z" -> "2024-01-01 10:00:00 UTC"
    无法解析的字符串原样返回。
    """
    # 丢弃秒的小数部分(Alertmanager 可能输出纳秒精度)
    normalized = _FRACTION_RE.sub(r"\1", timestamp.strip()).replace("Z", "+00:00")
    try:
        dt = datetime.fromisoformat(normalized)
    except ValueError:
        return timestamp

    text = dt.strftime("%Y-%m-%d %H:%M:%S")
    offset = dt.utcoffset()
    if offset is None:
        return text
    if not offset:
        return f"{text} UTC"
    return f"{text} {dt.strftime('%z')}"


def format_comment(comment: str) -> str:
    """
    注释为空时返回占位文本，过长时截断

    换行和连续空白合并为单个空格；含下划线的注释不加斜体，
    否则 mrkdwn 的 _..._ 会被提前闭合。
    """
    comment = " ".join(comment.split())
    if comment in _BLANK_COMMENTS:
        return COMMENT_PLACEHOLDER
    if len(comment) > COMMENT_PREVIEW_LENGTH:
        comment = f"{comment[:COMMENT_PREVIEW_LENGTH]}..."
    if "_" in comment:
        return comment
    return f"_{comment}_"


def format_summary(silences: Sequence[SilenceRecord]) -> str:
    """按状态统计的汇总行"""
    counts = Counter(silence.state for silence in silences)
    parts = [f"*Total:* {len(silences)}"]
    parts.extend(f"*{state.capitalize()}:* {counts.get(state, 0)}" for state in _SUMMARY_STATES)
    return " | ".join(parts)


def format_silence(silence: SilenceRecord) -> str:
    """单条静默规则的文本块"""
    lines = [
        f"*ID:* `{silence.id}`",
        f"*Status:* {silence.state}, *CreatedBy:* {silence.created_by}",
        f"*Date:* {format_timestamp(silence.starts_at)} → {format_timestamp(silence.ends_at)}",
        f"*Comment:* {format_comment(silence.comment)}",
        "*Matchers:*",
    ]
    lines.extend(f"  • `{matcher.render()}`" for matcher in silence.matchers)
    return "\n".join(lines)


def format_report(silences: Sequence[SilenceRecord]) -> str:
    """
    生成完整的报告文本

    为空时只返回 EMPTY_REPORT_MESSAGE；否则依次输出标题、
    汇总行以及每条静默规则(保持输入顺序)。

    Args:
        silences: 静默规则列表

    Returns:
        Slack mrkdwn 文本
    """
    if not silences:
        return EMPTY_REPORT_MESSAGE

    sections = [
        f"*{REPORT_TITLE}: {len(silences)} silence(s)*",
        format_summary(silences),
    ]
    sections.extend(format_silence(silence) for silence in silences)
    return "\n\n".join(sections)


def _section(text: str) -> Dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def build_report_blocks(silences: Sequence[SilenceRecord]) -> List[Dict[str, Any]]:
    """
    生成 Block Kit 结构

    标题 + 汇总 + 分隔线，之后每条静默规则一个 section 并以分隔线结尾。
    """
    blocks: List[Dict[str, Any]] = [
        {"type": "header", "text": {"type": "plain_text", "text": REPORT_TITLE}},
    ]

    if not silences:
        blocks.append(_section(EMPTY_REPORT_MESSAGE))
        return blocks

    blocks.append(_section(format_summary(silences)))
    blocks.append({"type": "divider"})

    for silence in silences:
        blocks.append(_section(format_silence(silence)))
        blocks.append({"type": "divider"})

    return blocks


def blocks_within_slack_limits(blocks: Sequence[Dict[str, Any]]) -> bool:
    """Block 数量和每个 section 的文本长度都不超过 Slack 限制"""
    if len(blocks) > SLACK_MAX_BLOCKS:
        return False
    return all(
        len(block["text"]["text"]) <= SLACK_MAX_SECTION_TEXT
        for block in blocks
        if block["type"] == "section"
    )
