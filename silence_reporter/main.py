"""
命令行入口

拉取 Alertmanager 静默规则并发送到 Slack，运行一次后退出。
退出码: 0 成功，其余见 silence_reporter.exceptions。
"""

import argparse
import logging
import sys
from typing import List, Optional

from silence_reporter import __version__
from silence_reporter.config import LoggingConfig, get_settings, resolve_config
from silence_reporter.exceptions import ReporterError
from silence_reporter.services.report_service import SilenceReportService

logger = logging.getLogger("silence_reporter")


def setup_logging(config: Optional[LoggingConfig] = None):
    """
    配置日志

    LoggingConfig 只有字符串字段，读取时不会校验失败，
    因此可以在解析其他配置之前调用。
    """
    config = config or LoggingConfig()
    log_format = (
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        if config.format == "text"
        else '{"time": "%(asctime)s", "name": "%(name)s", "level": "%(levelname)s", "message": "%(message)s"}'
    )

    logging.basicConfig(
        level=getattr(logging, config.level.upper(), logging.INFO),
        format=log_format,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # 降低第三方库日志级别，避免请求头中的 token 被输出
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="silence-reporter",
        description="Fetch Alertmanager silences and report them to Slack",
    )
    parser.add_argument(
        "-a", "--alertmanager-url",
        help="Alertmanager URL [env: ALERTMANAGER_URL]",
    )
    parser.add_argument(
        "-t", "--slack-bot-token",
        help="Slack bot token [env: SLACK_BOT_TOKEN]",
    )
    parser.add_argument(
        "-c", "--slack-channel-id",
        help="Slack channel ID [env: SLACK_CHANNEL_ID]",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run(argv: Optional[List[str]] = None) -> int:
    """
    执行一次报告并返回退出码

    Args:
        argv: 命令行参数，默认取 sys.argv

    Returns:
        进程退出码
    """
    args = build_parser().parse_args(argv)

    try:
        config = resolve_config(
            alertmanager_url=args.alertmanager_url,
            slack_bot_token=args.slack_bot_token,
            slack_channel_id=args.slack_channel_id,
        )
        settings = get_settings()
        with SilenceReportService(config, settings=settings) as service:
            count = service.run()
    except ReporterError as e:
        logger.error(f"{e.kind}: {e.message}")
        logger.debug(f"{e.kind} details: {e.details}")
        return e.exit_code

    logger.info(f"Reported {count} silence(s)")
    return 0


def main() -> None:
    setup_logging()
    sys.exit(run())


if __name__ == "__main__":
    main()
