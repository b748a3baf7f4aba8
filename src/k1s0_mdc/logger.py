"""structlog ベースのロガー設定と MDC マージ"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger

from . import mdc
from .config import MdcSettings


def merge_mdc(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """現在の MDC フィールドをイベントに追加する structlog プロセッサ。

    イベントに同じキーが明示されている場合はそちらを優先する。
    """
    fields = mdc.get_copy()
    if not fields:
        return event_dict
    fields.update(event_dict)
    return fields


def new_logger(level: str = "INFO", format: str = "json") -> structlog.stdlib.BoundLogger:
    """MDC フィールドを出力する structlog ロガーを返す。

    Args:
        level: ログレベル ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        format: 出力形式 ("json" or "text")

    Returns:
        設定済みの structlog.stdlib.BoundLogger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    renderer: Any = (
        structlog.processors.JSONRenderer() if format == "json" else structlog.dev.ConsoleRenderer()
    )
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        merge_mdc,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if format == "json":
        processors.append(structlog.processors.StackInfoRenderer())
    processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.stdlib.get_logger()


def new_logger_from_settings(settings: MdcSettings) -> structlog.stdlib.BoundLogger:
    """MdcSettings の log セクションに従ってロガーを返す。"""
    return new_logger(level=settings.log.level, format=settings.log.format)
