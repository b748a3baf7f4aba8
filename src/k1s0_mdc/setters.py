"""呼び出しごとに実行されるセッター"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from . import mdc
from .generator import TrackingIdFormat, generate_tracking_id
from .stringify import NULL, Renderer


@dataclass(frozen=True)
class TrackingIdSetter:
    """引数が None または空白のみの場合に新しいトラッキング ID を埋める。"""

    param: str
    format: TrackingIdFormat = "uuid"

    def __call__(self, arguments: dict[str, Any]) -> None:
        value = arguments.get(self.param)
        if value is None or (isinstance(value, str) and not value.strip()):
            arguments[self.param] = generate_tracking_id(self.format)


@dataclass(frozen=True)
class ContextFieldSetter:
    """引数の値を文字列化して MDC フィールドに書き込む。

    値が None の場合、include_null なら "null" を書き込み、そうでなければ
    既存のフィールドには触れない。
    """

    param: str
    field: str
    include_null: bool
    renderer: Renderer

    def __call__(self, arguments: dict[str, Any]) -> None:
        value = arguments.get(self.param)
        if value is not None:
            mdc.put(self.field, self.renderer.render(value))
        elif self.include_null:
            mdc.put(self.field, NULL)


Setter = TrackingIdSetter | ContextFieldSetter
