"""パラメータに付与するメタデータタグ"""

from __future__ import annotations

import re
from dataclasses import dataclass

FIELD_NAME_PATTERN = re.compile(r"[-_.a-zA-Z0-9]+")


@dataclass(frozen=True)
class TrackingId:
    """トラッキング ID を保持する str パラメータを示すタグ。

    値が None または空白のみの場合、呼び出し前に新しい ID で置き換えられる。
    """

    def __str__(self) -> str:
        return "TrackingId"


@dataclass(frozen=True)
class LogAs:
    """パラメータ値を MDC フィールド name として記録するタグ。"""

    name: str
    include_null: bool = False

    def __str__(self) -> str:
        return f"LogAs({self.name!r})"


Tag = TrackingId | LogAs
