"""トラッキング ID 生成ユーティリティ"""

from __future__ import annotations

import uuid
from typing import Literal

TrackingIdFormat = Literal["uuid", "hex"]


def generate_tracking_id(format: TrackingIdFormat = "uuid") -> str:
    """ランダムなトラッキング ID を生成する。

    Args:
        format: "uuid" は UUID v4 文字列、"hex" はハイフンなし 32 文字

    Returns:
        生成したトラッキング ID
    """
    if format == "hex":
        return uuid.uuid4().hex
    return str(uuid.uuid4())
