"""contextvars を使った診断コンテキスト (MDC)

コンテキストはスレッドおよび asyncio タスクごとに独立している。格納する
マッピングは書き換えず常に新しい dict で置き換えるため、スナップショットは
取得時点の値をそのまま保持する。
"""

from __future__ import annotations

import contextvars
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass

_mdc_var: contextvars.ContextVar[Mapping[str, str] | None] = contextvars.ContextVar(
    "k1s0_mdc", default=None
)


@dataclass(frozen=True)
class MdcSnapshot:
    """MDC の状態のスナップショット。

    fields が None の場合は「コンテキストが存在しなかった」状態を表し、
    空のマッピングとは区別される。
    """

    fields: Mapping[str, str] | None

    @property
    def existed(self) -> bool:
        return self.fields is not None


def snapshot() -> MdcSnapshot:
    """現在の MDC のスナップショットを返す。"""
    return MdcSnapshot(_mdc_var.get())


def put(key: str, value: str) -> None:
    """MDC にフィールドをセットする。"""
    current = _mdc_var.get()
    updated = dict(current) if current is not None else {}
    updated[key] = value
    _mdc_var.set(updated)


def get(key: str) -> str | None:
    """MDC からフィールドを取得する。"""
    current = _mdc_var.get()
    if current is None:
        return None
    return current.get(key)


def remove(key: str) -> None:
    """MDC からフィールドを削除する。"""
    current = _mdc_var.get()
    if current is None or key not in current:
        return
    updated = dict(current)
    del updated[key]
    _mdc_var.set(updated)


def clear() -> None:
    """MDC を「存在しない」状態に戻す。"""
    _mdc_var.set(None)


def restore(snap: MdcSnapshot) -> None:
    """スナップショットの状態に MDC を丸ごと戻す。"""
    if snap.fields is None:
        clear()
    else:
        _mdc_var.set(snap.fields)


def get_copy() -> dict[str, str] | None:
    """MDC のコピーを返す。コンテキストが存在しない場合は None。"""
    current = _mdc_var.get()
    if current is None:
        return None
    return dict(current)


@contextmanager
def preserved() -> Iterator[MdcSnapshot]:
    """ブロック終了時に MDC を開始時の状態へ必ず戻す。"""
    snap = snapshot()
    try:
        yield snap
    finally:
        restore(snap)
