"""MDC に書き込む値の文字列化

宣言型から登録時にレンダラーを 1 つ選び、呼び出し時は選択済みのレンダラーで
値を描画する。配列は "[1, 2, 3]" 形式、配列中の None は "null" になる。
"""

from __future__ import annotations

import array
import collections.abc
import types
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Union, get_args, get_origin

_PRIMITIVE_TYPES: tuple[type, ...] = (str, int, float, bool, complex, bytes, bytearray, Decimal)
_ARRAY_ORIGINS: frozenset[Any] = frozenset(
    {list, tuple, collections.abc.Sequence, collections.abc.MutableSequence}
)
# 入れ子配列の描画で再帰する実行時の型
_ARRAY_VALUE_TYPES: tuple[type, ...] = (list, tuple, array.array, bytes, bytearray)

NULL = "null"


def to_text(value: Any) -> str:
    """値のテキスト表現。None は "null"、真偽値は "true" / "false" になる。"""
    if value is None:
        return NULL
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class PrimitiveKind(Enum):
    """プリミティブ配列の要素種別。値は対応する array モジュールの型コード。"""

    FLOAT64 = "d"
    FLOAT32 = "f"
    INT64 = "q"
    INT32 = "i"
    INT16 = "h"
    INT8 = "b"
    CHAR = "u"
    BOOLEAN = "?"

    @classmethod
    def from_typecode(cls, typecode: str) -> PrimitiveKind:
        """array.array の型コードから要素種別を求める。"""
        return _TYPECODE_KINDS.get(typecode, cls.INT64)

    def format(self, element: Any) -> str:
        # 要素の値は変換しない
        return to_text(element)


_TYPECODE_KINDS: dict[str, PrimitiveKind] = {
    "b": PrimitiveKind.INT8,
    "B": PrimitiveKind.INT8,
    "h": PrimitiveKind.INT16,
    "H": PrimitiveKind.INT16,
    "i": PrimitiveKind.INT32,
    "I": PrimitiveKind.INT32,
    "l": PrimitiveKind.INT64,
    "L": PrimitiveKind.INT64,
    "q": PrimitiveKind.INT64,
    "Q": PrimitiveKind.INT64,
    "f": PrimitiveKind.FLOAT32,
    "d": PrimitiveKind.FLOAT64,
    "u": PrimitiveKind.CHAR,
    "w": PrimitiveKind.CHAR,
}


def _bracket(parts: collections.abc.Iterable[str]) -> str:
    return "[" + ", ".join(parts) + "]"


@dataclass(frozen=True)
class ScalarRenderer:
    """配列以外の値をそのまま文字列化する。"""

    def render(self, value: Any) -> str:
        return to_text(value)


@dataclass(frozen=True)
class PrimitiveArrayRenderer:
    """要素種別が既知のプリミティブ配列。"""

    kind: PrimitiveKind

    def render(self, value: Any) -> str:
        return _bracket(self.kind.format(e) for e in value)


@dataclass(frozen=True)
class TypedArrayRenderer:
    """array.array。要素種別は値の型コードで決まる。"""

    def render(self, value: Any) -> str:
        kind = PrimitiveKind.from_typecode(getattr(value, "typecode", "q"))
        return _bracket(kind.format(e) for e in value)


@dataclass(frozen=True)
class ObjectArrayRenderer:
    """入れ子でないオブジェクト配列。"""

    element_type: Any = Any

    def render(self, value: Any) -> str:
        return _bracket(to_text(e) for e in value)


@dataclass(frozen=True)
class NestedArrayRenderer:
    """配列の配列。任意の深さまで再帰して描画する。"""

    def render(self, value: Any) -> str:
        return _render_deep(value, set())


Renderer = (
    ScalarRenderer
    | PrimitiveArrayRenderer
    | TypedArrayRenderer
    | ObjectArrayRenderer
    | NestedArrayRenderer
)


def _render_deep(value: Any, seen: set[int]) -> str:
    # 自己参照している配列は "[...]" と描画する
    if id(value) in seen:
        return "[...]"
    seen.add(id(value))
    parts: list[str] = []
    for element in value:
        if isinstance(element, _ARRAY_VALUE_TYPES):
            parts.append(_render_deep(element, seen))
        else:
            parts.append(to_text(element))
    seen.discard(id(value))
    return _bracket(parts)


def unwrap_type(declared_type: Any) -> Any:
    """Annotated と Optional を取り除いた型を返す。"""
    tp = declared_type
    while True:
        origin = get_origin(tp)
        if origin is Annotated:
            tp = get_args(tp)[0]
            continue
        if origin is Union or origin is types.UnionType:
            args = [a for a in get_args(tp) if a is not type(None)]
            if len(args) == 1:
                tp = args[0]
                continue
        return tp


def is_array_type(tp: Any) -> bool:
    """配列として描画する型かどうか。str は配列として扱わない。"""
    if tp in (bytes, bytearray, array.array) or tp in _ARRAY_ORIGINS:
        return True
    return get_origin(tp) in _ARRAY_ORIGINS


def _element_type(tp: Any) -> Any:
    args = get_args(tp)
    if not args:
        return Any
    if get_origin(tp) is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
        if all(a == args[0] for a in args):
            return args[0]
        return Any
    return args[0]


def _primitive_kind(tp: Any) -> PrimitiveKind | None:
    # bool は int のサブクラスなので先に判定する
    if tp is bool:
        return PrimitiveKind.BOOLEAN
    if tp is int:
        return PrimitiveKind.INT64
    if tp is float:
        return PrimitiveKind.FLOAT64
    return None


def renderer_for(declared_type: Any) -> Renderer:
    """宣言型に対応するレンダラーを選択する。"""
    tp = unwrap_type(declared_type)
    if tp is array.array:
        return TypedArrayRenderer()
    if tp in (bytes, bytearray):
        return PrimitiveArrayRenderer(PrimitiveKind.INT8)
    if not is_array_type(tp):
        return ScalarRenderer()
    element = unwrap_type(_element_type(tp))
    if element is Any or is_array_type(element):
        return NestedArrayRenderer()
    kind = _primitive_kind(element)
    if kind is not None:
        return PrimitiveArrayRenderer(kind)
    return ObjectArrayRenderer(element)


def cannot_become_string(declared_type: Any) -> bool:
    """str() で意味のある文字列にならない型かどうかを判定する。

    プリミティブでも配列でもなく、__str__ も __repr__ も object から
    オーバーライドしていないクラスの場合に True を返す。警告の判断にのみ使う。
    """
    tp = unwrap_type(declared_type)
    if tp is Any or is_array_type(tp) or not isinstance(tp, type) or get_origin(tp) is not None:
        return False
    if issubclass(tp, _PRIMITIVE_TYPES):
        return False
    return tp.__str__ is object.__str__ and tp.__repr__ is object.__repr__
