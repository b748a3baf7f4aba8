"""タグ付きパラメータからセッター列をコンパイルする"""

from __future__ import annotations

import inspect
import typing
from collections.abc import Callable, Mapping, Sequence
from typing import Annotated, Any, get_args, get_origin

import structlog

from .config import MdcSettings
from .exceptions import MdcSetupError
from .setters import ContextFieldSetter, Setter, TrackingIdSetter
from .stringify import ObjectArrayRenderer, cannot_become_string, renderer_for, unwrap_type
from .tags import FIELD_NAME_PATTERN, LogAs, Tag, TrackingId
from .wrapper import CompiledWrapper

logger = structlog.get_logger(__name__)

TagSpec = Tag | Sequence[Tag]

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def describe(fn: Callable[..., Any]) -> str:
    """エラーメッセージ用の関数シグネチャ表記を返す。"""
    function = getattr(fn, "__func__", fn)
    try:
        signature = str(inspect.signature(function, eval_str=True))
    except NameError:
        signature = str(inspect.signature(function))
    except (TypeError, ValueError):
        signature = "(...)"
    module = getattr(function, "__module__", None) or "<unknown>"
    name = getattr(function, "__qualname__", None) or repr(function)
    return f"{module}.{name}{signature}"


def _type_hints(function: Callable[..., Any], signature: inspect.Signature) -> dict[str, Any]:
    try:
        return typing.get_type_hints(function, include_extras=True)
    except (NameError, TypeError):
        # 解決できない前方参照がある場合は文字列でない注釈だけを使う
        return {
            name: p.annotation
            for name, p in signature.parameters.items()
            if p.annotation is not inspect.Parameter.empty and not isinstance(p.annotation, str)
        }


def _as_tags(spec: TagSpec) -> tuple[Any, ...]:
    if isinstance(spec, (list, tuple)):
        return tuple(spec)
    return (spec,)


def scan_tags(fn: Callable[..., Any]) -> dict[str, tuple[Tag, ...]]:
    """Annotated[..., TrackingId()] / Annotated[..., LogAs(...)] からタグを読み取る。"""
    function = getattr(fn, "__func__", fn)
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        return {}
    hints = _type_hints(function, signature)
    found: dict[str, tuple[Tag, ...]] = {}
    for name, hint in hints.items():
        if name == "return" or get_origin(hint) is not Annotated:
            continue
        tags = tuple(m for m in get_args(hint)[1:] if isinstance(m, (TrackingId, LogAs)))
        if tags:
            found[name] = tags
    return found


def _make_setter(
    parameter: inspect.Parameter,
    declared: Any,
    tag: Any,
    settings: MdcSettings,
    method_name: str,
) -> Setter:
    if parameter.kind in _VARIADIC:
        raise ValueError(f"{tag} cannot be used on variadic parameter {parameter.name}")
    if isinstance(tag, TrackingId):
        if unwrap_type(declared) is not str:
            raise ValueError("TrackingId requires a string-typed parameter")
        return TrackingIdSetter(parameter.name, settings.mdc.tracking_id_format)
    if isinstance(tag, LogAs):
        if not tag.name:
            raise ValueError("context field needs a name")
        if not FIELD_NAME_PATTERN.fullmatch(tag.name):
            raise ValueError("context field name contains invalid characters (a-zA-Z0-9-_.)")
        renderer = renderer_for(declared)
        if settings.mdc.warn_unstringifiable:
            checked = renderer.element_type if isinstance(renderer, ObjectArrayRenderer) else declared
            if cannot_become_string(checked):
                logger.warning(
                    "argument type probably doesn't convert to a useful string",
                    type=repr(checked),
                    function=method_name,
                    parameter=parameter.name,
                )
        return ContextFieldSetter(parameter.name, tag.name, tag.include_null, renderer)
    raise ValueError(f"unsupported tag: {tag!r}")


def compile_wrapper(
    fn: Callable[..., Any],
    tags: Mapping[str, TagSpec],
    *,
    settings: MdcSettings | None = None,
) -> CompiledWrapper:
    """関数とパラメータタグから CompiledWrapper を作る。

    セッターはパラメータの宣言順に並ぶ。1 つのパラメータでは TrackingId が
    LogAs より先に実行される。

    Args:
        fn: ラップ対象の関数 (バウンドメソッドの場合は __func__ を使う)
        tags: パラメータ名からタグ (またはタグの列) へのマッピング
        settings: 設定。省略時はデフォルト値

    Raises:
        MdcSetupError: 不正なタグがあった場合。全てのエラーを集約する
    """
    settings = settings or MdcSettings()
    function = getattr(fn, "__func__", fn)
    method_name = describe(function)
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError) as e:
        raise MdcSetupError([f"cannot inspect signature: {e} for {method_name}"]) from e
    hints = _type_hints(function, signature)
    by_param = {name: _as_tags(spec) for name, spec in tags.items()}

    errors: list[str] = []
    for name in by_param:
        if name not in signature.parameters:
            errors.append(f"no such parameter: {name} for {method_name}")

    setters: list[Setter] = []
    for parameter in signature.parameters.values():
        param_tags = by_param.get(parameter.name, ())
        declared = hints.get(parameter.name, Any)
        for tag in sorted(param_tags, key=lambda t: not isinstance(t, TrackingId)):
            try:
                setters.append(_make_setter(parameter, declared, tag, settings, method_name))
            except ValueError as e:
                errors.append(f"{e} for {method_name}")

    if errors:
        raise MdcSetupError(errors)
    logger.info("wrapped for mdc logging", function=method_name)
    return CompiledWrapper(function, signature, tuple(setters))
