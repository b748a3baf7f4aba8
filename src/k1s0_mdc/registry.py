"""関数 → CompiledWrapper のレジストリ"""

from __future__ import annotations

import types
from collections.abc import Callable, Mapping
from typing import Any

import structlog

from .compiler import TagSpec, compile_wrapper, scan_tags
from .config import MdcSettings
from .exceptions import MdcError, MdcErrorCodes, MdcSetupError
from .wrapper import CompiledWrapper

logger = structlog.get_logger(__name__)


def _identity(fn: Callable[..., Any]) -> Callable[..., Any]:
    return getattr(fn, "__func__", fn)


class WrapperRegistry:
    """起動時に一度だけ構築される読み取り専用のレジストリ。

    構築後は変更されないため、複数のスレッドやタスクから同期なしで参照できる。
    """

    def __init__(self, wrappers: Mapping[Callable[..., Any], CompiledWrapper]) -> None:
        self._wrappers: Mapping[Callable[..., Any], CompiledWrapper] = types.MappingProxyType(
            dict(wrappers)
        )

    def lookup(self, fn: Callable[..., Any]) -> CompiledWrapper | None:
        """関数に対応する CompiledWrapper を返す。未登録なら None。"""
        return self._wrappers.get(_identity(fn))

    def wrap(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        """MDC を設定するラッパーを返す。未登録の関数はそのまま返す。"""
        compiled = self.lookup(fn)
        if compiled is None:
            return fn
        wrapped = compiled.wrap()
        if isinstance(fn, types.MethodType):
            return types.MethodType(wrapped, fn.__self__)
        return wrapped

    def __contains__(self, fn: object) -> bool:
        return callable(fn) and _identity(fn) in self._wrappers

    def __len__(self) -> int:
        return len(self._wrappers)


class RegistryBuilder:
    """登録フェーズで関数とタグを集め、build() でレジストリを作る。"""

    def __init__(self, settings: MdcSettings | None = None) -> None:
        self._settings = settings or MdcSettings()
        self._entries: dict[Callable[..., Any], dict[str, TagSpec]] = {}
        self._built = False

    def register(
        self,
        fn: Callable[..., Any],
        tags: Mapping[str, TagSpec] | None = None,
        /,
        **tags_by_param: TagSpec,
    ) -> RegistryBuilder:
        """関数とパラメータタグを登録する。検証は build() で行う。"""
        self._check_not_built()
        entry = self._entries.setdefault(_identity(fn), {})
        entry.update(tags or {})
        entry.update(tags_by_param)
        return self

    def scan(self, fn: Callable[..., Any]) -> RegistryBuilder:
        """Annotated のメタデータからタグを読み取って登録する。"""
        tags = scan_tags(fn)
        if tags:
            self.register(fn, tags)
        return self

    def build(self) -> WrapperRegistry:
        """全ての登録をコンパイルしてレジストリを返す。

        Raises:
            MdcSetupError: 1 つ以上のタグが不正な場合。全関数のエラーを集約する
            MdcError: 既に build() 済みの場合
        """
        self._check_not_built()
        self._built = True
        errors: list[str] = []
        wrappers: dict[Callable[..., Any], CompiledWrapper] = {}
        for fn, tags in self._entries.items():
            if not tags:
                continue
            try:
                wrappers[fn] = compile_wrapper(fn, tags, settings=self._settings)
            except MdcSetupError as e:
                errors.extend(e.errors)
        if errors:
            logger.error("mdc setup failed", errors=errors)
            raise MdcSetupError(errors)
        return WrapperRegistry(wrappers)

    def _check_not_built(self) -> None:
        if self._built:
            raise MdcError(
                code=MdcErrorCodes.ALREADY_BUILT,
                message="registry has already been built",
            )
