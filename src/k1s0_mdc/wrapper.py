"""呼び出しのラップ (スナップショット → セッター適用 → 実行 → 復元)"""

from __future__ import annotations

import functools
import inspect
from collections.abc import AsyncGenerator, Callable, Generator
from dataclasses import dataclass
from typing import Any

from . import mdc
from .setters import Setter


@dataclass(frozen=True)
class CompiledWrapper:
    """1 つの関数に対してコンパイル済みのセッター列。

    登録時に一度だけ作られ、以降は同時に実行される全ての呼び出しで共有される。
    """

    function: Callable[..., Any]
    signature: inspect.Signature
    setters: tuple[Setter, ...]

    def run_setters(self, arguments: dict[str, Any]) -> None:
        for setter in self.setters:
            setter(arguments)

    def apply(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> inspect.BoundArguments:
        """引数を束縛し、全てのセッターをパラメータ順に実行する。"""
        bound = self.signature.bind(*args, **kwargs)
        bound.apply_defaults()
        self.run_setters(bound.arguments)
        return bound

    def invoke(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        """同期関数を呼び出す。MDC は成功・失敗に関わらず呼び出し前の状態に戻る。"""
        with mdc.preserved():
            bound = self.apply(args, kwargs)
            return self.function(*bound.args, **bound.kwargs)

    async def ainvoke(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        """コルーチン関数を呼び出す。MDC の復元は await の完了時に行われる。"""
        with mdc.preserved():
            bound = self.apply(args, kwargs)
            return await self.function(*bound.args, **bound.kwargs)

    def iterate(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Generator[Any, Any, Any]:
        """ジェネレーター関数を呼び出す。

        引数の束縛とトラッキング ID の生成は呼び出し時に一度だけ行う。
        MDC のフィールドはジェネレーター本体が実行される各ステップの間だけ
        設定され、yield で呼び出し元に制御が戻るたびに元の状態に戻る。
        """
        with mdc.preserved():
            bound = self.apply(args, kwargs)
        return self._drive(self.function(*bound.args, **bound.kwargs), bound.arguments)

    def aiterate(
        self, args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> AsyncGenerator[Any, Any]:
        """非同期ジェネレーター関数を呼び出す。MDC の扱いは iterate と同じ。"""
        with mdc.preserved():
            bound = self.apply(args, kwargs)
        return self._adrive(self.function(*bound.args, **bound.kwargs), bound.arguments)

    def _drive(self, gen: Generator[Any, Any, Any], arguments: dict[str, Any]) -> Generator[Any, Any, Any]:
        step: Callable[[], Any] = functools.partial(gen.send, None)
        while True:
            with mdc.preserved():
                self.run_setters(arguments)
                try:
                    item = step()
                except StopIteration as e:
                    return e.value
            try:
                sent = yield item
            except GeneratorExit:
                with mdc.preserved():
                    self.run_setters(arguments)
                    gen.close()
                raise
            except BaseException as e:
                step = functools.partial(gen.throw, e)
            else:
                step = functools.partial(gen.send, sent)

    async def _adrive(
        self, agen: AsyncGenerator[Any, Any], arguments: dict[str, Any]
    ) -> AsyncGenerator[Any, Any]:
        step: Callable[[], Any] = functools.partial(agen.asend, None)
        while True:
            with mdc.preserved():
                self.run_setters(arguments)
                try:
                    item = await step()
                except StopAsyncIteration:
                    return
            try:
                sent = yield item
            except GeneratorExit:
                with mdc.preserved():
                    self.run_setters(arguments)
                    await agen.aclose()
                raise
            except BaseException as e:
                step = functools.partial(agen.athrow, e)
            else:
                step = functools.partial(agen.asend, sent)

    def wrap(self) -> Callable[..., Any]:
        """関数の種類に応じたラッパー関数を返す。

        ジェネレーター関数・非同期ジェネレーター関数のラッパーは、引数を
        即座に束縛してジェネレーターを返す通常の関数になる。
        """
        fn = self.function
        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                return await self.ainvoke(args, kwargs)

            return async_wrapper

        if inspect.isasyncgenfunction(fn):

            @functools.wraps(fn)
            def asyncgen_wrapper(*args: Any, **kwargs: Any) -> AsyncGenerator[Any, Any]:
                return self.aiterate(args, kwargs)

            return asyncgen_wrapper

        if inspect.isgeneratorfunction(fn):

            @functools.wraps(fn)
            def generator_wrapper(*args: Any, **kwargs: Any) -> Generator[Any, Any, Any]:
                return self.iterate(args, kwargs)

            return generator_wrapper

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return self.invoke(args, kwargs)

        return wrapper
