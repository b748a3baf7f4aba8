"""レジストリのユニットテスト"""

from __future__ import annotations

from typing import Annotated

import pytest
from k1s0_mdc import mdc
from k1s0_mdc.exceptions import MdcError, MdcErrorCodes, MdcSetupError
from k1s0_mdc.registry import RegistryBuilder
from k1s0_mdc.tags import LogAs, TrackingId


def lookup_user(user_id: str) -> str | None:
    return mdc.get("userId")


def untagged(value: str) -> str:
    return value


def bad_tracking(count: int) -> None:
    pass


def bad_name(value: str) -> None:
    pass


def ping(
    sleep: Annotated[int, LogAs("sleep")] = 0,
    tracking_id: Annotated[str | None, TrackingId(), LogAs("trackingId")] = None,
) -> str | None:
    return tracking_id


class Service:
    def handle(self, order_id: str) -> str | None:
        return mdc.get("orderId")


def test_build_and_lookup() -> None:
    """登録した関数の CompiledWrapper が取得できること。"""
    registry = RegistryBuilder().register(lookup_user, user_id=LogAs("userId")).build()
    compiled = registry.lookup(lookup_user)
    assert compiled is not None
    assert compiled.function is lookup_user
    assert lookup_user in registry
    assert len(registry) == 1


def test_wrap_registered_function() -> None:
    """wrap した関数の呼び出し中に MDC が設定されること。"""
    registry = RegistryBuilder().register(lookup_user, {"user_id": LogAs("userId")}).build()
    assert registry.wrap(lookup_user)("u-1") == "u-1"
    assert mdc.get_copy() is None


def test_unregistered_function_passes_through() -> None:
    """未登録の関数はそのまま返されること。"""
    registry = RegistryBuilder().build()
    assert registry.lookup(untagged) is None
    assert registry.wrap(untagged) is untagged
    assert untagged not in registry


def test_register_without_tags_is_pass_through() -> None:
    """タグなしで登録した関数はレジストリに入らないこと。"""
    registry = RegistryBuilder().register(untagged).build()
    assert registry.wrap(untagged) is untagged
    assert len(registry) == 0


def test_errors_aggregated_across_functions() -> None:
    """全ての関数のエラーが 1 つの MdcSetupError に集約されること。"""
    builder = (
        RegistryBuilder()
        .register(lookup_user, user_id=LogAs("userId"))
        .register(bad_tracking, count=TrackingId())
        .register(bad_name, value=LogAs("bad name"))
    )
    with pytest.raises(MdcSetupError) as exc_info:
        builder.build()
    errors = exc_info.value.errors
    assert len(errors) == 2
    assert "bad_tracking" in errors[0]
    assert "bad_name" in errors[1]
    assert str(exc_info.value).startswith(f"{MdcErrorCodes.SETUP}: ")


def test_build_only_once() -> None:
    """build() 後の build() / register() がエラーになること。"""
    builder = RegistryBuilder()
    builder.build()
    with pytest.raises(MdcError) as exc_info:
        builder.build()
    assert exc_info.value.code == MdcErrorCodes.ALREADY_BUILT
    with pytest.raises(MdcError):
        builder.register(lookup_user, user_id=LogAs("userId"))


def test_scan_annotated_function() -> None:
    """Annotated のタグで登録できること。"""
    registry = RegistryBuilder().scan(ping).scan(untagged).build()
    assert len(registry) == 1
    wrapped = registry.wrap(ping)
    assert wrapped(1, "TRACKING_ID") == "TRACKING_ID"
    assert wrapped()


def test_methods_share_identity() -> None:
    """クラスの関数で登録したものがバウンドメソッドでも見つかること。"""
    registry = RegistryBuilder().register(Service.handle, order_id=LogAs("orderId")).build()
    service = Service()
    assert registry.lookup(service.handle) is registry.lookup(Service.handle)
    assert registry.wrap(service.handle)("o-1") == "o-1"
    assert registry.wrap(Service.handle)(service, "o-2") == "o-2"


def test_registry_table_is_read_only() -> None:
    """構築後のテーブルが変更できないこと。"""
    registry = RegistryBuilder().register(lookup_user, user_id=LogAs("userId")).build()
    with pytest.raises(TypeError):
        registry._wrappers[untagged] = None  # type: ignore[index]


def broken_signature(value: str) -> None:
    pass


broken_signature.__signature__ = "not a signature"  # type: ignore[attr-defined]


def test_signature_errors_aggregated_with_tag_errors() -> None:
    """シグネチャの取得失敗も他のエラーと一緒に集約されること。"""
    builder = (
        RegistryBuilder()
        .register(broken_signature, value=LogAs("value"))
        .register(bad_tracking, count=TrackingId())
    )
    with pytest.raises(MdcSetupError) as exc_info:
        builder.build()
    errors = exc_info.value.errors
    assert len(errors) == 2
    assert errors[0].startswith("cannot inspect signature: ")
    assert "bad_tracking" in errors[1]
