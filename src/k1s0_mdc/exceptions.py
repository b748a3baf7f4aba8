"""mdc ライブラリの例外型定義"""

from __future__ import annotations


class MdcError(Exception):
    """mdc ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class MdcErrorCodes:
    """MdcError のエラーコード定数。"""

    SETUP: str = "SETUP_ERROR"
    INVALID_TAG: str = "INVALID_TAG"
    ALREADY_BUILT: str = "ALREADY_BUILT"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"


class MdcSetupError(MdcError):
    """登録時に検出された設定エラーの集約。

    errors には不正なタグ 1 つにつき 1 件、関数シグネチャを含む
    メッセージが入る。
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(code=MdcErrorCodes.SETUP, message="; ".join(self.errors))
