"""mdc 設定の定義と読み込み"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import MdcError, MdcErrorCodes


class MdcSection(BaseModel):
    """MDC ラッパー設定。"""

    tracking_id_format: Literal["uuid", "hex"] = "uuid"
    warn_unstringifiable: bool = True


class LogSection(BaseModel):
    """ログ設定。"""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class MdcSettings(BaseModel):
    """mdc ライブラリ設定全体。"""

    mdc: MdcSection = Field(default_factory=MdcSection)
    log: LogSection = Field(default_factory=LogSection)


def _read_yaml(path: Path) -> dict[str, Any]:
    """YAML ファイルを読み込む。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise MdcError(
            code=MdcErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data: dict[str, Any] = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise MdcError(
            code=MdcErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    return data


def load_settings(path: Path) -> MdcSettings:
    """設定ファイルを読み込んで MdcSettings を返す。"""
    data = _read_yaml(path)
    try:
        return MdcSettings.model_validate(data)
    except ValidationError as e:
        raise MdcError(
            code=MdcErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
