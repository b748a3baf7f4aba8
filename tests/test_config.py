"""設定読み込みのユニットテスト"""

from pathlib import Path

import pytest
from k1s0_mdc.config import MdcSettings, load_settings
from k1s0_mdc.exceptions import MdcError, MdcErrorCodes


def test_defaults() -> None:
    """デフォルト値で設定が作成できること。"""
    settings = MdcSettings()
    assert settings.mdc.tracking_id_format == "uuid"
    assert settings.mdc.warn_unstringifiable is True
    assert settings.log.level == "INFO"
    assert settings.log.format == "json"


def test_load_settings(tmp_path: Path) -> None:
    """YAML ファイルから設定が読み込めること。"""
    config_file = tmp_path / "mdc.yaml"
    config_file.write_text(
        "mdc:\n  tracking_id_format: hex\n  warn_unstringifiable: false\n"
        "log:\n  level: DEBUG\n  format: text\n"
    )
    settings = load_settings(config_file)
    assert settings.mdc.tracking_id_format == "hex"
    assert settings.mdc.warn_unstringifiable is False
    assert settings.log.level == "DEBUG"
    assert settings.log.format == "text"


def test_load_empty_file(tmp_path: Path) -> None:
    """空ファイルではデフォルト値になること。"""
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("")
    assert load_settings(config_file) == MdcSettings()


def test_load_file_not_found(tmp_path: Path) -> None:
    """存在しないファイルで MdcError(READ_FILE_ERROR) が発生すること。"""
    with pytest.raises(MdcError) as exc_info:
        load_settings(tmp_path / "missing.yaml")
    assert exc_info.value.code == MdcErrorCodes.READ_FILE


def test_load_invalid_yaml(tmp_path: Path) -> None:
    """不正 YAML で MdcError(PARSE_YAML_ERROR) が発生すること。"""
    bad_file = tmp_path / "bad.yaml"
    bad_file.write_text("mdc: {invalid: yaml: content:\n")
    with pytest.raises(MdcError) as exc_info:
        load_settings(bad_file)
    assert exc_info.value.code == MdcErrorCodes.PARSE_YAML


def test_load_validation_error(tmp_path: Path) -> None:
    """不正な値で MdcError(VALIDATION_ERROR) が発生すること。"""
    bad_file = tmp_path / "bad_value.yaml"
    bad_file.write_text("mdc:\n  tracking_id_format: base64\n")
    with pytest.raises(MdcError) as exc_info:
        load_settings(bad_file)
    assert exc_info.value.code == MdcErrorCodes.VALIDATION
