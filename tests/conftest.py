"""mdc テスト共通設定。"""

from collections.abc import Iterator

import pytest
import structlog
from k1s0_mdc import mdc


@pytest.fixture(autouse=True)
def clean_mdc() -> Iterator[None]:
    """各テストを MDC が存在しない状態で開始し、終了後に戻す。"""
    mdc.clear()
    yield
    mdc.clear()
    structlog.reset_defaults()
