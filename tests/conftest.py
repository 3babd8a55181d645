# tests/conftest.py
import sys
from pathlib import Path

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from aprs_core.config import AprsConfig


@pytest.fixture
def valid_config():
    """
    [Fixture] 返回一个指向本机的 AprsConfig 对象，超时设置得较短以便测试快速失败。
    """
    return AprsConfig(
        callsign="N0CALL",
        passcode="13023",
        server_address="127.0.0.1",
        server_port=14580,
        filter=None,
        connect_timeout=2.0,
        login_timeout=2.0,
    )
