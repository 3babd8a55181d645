# tests/test_config.py
import pytest

from aprs_core.config import (
    DEFAULT_PORT,
    DEFAULT_SERVER,
    AprsConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)
from aprs_core.exceptions import ConfigError

# 最小化的 "快乐路径" 配置
valid_config_dict = {
    "callsign": "n0call",
    "passcode": "13023",
}


def test_config_happy_path():
    config = create_config_from_dict(valid_config_dict.copy())

    assert isinstance(config, AprsConfig)
    # 呼号统一转为大写
    assert config.callsign == "N0CALL"
    assert config.passcode == "13023"
    assert config.server_address == DEFAULT_SERVER
    assert config.server_port == DEFAULT_PORT
    assert config.filter is None


def test_config_missing_callsign():
    with pytest.raises(ConfigError, match="callsign"):
        create_config_from_dict({"passcode": "1"})


def test_config_default_passcode_is_receive_only():
    config = create_config_from_dict({"callsign": "N0CALL"})
    assert config.passcode == "-1"


def test_config_invalid_passcode():
    with pytest.raises(ConfigError, match="Passcode"):
        create_config_from_dict({"callsign": "N0CALL", "passcode": "secret"})


def test_config_callsign_too_long():
    with pytest.raises(ConfigError, match="呼号"):
        create_config_from_dict({"callsign": "TOOLONGCALL1"})


@pytest.mark.parametrize("port", ["abc", 0, 70000])
def test_config_invalid_port(port):
    with pytest.raises(ConfigError, match="端口"):
        create_config_from_dict({"callsign": "N0CALL", "port": port})


def test_config_invalid_timeout():
    with pytest.raises(ConfigError, match="超时"):
        create_config_from_dict({"callsign": "N0CALL", "login_timeout": "-3"})


def test_repr_hides_passcode():
    config = create_config_from_dict(valid_config_dict.copy())
    assert "13023" not in repr(config)
    assert "******" in repr(config)


def test_load_from_toml_profile(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        """
[profile.default]
callsign = "N0CALL"
passcode = 13023

[profile.euro]
callsign = "N0CALL-5"
passcode = 13023
server = "euro.aprs2.net"
port = 14580
filter = "r/51.5/-0.1/100"
""",
        encoding="utf-8",
    )

    default = load_config_from_toml(path)
    assert default.callsign == "N0CALL"
    assert default.passcode == "13023"

    euro = load_config_from_toml(path, profile="euro")
    assert euro.callsign == "N0CALL-5"
    assert euro.server_address == "euro.aprs2.net"
    assert euro.filter == "r/51.5/-0.1/100"

    with pytest.raises(ConfigError, match="profile.missing"):
        load_config_from_toml(path, profile="missing")


def test_load_from_toml_aprs_section(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[aprs]\ncallsign = "N0CALL"\nport = 10152\n', encoding="utf-8")

    config = load_config_from_toml(path)
    assert config.server_port == 10152


def test_load_from_toml_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="未找到"):
        load_config_from_toml(tmp_path / "nope.toml")


def test_load_from_env(monkeypatch):
    monkeypatch.setenv("APRS_CALLSIGN", "N0CALL")
    monkeypatch.setenv("APRS_PASSCODE", "13023")
    monkeypatch.setenv("APRS_PORT", "14580")
    monkeypatch.setenv("APRS_LOGIN_TIMEOUT", "5")

    config = load_config_from_env()
    assert config.callsign == "N0CALL"
    assert config.server_port == 14580
    assert config.login_timeout == 5.0


def test_load_from_env_empty(monkeypatch):
    for suffix in ("CALLSIGN", "PASSCODE", "SERVER", "PORT", "FILTER",
                   "CONNECT_TIMEOUT", "LOGIN_TIMEOUT"):
        monkeypatch.delenv(f"APRS_{suffix}", raising=False)

    with pytest.raises(ConfigError, match="APRS_"):
        load_config_from_env()
