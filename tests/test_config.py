"""Tests for settings loading and the toolchain check."""

import os
from pathlib import Path

import pytest

from provisioner.common import config
from provisioner.common.config import Settings, find_openssl
from provisioner.common.errors import ConfigError, ToolchainNotFoundError


class TestSettingsFromEnv:
    def test_defaults(self) -> None:
        s = Settings.from_env()
        assert s.key_dir == Path("keys")
        assert s.cn == "internal-service"
        assert s.san_dns == "localhost"
        assert s.san_ip == "127.0.0.1"
        assert s.cert_backend == "openssl"

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KEY_DIR", "certs")
        monkeypatch.setenv("CN", "svc.internal")
        monkeypatch.setenv("SAN_DNS", "svc.local")
        monkeypatch.setenv("SAN_IP", "10.0.0.5")
        monkeypatch.setenv("CERT_BACKEND", "Cryptography")
        s = Settings.from_env()
        assert s.key_dir == Path("certs")
        assert (s.cn, s.san_dns, s.san_ip) == ("svc.internal", "svc.local", "10.0.0.5")
        assert s.cert_backend == "cryptography"

    def test_empty_value_falls_back_to_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CN", "")
        assert Settings.from_env().cn == "internal-service"

    def test_dotenv_file_in_cwd(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(os, "environ", dict(os.environ))
        (tmp_path / ".env").write_text("CN=from-dotenv\nSAN_IP=::1\n")
        s = Settings.from_env()
        assert s.cn == "from-dotenv"
        assert s.san_ip == "::1"

    def test_invalid_ip(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SAN_IP", "not-an-ip")
        with pytest.raises(ConfigError, match="SAN_IP"):
            Settings.from_env()

    def test_unknown_backend(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CERT_BACKEND", "libressl")
        with pytest.raises(ConfigError, match="CERT_BACKEND"):
            Settings.from_env()

    def test_blank_cn_rejected(self) -> None:
        with pytest.raises(ValueError):
            Settings(cn="   ")

    def test_relative_key_dir_resolves_against_cwd(self, tmp_path) -> None:
        assert Settings(key_dir=Path("keys")).out_dir == (tmp_path / "keys").resolve()


class TestFindOpenSSL:
    def test_missing_toolchain(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "OPENSSL_PATHS", ())
        monkeypatch.setattr(config.shutil, "which", lambda name: None)
        with pytest.raises(ToolchainNotFoundError, match="OpenSSL not found"):
            find_openssl()

    def test_falls_back_to_path_lookup(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "OPENSSL_PATHS", ())
        monkeypatch.setattr(config.shutil, "which", lambda name: "/opt/bin/" + name)
        assert find_openssl() == "/opt/bin/openssl"
