"""Shared test fixtures for the key provisioner."""

import shutil

import pytest

from provisioner.common.config import Settings

ENV_VARS = ("KEY_DIR", "CN", "SAN_DNS", "SAN_IP", "CERT_BACKEND")

requires_openssl = pytest.mark.skipif(
    shutil.which("openssl") is None, reason="openssl executable not installed"
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run every test from an empty cwd with no provisioning variables set."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def key_dir(tmp_path):
    return tmp_path / "out" / "keys"


@pytest.fixture
def svc_settings(key_dir) -> Settings:
    return Settings(key_dir=key_dir, cn="svc.internal", san_dns="svc.local", san_ip="10.0.0.5")
