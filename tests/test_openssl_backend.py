"""Command-line contract of the openssl backend, checked with a recording runner."""

import subprocess
from pathlib import Path

import pytest

from provisioner.common.errors import CommandError
from provisioner.common.models import SigningConfig
from provisioner.crypto import openssl as openssl_mod
from provisioner.crypto.openssl import OpenSSLBackend

OUT = Path("/srv/keys")
SIGNING = SigningConfig(cn="svc.internal", san_dns="svc.local", san_ip="10.0.0.5")


@pytest.fixture
def calls(monkeypatch: pytest.MonkeyPatch):
    recorded = []

    def fake_run(args, cwd=None, capture_output=False, text=False, check=False):
        recorded.append((args, cwd))
        return subprocess.CompletedProcess(args, 0, stdout="c2VjcmV0cGFzc3BocmFzZQ==\n", stderr="")

    monkeypatch.setattr(openssl_mod.subprocess, "run", fake_run)
    return recorded


@pytest.fixture
def backend() -> OpenSSLBackend:
    return OpenSSLBackend(executable="openssl")


def test_ca_key(backend, calls) -> None:
    assert backend.generate_rsa_key(OUT, "tls-ca-key.pem", 4096) == OUT / "tls-ca-key.pem"
    assert calls == [(["openssl", "genrsa", "-out", "tls-ca-key.pem", "4096"], OUT)]


def test_ca_certificate(backend, calls) -> None:
    backend.self_sign(OUT, "tls-ca-key.pem", "tls-ca-cert.pem", "internal-ca", 3650)
    assert calls == [([
        "openssl", "req", "-x509", "-new", "-key", "tls-ca-key.pem", "-sha256",
        "-days", "3650", "-out", "tls-ca-cert.pem", "-subj", "/CN=internal-ca",
    ], OUT)]


def test_passphrase_is_stripped(backend, calls) -> None:
    assert backend.generate_passphrase(16) == "c2VjcmV0cGFzc3BocmFzZQ=="
    assert calls[0][0] == ["openssl", "rand", "-base64", "16"]


def test_encrypted_service_key(backend, calls) -> None:
    backend.generate_rsa_key(OUT, "tls-shared-key.pem", 2048, passphrase="pw")
    assert calls[0][0] == [
        "openssl", "genrsa", "-aes256", "-passout", "pass:pw", "-out", "tls-shared-key.pem", "2048",
    ]


def test_csr(backend, calls) -> None:
    backend.create_csr(OUT, "tls-shared-key.pem", "tls-shared.csr", SIGNING, "openssl.cnf", "pw")
    assert calls == [([
        "openssl", "req", "-new", "-key", "tls-shared-key.pem", "-out", "tls-shared.csr",
        "-subj", "/CN=svc.internal", "-passin", "pass:pw", "-config", "openssl.cnf",
    ], OUT)]


def test_sign(backend, calls) -> None:
    backend.sign_csr(OUT, "tls-shared.csr", "tls-ca-cert.pem", "tls-ca-key.pem",
                     "tls-shared-cert.pem", SIGNING, "openssl.cnf", 825)
    assert calls == [([
        "openssl", "x509", "-req", "-in", "tls-shared.csr", "-CA", "tls-ca-cert.pem",
        "-CAkey", "tls-ca-key.pem", "-CAcreateserial", "-out", "tls-shared-cert.pem",
        "-days", "825", "-sha256", "-extfile", "openssl.cnf", "-extensions", "v3_req",
    ], OUT)]


def test_failure_raises_command_error_without_passphrase(backend, monkeypatch) -> None:
    def failing_run(args, **kwargs):
        raise subprocess.CalledProcessError(1, args, output="", stderr="unable to load key\n")

    monkeypatch.setattr(openssl_mod.subprocess, "run", failing_run)
    with pytest.raises(CommandError) as exc:
        backend.generate_rsa_key(OUT, "tls-shared-key.pem", 2048, passphrase="topsecret")
    assert exc.value.returncode == 1
    assert exc.value.stderr == "unable to load key"
    assert str(exc.value) == "openssl genrsa failed: unable to load key"
    assert "topsecret" not in str(exc.value)
