"""
Generate mutual-TLS material: root CA, encrypted service key, CA-signed service cert.
Writes into KEY_DIR:
  tls-ca-key.pem, tls-ca-cert.pem, tls-ca-cert.srl
  tls-shared-key-passphrase.txt, tls-shared-key.pem
  openssl.cnf, tls-shared.csr, tls-shared-cert.pem
"""

from contextlib import contextmanager
from typing import Optional

from provisioner.common import config as cfg
from provisioner.common.errors import ProvisioningError, StepError, VerificationError
from provisioner.common.models import (
    CA_CERT_FILE, CA_KEY_FILE, SERVICE_CERT_FILE, SERVICE_CSR_FILE, SERVICE_KEY_FILE,
    SIGNING_CONFIG_FILE, SigningConfig, TLSArtifacts,
)
from provisioner.common.utils import PUBLIC_MODE, SECRET_MODE, write_atomic
from provisioner.crypto import pki
from provisioner.crypto.backend import CertBackend
from provisioner.crypto.native import CryptographyBackend
from provisioner.crypto.openssl import OpenSSLBackend


def get_backend(name: str) -> CertBackend:
    """openssl backend checks the toolchain up front (ToolchainNotFoundError)."""
    if name == OpenSSLBackend.name:
        return OpenSSLBackend()
    if name == CryptographyBackend.name:
        return CryptographyBackend()
    raise ValueError(f"unknown certificate backend: {name}")


@contextmanager
def step(description: str):
    """Run one generation step; any failure aborts with StepError(description)."""
    try:
        yield
    except StepError:
        raise
    except (ProvisioningError, OSError, ValueError, TypeError) as e:
        raise StepError(description, e) from e


def verify_artifacts(files: TLSArtifacts, signing: SigningConfig, passphrase: str) -> str:
    """Check chain, SANs and key/cert match; returns the cert fingerprint."""
    ca_cert = pki.load_cert_file(files.ca_cert)
    cert = pki.load_cert_file(files.service_cert)
    pki.verify_cert(cert, ca_cert, expected_cn=signing.cn)

    sans = pki.get_san_list(cert)
    if sans != signing.san_entries():
        raise VerificationError(f"SAN mismatch: got {sans}, expected {signing.san_entries()}")

    key = pki.load_private_key_file(files.service_key, passphrase)
    if not pki.key_matches_cert(key, cert):
        raise VerificationError("service key does not match service certificate")
    return pki.get_cert_fingerprint(cert)


def generate_tls_certificates(settings: cfg.Settings, backend: Optional[CertBackend] = None) -> TLSArtifacts:
    if backend is None:
        backend = get_backend(settings.cert_backend)

    out_dir = settings.out_dir
    files = TLSArtifacts.in_dir(out_dir)
    signing = SigningConfig(cn=settings.cn, san_dns=settings.san_dns, san_ip=settings.san_ip)

    with step(f"create output directory {out_dir}"):
        out_dir.mkdir(parents=True, exist_ok=True)

    # -------------------- ROOT CA -------------------- #
    print("[*] Generating Root CA...")
    with step("generate CA private key"):
        backend.generate_rsa_key(out_dir, CA_KEY_FILE, cfg.CA_KEY_SIZE)
    with step("generate CA certificate"):
        backend.self_sign(out_dir, CA_KEY_FILE, CA_CERT_FILE, cfg.CA_COMMON_NAME, cfg.CA_VALIDITY_DAYS)

    # -------------------- SERVICE KEY -------------------- #
    # plaintext on purpose: whoever can read this file can decrypt the service key
    print("[*] Generating shared passphrase and saving to file...")
    with step("generate key passphrase"):
        passphrase = backend.generate_passphrase(cfg.PASSPHRASE_LENGTH)
        write_atomic(files.passphrase, passphrase, SECRET_MODE)

    print("[*] Generating shared private key...")
    with step("generate encrypted service private key"):
        backend.generate_rsa_key(out_dir, SERVICE_KEY_FILE, cfg.SERVICE_KEY_SIZE, passphrase=passphrase)

    # -------------------- CSR + SIGNING -------------------- #
    print("[*] Creating OpenSSL config with SANs...")
    with step("write signing configuration"):
        write_atomic(files.signing_config, signing.render(), PUBLIC_MODE)

    print("[*] Creating CSR with SANs...")
    with step("create certificate signing request"):
        backend.create_csr(out_dir, SERVICE_KEY_FILE, SERVICE_CSR_FILE, signing, SIGNING_CONFIG_FILE, passphrase)

    print("[*] Signing certificate with CA and SANs...")
    with step("sign service certificate"):
        backend.sign_csr(out_dir, SERVICE_CSR_FILE, CA_CERT_FILE, CA_KEY_FILE, SERVICE_CERT_FILE,
                         signing, SIGNING_CONFIG_FILE, cfg.SERVICE_VALIDITY_DAYS)

    with step("verify service certificate"):
        files.fingerprint = verify_artifacts(files, signing, passphrase)

    print("[✔] TLS certificates generated successfully.")
    print(f"\nGenerated files in {out_dir}:")
    print("- tls-ca-cert.pem (Root CA certificate)")
    print("- tls-ca-key.pem (Root CA private key)")
    print("- tls-shared-cert.pem (Service certificate)")
    print("- tls-shared-key.pem (Encrypted service private key)")
    print("- tls-shared-key-passphrase.txt (Key passphrase)")
    print(f"\nSANs: {', '.join(signing.san_entries())}")
    print(f"SHA-256 fingerprint: {files.fingerprint}")
    return files
