"""
Certificate backend interface.

Every operation receives the output directory explicitly and reads/writes
artifacts by filename inside it; no backend changes the process cwd.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from provisioner.common.models import SigningConfig


class CertBackend(ABC):
    name = ""

    @abstractmethod
    def generate_passphrase(self, length: int) -> str:
        """Return base64 of `length` random bytes, whitespace stripped."""

    @abstractmethod
    def generate_rsa_key(self, out_dir: Path, key_file: str, bits: int,
                         passphrase: Optional[str] = None) -> Path:
        """Write an RSA key; AES-256 encrypted under passphrase when one is given."""

    @abstractmethod
    def self_sign(self, out_dir: Path, key_file: str, cert_file: str,
                  common_name: str, days: int) -> Path:
        """Write a self-signed SHA-256 CA certificate for key_file."""

    @abstractmethod
    def create_csr(self, out_dir: Path, key_file: str, csr_file: str, config: SigningConfig,
                   config_file: str, passphrase: str) -> Path:
        """Write a CSR for the (encrypted) key with subject CN from config."""

    @abstractmethod
    def sign_csr(self, out_dir: Path, csr_file: str, ca_cert_file: str, ca_key_file: str,
                 cert_file: str, config: SigningConfig, config_file: str, days: int) -> Path:
        """Issue cert_file from csr_file with the v3_req extensions, creating the CA serial file."""
