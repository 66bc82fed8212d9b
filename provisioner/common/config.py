"""
Settings for the provisioners, read from the environment (and .env).

  KEY_DIR       output directory for every artifact   (default: keys)
  CN            service certificate Common Name       (default: internal-service)
  SAN_DNS       DNS Subject Alternative Name          (default: localhost)
  SAN_IP        IP Subject Alternative Name           (default: 127.0.0.1)
  CERT_BACKEND  openssl | cryptography                (default: openssl)
"""

import ipaddress
import os
import shutil
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

from provisioner.common.errors import ConfigError, ToolchainNotFoundError

# -------------------- FIXED PARAMETERS -------------------- #

CA_KEY_SIZE = 4096
SERVICE_KEY_SIZE = 2048
CA_VALIDITY_DAYS = 3650     # 10 years
SERVICE_VALIDITY_DAYS = 825  # ~2.25 years, Apple's server cert limit
CA_COMMON_NAME = "internal-ca"
PASSPHRASE_LENGTH = 16      # random bytes before base64

BACKENDS = ("openssl", "cryptography")

OPENSSL_PATHS = ("/usr/bin/openssl", "/usr/local/bin/openssl")


# -------------------- SETTINGS -------------------- #

class Settings(BaseModel):
    key_dir: Path = Path("keys")
    cn: str = "internal-service"
    san_dns: str = "localhost"
    san_ip: str = "127.0.0.1"
    cert_backend: str = "openssl"

    @field_validator("cn", "san_dns")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("san_ip")
    @classmethod
    def _ip_address(cls, v: str) -> str:
        return str(ipaddress.ip_address(v.strip()))

    @field_validator("cert_backend")
    @classmethod
    def _known_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in BACKENDS:
            raise ValueError(f"must be one of {', '.join(BACKENDS)}")
        return v

    @property
    def out_dir(self) -> Path:
        """Absolute output directory (relative KEY_DIR resolves against cwd)."""
        return self.key_dir.expanduser().resolve()

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """Build settings from environment variables; empty values fall back to defaults."""
        if load_env_file:
            load_dotenv(find_dotenv(usecwd=True))
        env = {
            "key_dir": os.getenv("KEY_DIR"),
            "cn": os.getenv("CN"),
            "san_dns": os.getenv("SAN_DNS"),
            "san_ip": os.getenv("SAN_IP"),
            "cert_backend": os.getenv("CERT_BACKEND"),
        }
        try:
            return cls(**{k: v for k, v in env.items() if v})
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']).upper()}: {err['msg']}" for err in e.errors()
            )
            raise ConfigError(f"Invalid configuration: {problems}") from e


# -------------------- TOOLCHAIN -------------------- #

def find_openssl() -> str:
    """Return the path of the openssl executable or raise ToolchainNotFoundError."""
    for candidate in OPENSSL_PATHS:
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return candidate
    found = shutil.which("openssl")
    if found is None:
        raise ToolchainNotFoundError()
    return found
