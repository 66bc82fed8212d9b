"""
Console entry points. Each takes no arguments, reads settings from the
environment and returns a process exit code (0 ok, 1 on any failure).
"""

import sys

from provisioner.common.config import Settings
from provisioner.common.errors import ConfigError, ToolchainNotFoundError
from provisioner.jwks import generate_jwk_keypair
from provisioner.tls import generate_tls_certificates, get_backend


def _fail(message, error) -> int:
    print(f"❌ {message}: {error}", file=sys.stderr)
    return 1


def _load_settings():
    try:
        return Settings.from_env()
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        return None


def run_tls(settings: Settings) -> int:
    try:
        backend = get_backend(settings.cert_backend)
    except ToolchainNotFoundError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    try:
        generate_tls_certificates(settings, backend)
    except Exception as e:
        return _fail("Error generating TLS certificates", e)
    return 0


def run_jwk(settings: Settings) -> int:
    try:
        generate_jwk_keypair(settings)
    except Exception as e:
        return _fail("Error generating JWK key pair", e)
    return 0


def main_tls() -> int:
    settings = _load_settings()
    if settings is None:
        return 1
    return run_tls(settings)


def main_jwk() -> int:
    settings = _load_settings()
    if settings is None:
        return 1
    return run_jwk(settings)


def main_all() -> int:
    """TLS material first, then the JWK pair; stops at the first failure."""
    settings = _load_settings()
    if settings is None:
        return 1

    print("=" * 60)
    print("Key Provisioning")
    print("=" * 60)

    print("\n[1/2] Generating TLS certificates...")
    if run_tls(settings) != 0:
        print("Failed to generate TLS certificates", file=sys.stderr)
        return 1

    print("\n[2/2] Generating JWK key pair...")
    if run_jwk(settings) != 0:
        print("Failed to generate JWK key pair", file=sys.stderr)
        return 1

    print("\n" + "=" * 60)
    print("✓ All keys generated successfully!")
    print("=" * 60)
    print(f"\nOutput directory: {settings.out_dir}")
    return 0
