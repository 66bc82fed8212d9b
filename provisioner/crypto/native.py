"""
In-process certificate backend built on the cryptography package.

Produces the same artifacts as the openssl backend: PKCS8 PEM keys, a
self-signed CA, a CSR, the CA-signed service cert and the hex serial file.
"""

import datetime
import ipaddress
import secrets

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from provisioner.common.models import CA_SERIAL_FILE, SigningConfig
from provisioner.common.utils import PUBLIC_MODE, SECRET_MODE, b64e, write_atomic
from provisioner.crypto.backend import CertBackend

PUBLIC_EXPONENT = 65537


def _name(common_name: str) -> x509.Name:
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])


def _load_key(path, passphrase=None):
    with open(path, "rb") as f:
        return serialization.load_pem_private_key(
            f.read(), password=passphrase.encode() if passphrase is not None else None
        )


def v3_extensions(config: SigningConfig):
    """The [v3_req] block of the signing configuration as (extension, critical) pairs."""
    return [
        (x509.BasicConstraints(ca=False, path_length=None), False),
        (x509.KeyUsage(
            digital_signature=True,
            content_commitment=False,
            key_encipherment=True,
            data_encipherment=False,
            key_agreement=False,
            key_cert_sign=False,
            crl_sign=False,
            encipher_only=False,
            decipher_only=False,
        ), False),
        (x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH, ExtendedKeyUsageOID.CLIENT_AUTH]), False),
        (x509.SubjectAlternativeName([
            x509.DNSName(config.cn),
            x509.DNSName(config.san_dns),
            x509.IPAddress(ipaddress.ip_address(config.san_ip)),
        ]), False),
    ]


def serial_hex(serial: int) -> str:
    """Serial as openssl writes it to a .srl file: upper-case hex, even length."""
    h = format(serial, "X")
    return "0" + h if len(h) % 2 else h


class CryptographyBackend(CertBackend):
    name = "cryptography"

    def generate_passphrase(self, length: int) -> str:
        return b64e(secrets.token_bytes(length)).strip()

    def generate_rsa_key(self, out_dir, key_file, bits, passphrase=None):
        key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=bits)
        if passphrase is None:
            encryption = serialization.NoEncryption()
        else:
            # PKCS8 PBES2 with AES-256-CBC
            encryption = serialization.BestAvailableEncryption(passphrase.encode())
        key_pem = key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=encryption,
        )
        return write_atomic(out_dir / key_file, key_pem, SECRET_MODE)

    def self_sign(self, out_dir, key_file, cert_file, common_name, days):
        key = _load_key(out_dir / key_file)
        subject = issuer = _name(common_name)
        now = datetime.datetime.now(datetime.timezone.utc)
        cert = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(issuer)
            .public_key(key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now)
            .not_valid_after(now + datetime.timedelta(days=days))
            .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
            .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
            .add_extension(x509.AuthorityKeyIdentifier.from_issuer_public_key(key.public_key()), critical=False)
            .sign(key, hashes.SHA256())
        )
        return write_atomic(out_dir / cert_file, cert.public_bytes(serialization.Encoding.PEM), PUBLIC_MODE)

    def create_csr(self, out_dir, key_file, csr_file, config, config_file, passphrase):
        key = _load_key(out_dir / key_file, passphrase)
        builder = x509.CertificateSigningRequestBuilder().subject_name(_name(config.cn))
        for ext, critical in v3_extensions(config):
            builder = builder.add_extension(ext, critical=critical)
        csr = builder.sign(key, hashes.SHA256())
        return write_atomic(out_dir / csr_file, csr.public_bytes(serialization.Encoding.PEM), PUBLIC_MODE)

    def sign_csr(self, out_dir, csr_file, ca_cert_file, ca_key_file, cert_file, config, config_file, days):
        with open(out_dir / csr_file, "rb") as f:
            csr = x509.load_pem_x509_csr(f.read())
        if not csr.is_signature_valid:
            raise ValueError(f"{csr_file}: signature does not match its public key")
        with open(out_dir / ca_cert_file, "rb") as f:
            ca_cert = x509.load_pem_x509_certificate(f.read())
        ca_key = _load_key(out_dir / ca_key_file)

        serial = x509.random_serial_number()
        now = datetime.datetime.now(datetime.timezone.utc)
        builder = (
            x509.CertificateBuilder()
            .subject_name(csr.subject)
            .issuer_name(ca_cert.subject)
            .public_key(csr.public_key())
            .serial_number(serial)
            .not_valid_before(now)
            .not_valid_after(now + datetime.timedelta(days=days))
        )
        # extensions come from the signing config, not from the request
        for ext, critical in v3_extensions(config):
            builder = builder.add_extension(ext, critical=critical)
        builder = builder.add_extension(
            x509.SubjectKeyIdentifier.from_public_key(csr.public_key()), critical=False
        ).add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(ca_key.public_key()), critical=False
        )
        cert = builder.sign(private_key=ca_key, algorithm=hashes.SHA256())

        write_atomic(out_dir / CA_SERIAL_FILE, serial_hex(serial) + "\n", PUBLIC_MODE)
        return write_atomic(out_dir / cert_file, cert.public_bytes(serialization.Encoding.PEM), PUBLIC_MODE)
