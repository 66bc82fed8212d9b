"""
X.509 validation helpers for generated material.
Provides verify_cert(cert, ca_cert), get_san_list(cert), key_matches_cert(key, cert).
"""
import datetime

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.x509.oid import NameOID

from provisioner.common.errors import VerificationError


def load_cert(pem_bytes):
    """Load certificate from PEM bytes (string or bytes)."""
    if isinstance(pem_bytes, str):
        pem_bytes = pem_bytes.encode()
    return x509.load_pem_x509_certificate(pem_bytes)


def load_cert_file(path) -> x509.Certificate:
    with open(path, "rb") as f:
        return load_cert(f.read())


def load_private_key_file(path, passphrase=None):
    """Load a PEM private key; encrypted keys need the passphrase."""
    with open(path, "rb") as f:
        data = f.read()
    password = passphrase.encode() if isinstance(passphrase, str) else passphrase
    return serialization.load_pem_private_key(data, password=password)


def get_cn(cert: x509.Certificate):
    attrs = cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    return attrs[0].value if attrs else None


def get_cert_fingerprint(cert: x509.Certificate) -> str:
    """Return SHA-256 fingerprint of certificate as hex string."""
    return cert.fingerprint(hashes.SHA256()).hex()


def get_san_list(cert: x509.Certificate) -> list:
    """SAN entries in certificate order, DNS names and IPs as strings."""
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return []
    return [str(name.value) for name in san]


def key_matches_cert(private_key, cert: x509.Certificate) -> bool:
    fmt = serialization.PublicFormat.SubjectPublicKeyInfo
    enc = serialization.Encoding.DER
    return private_key.public_key().public_bytes(enc, fmt) == cert.public_key().public_bytes(enc, fmt)


def verify_cert(cert: x509.Certificate, ca_cert: x509.Certificate, expected_cn: str = None):
    """
    Verify that cert was issued by ca_cert, is currently valid and (optionally)
    carries expected_cn. Raises VerificationError otherwise.
    """
    if cert.issuer != ca_cert.subject:
        raise VerificationError("BAD CERT: issuer does not match CA subject")
    try:
        ca_cert.public_key().verify(
            cert.signature,
            cert.tbs_certificate_bytes,
            padding.PKCS1v15(),
            cert.signature_hash_algorithm or hashes.SHA256(),
        )
    except InvalidSignature as e:
        raise VerificationError("BAD CERT: UNTRUSTED or signature invalid") from e
    now = datetime.datetime.now(datetime.timezone.utc)
    if cert.not_valid_before_utc > now or cert.not_valid_after_utc < now:
        raise VerificationError("BAD CERT: EXPIRED/NOT YET VALID")
    if expected_cn:
        cn = get_cn(cert)
        if cn != expected_cn:
            raise VerificationError(f"BAD CERT: CN MISMATCH (got {cn}, expected {expected_cn})")
    return True
