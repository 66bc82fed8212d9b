"""
ES256 key handling: generate(curve), export to JWK / PKCS8 PEM, and the kid.
"""
from typing import Tuple, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from provisioner.common.models import ECJWK
from provisioner.common.utils import b64url, sha256_b64url

ALGORITHM = "ES256"
KEY_USE = "sig"
CURVE_NAME = "P-256"
COORDINATE_SIZE = 32  # bytes per P-256 coordinate


def generate_keypair() -> Tuple[ec.EllipticCurvePublicKey, ec.EllipticCurvePrivateKey]:
    """Fresh P-256 key pair; both halves stay exportable."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    return private_key.public_key(), private_key


def _coordinate(value: int) -> str:
    return b64url(value.to_bytes(COORDINATE_SIZE, byteorder="big"))


def export_jwk(key: Union[ec.EllipticCurvePublicKey, ec.EllipticCurvePrivateKey]) -> ECJWK:
    """JWK for either half of the pair; the private JWK also carries d."""
    if not isinstance(key.curve, ec.SECP256R1):
        raise ValueError(f"unsupported curve {key.curve.name}, expected secp256r1")
    if isinstance(key, ec.EllipticCurvePrivateKey):
        numbers = key.private_numbers()
        pub = numbers.public_numbers
        return ECJWK(crv=CURVE_NAME, x=_coordinate(pub.x), y=_coordinate(pub.y),
                     d=_coordinate(numbers.private_value))
    pub = key.public_numbers()
    return ECJWK(crv=CURVE_NAME, x=_coordinate(pub.x), y=_coordinate(pub.y))


def export_pkcs8(private_key: ec.EllipticCurvePrivateKey) -> str:
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


def generate_kid(jwk: ECJWK) -> str:
    """base64url(SHA-256("kty-crv-x-y")) without padding."""
    material = f"{jwk.kty}-{jwk.crv}-{jwk.x}-{jwk.y}"
    return sha256_b64url(material.encode("utf-8"))
