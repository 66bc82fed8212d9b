"""
Generate an ES256 (ECDSA P-256) JSON Web Key pair for JWT signing.
Writes into KEY_DIR:
  jwks.json             public JWK Set for distribution
  jwks-private-key.pem  PKCS8 private key for local signing
"""

import json

from provisioner.common.config import Settings
from provisioner.common.models import JWKS, JWKS_FILE, JWKS_PRIVATE_KEY_FILE, JWKArtifacts
from provisioner.common.utils import PUBLIC_MODE, SECRET_MODE, write_atomic
from provisioner.crypto.jwk import (
    ALGORITHM, KEY_USE, export_jwk, export_pkcs8, generate_keypair, generate_kid,
)


def generate_jwk_keypair(settings: Settings) -> JWKArtifacts:
    out_dir = settings.out_dir
    out_dir.mkdir(parents=True, exist_ok=True)

    public_key, private_key = generate_keypair()
    public_jwk = export_jwk(public_key)
    private_jwk = export_jwk(private_key)
    private_pem = export_pkcs8(private_key)

    # same kid/alg/use on both halves so they can be correlated
    kid = generate_kid(public_jwk)
    for jwk in (public_jwk, private_jwk):
        jwk.kid = kid
        jwk.alg = ALGORITHM
        jwk.use = KEY_USE

    jwks = JWKS(keys=[public_jwk])
    jwks_path = write_atomic(out_dir / JWKS_FILE, json.dumps(jwks.to_dict(), indent=2), PUBLIC_MODE)
    key_path = write_atomic(out_dir / JWKS_PRIVATE_KEY_FILE, private_pem, SECRET_MODE)

    print("✅ JWK and PEM private key files generated:")
    print(f"- {JWKS_FILE}")
    print(f"- {JWKS_PRIVATE_KEY_FILE}")
    print(f"\nKey ID (kid): {kid}")
    print(f"Algorithm: {ALGORITHM}")

    return JWKArtifacts(
        jwks_path=jwks_path,
        private_key_path=key_path,
        kid=kid,
        alg=ALGORITHM,
        public_jwk=public_jwk,
        private_jwk=private_jwk,
    )
