"""Pydantic models: signing_config, ec_jwk, jwks, tls_artifacts, jwk_artifacts."""

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, field_validator

# -------------------- OUTPUT FILENAMES -------------------- #

CA_KEY_FILE = "tls-ca-key.pem"
CA_CERT_FILE = "tls-ca-cert.pem"
CA_SERIAL_FILE = "tls-ca-cert.srl"
PASSPHRASE_FILE = "tls-shared-key-passphrase.txt"
SERVICE_KEY_FILE = "tls-shared-key.pem"
SIGNING_CONFIG_FILE = "openssl.cnf"
SERVICE_CSR_FILE = "tls-shared.csr"
SERVICE_CERT_FILE = "tls-shared-cert.pem"

JWKS_FILE = "jwks.json"
JWKS_PRIVATE_KEY_FILE = "jwks-private-key.pem"

# Section holding the extensions applied when signing the service CSR.
V3_SECTION = "v3_req"


# -------------------- SIGNING CONFIGURATION -------------------- #

class SigningConfig(BaseModel):
    cn: str
    san_dns: str
    san_ip: str

    def san_entries(self) -> List[str]:
        """CN first: strict TLS clients ignore the subject CN for hostname checks."""
        return [self.cn, self.san_dns, self.san_ip]

    def render(self) -> str:
        return f"""[req]
distinguished_name = req_distinguished_name
x509_extensions = {V3_SECTION}
prompt = no

[req_distinguished_name]
CN = {self.cn}

[{V3_SECTION}]
basicConstraints = CA:FALSE
keyUsage = digitalSignature, keyEncipherment
extendedKeyUsage = serverAuth, clientAuth
subjectAltName = @alt_names

[alt_names]
DNS.1 = {self.cn}
DNS.2 = {self.san_dns}
IP.1 = {self.san_ip}
"""


# -------------------- JSON WEB KEYS -------------------- #

class ECJWK(BaseModel):
    kty: str = "EC"
    crv: str = "P-256"
    x: str              # base64url, 32-byte big-endian coordinate
    y: str
    d: Optional[str] = None     # private scalar, private JWK only
    kid: Optional[str] = None
    alg: Optional[str] = None
    use: Optional[str] = None

    def is_private(self) -> bool:
        return self.d is not None

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)


class JWKS(BaseModel):
    keys: List[ECJWK]

    @field_validator("keys")
    @classmethod
    def _public_only(cls, keys: List[ECJWK]) -> List[ECJWK]:
        if any(k.is_private() for k in keys):
            raise ValueError("a JWKS must not contain private key material")
        return keys

    def to_dict(self) -> dict:
        return {"keys": [k.to_dict() for k in self.keys]}


# -------------------- RESULTS -------------------- #

class TLSArtifacts(BaseModel):
    out_dir: Path
    ca_key: Path
    ca_cert: Path
    ca_serial: Path
    passphrase: Path
    service_key: Path
    signing_config: Path
    service_csr: Path
    service_cert: Path
    fingerprint: str = ""

    @classmethod
    def in_dir(cls, out_dir: Path) -> "TLSArtifacts":
        return cls(
            out_dir=out_dir,
            ca_key=out_dir / CA_KEY_FILE,
            ca_cert=out_dir / CA_CERT_FILE,
            ca_serial=out_dir / CA_SERIAL_FILE,
            passphrase=out_dir / PASSPHRASE_FILE,
            service_key=out_dir / SERVICE_KEY_FILE,
            signing_config=out_dir / SIGNING_CONFIG_FILE,
            service_csr=out_dir / SERVICE_CSR_FILE,
            service_cert=out_dir / SERVICE_CERT_FILE,
        )


class JWKArtifacts(BaseModel):
    jwks_path: Path
    private_key_path: Path
    kid: str
    alg: str
    public_jwk: ECJWK
    private_jwk: ECJWK
