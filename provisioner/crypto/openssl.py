"""
Certificate backend that shells out to the openssl command-line tool.

The argument lists below are the output-compatibility contract; they run
with cwd=out_dir so every file argument stays a bare filename.
"""

import subprocess
from pathlib import Path
from typing import List, Optional

from provisioner.common.config import find_openssl
from provisioner.common.errors import CommandError
from provisioner.common.models import V3_SECTION, SigningConfig
from provisioner.crypto.backend import CertBackend


class OpenSSLBackend(CertBackend):
    name = "openssl"

    def __init__(self, executable: Optional[str] = None):
        self.executable = executable or find_openssl()

    def _run(self, args: List[str], cwd: Optional[Path] = None) -> str:
        cmd = ["openssl"] + args
        try:
            result = subprocess.run(
                [self.executable] + args,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise CommandError(cmd, e.returncode, e.stderr) from e
        return result.stdout

    def generate_passphrase(self, length: int) -> str:
        return self._run(["rand", "-base64", str(length)]).strip()

    def generate_rsa_key(self, out_dir, key_file, bits, passphrase=None):
        args = ["genrsa"]
        if passphrase is not None:
            args += ["-aes256", "-passout", f"pass:{passphrase}"]
        args += ["-out", key_file, str(bits)]
        self._run(args, cwd=out_dir)
        return out_dir / key_file

    def self_sign(self, out_dir, key_file, cert_file, common_name, days):
        self._run(
            ["req", "-x509", "-new", "-key", key_file, "-sha256", "-days", str(days),
             "-out", cert_file, "-subj", f"/CN={common_name}"],
            cwd=out_dir,
        )
        return out_dir / cert_file

    def create_csr(self, out_dir, key_file, csr_file, config: SigningConfig, config_file, passphrase):
        self._run(
            ["req", "-new", "-key", key_file, "-out", csr_file, "-subj", f"/CN={config.cn}",
             "-passin", f"pass:{passphrase}", "-config", config_file],
            cwd=out_dir,
        )
        return out_dir / csr_file

    def sign_csr(self, out_dir, csr_file, ca_cert_file, ca_key_file, cert_file, config, config_file, days):
        self._run(
            ["x509", "-req", "-in", csr_file, "-CA", ca_cert_file, "-CAkey", ca_key_file,
             "-CAcreateserial", "-out", cert_file, "-days", str(days), "-sha256",
             "-extfile", config_file, "-extensions", V3_SECTION],
            cwd=out_dir,
        )
        return out_dir / cert_file
