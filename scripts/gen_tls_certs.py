#!/usr/bin/env python3
"""
Generate the mTLS root CA and the CA-signed service certificate.
Configure with KEY_DIR, CN, SAN_DNS, SAN_IP, CERT_BACKEND (env or .env).
"""
import os
import sys
# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from provisioner.cli import main_tls

if __name__ == "__main__":
    sys.exit(main_tls())
