#!/usr/bin/env python3
"""
Generate an ES256 JWK pair: KEY_DIR/jwks.json and KEY_DIR/jwks-private-key.pem.
"""
import os
import sys
# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from provisioner.cli import main_jwk

if __name__ == "__main__":
    sys.exit(main_jwk())
