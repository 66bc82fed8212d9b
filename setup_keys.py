#!/usr/bin/env python3
"""
Generate all cryptographic material for the service: mTLS certificates
followed by the JWT signing JWK pair.
Run this script once before starting the service.
"""

import sys

from provisioner.cli import main_all

if __name__ == "__main__":
    sys.exit(main_all())
