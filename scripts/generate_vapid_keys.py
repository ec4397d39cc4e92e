"""CLI script to generate a VAPID key pair for Web Push."""
from __future__ import annotations

import argparse

from cryptography.hazmat.primitives import serialization
from py_vapid import Vapid
from py_vapid.utils import b64urlencode


def generate_keys() -> tuple[str, str]:
    """Return ``(public_key, private_key)`` as base64url strings.

    The public key is the uncompressed point browsers expect as
    ``applicationServerKey``; the private key is DER, which pywebpush accepts.
    """

    vapid = Vapid()
    vapid.generate_keys()
    public = vapid.public_key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.UncompressedPoint,
    )
    private = vapid.private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return b64urlencode(public), b64urlencode(private)


def main() -> None:
    argparse.ArgumentParser(description="Generate VAPID keys for .env").parse_args()
    public, private = generate_keys()
    print(f"VAPID_PUBLIC_KEY={public}")
    print(f"VAPID_PRIVATE_KEY={private}")


if __name__ == "__main__":
    main()
