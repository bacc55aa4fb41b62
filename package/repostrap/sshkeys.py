"""
SSH deploy key generation.

Produces an Ed25519 keypair: the private half as an unencrypted OpenSSH
PEM block, the public half as a single authorized_keys line.
"""

from dataclasses import dataclass
from typing import Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from .errors import CryptoError


@dataclass
class KeyPair:
    """An SSH keypair held in memory for the duration of one run."""

    public_key: bytes
    private_key: bytes

    def __repr__(self) -> str:
        # keep the private half out of tracebacks and logs
        return f"KeyPair(public_key={self.public_key!r}, private_key=<redacted>)"


def generate_keypair(comment: Optional[str] = None) -> KeyPair:
    """
    Generate a new Ed25519 SSH keypair.

    Args:
        comment: Optional comment appended to the authorized_keys line

    Returns:
        KeyPair with OpenSSH-encoded public and private keys

    Raises:
        CryptoError: if the key cannot be generated or serialized
    """
    try:
        private_key = ed25519.Ed25519PrivateKey.generate()

        private_bytes = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.OpenSSH,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_bytes = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.OpenSSH,
            format=serialization.PublicFormat.OpenSSH,
        )
    except (UnsupportedAlgorithm, ValueError) as e:
        raise CryptoError(f"Failed to generate SSH keypair: {e}") from e

    if comment:
        public_bytes += b" " + comment.encode("ascii")

    return KeyPair(public_key=public_bytes + b"\n", private_key=private_bytes)
