"""
Secret sealing for GitHub Actions.

GitHub expects repository secrets encrypted with a libsodium sealed box
against the repository's public key. The sender is anonymous: an
ephemeral keypair is generated per message and its public half is
prepended to the ciphertext.
"""

import base64
import binascii
from typing import Union

from nacl.exceptions import CryptoError as NaClCryptoError
from nacl.public import PublicKey, SealedBox

from .errors import CryptoError, DecodingError, InvalidKeyLength

PUBLIC_KEY_SIZE = 32


def decode_public_key(public_key_b64: str) -> bytes:
    """Decode a base64 recipient key and check it is a 32-byte curve point."""
    try:
        raw = base64.b64decode(public_key_b64, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise DecodingError(f"Public key is not valid base64: {e}") from e

    if len(raw) != PUBLIC_KEY_SIZE:
        raise InvalidKeyLength(len(raw))

    return raw


def seal_secret(plaintext: Union[bytes, str], public_key_b64: str) -> str:
    """
    Seal a secret so only the holder of the recipient private key can open it.

    Args:
        plaintext: Secret value
        public_key_b64: Recipient public key, base64 encoded

    Returns:
        Base64 sealed box (ephemeral public key + ciphertext)

    Raises:
        DecodingError: if the key is not base64
        InvalidKeyLength: if the key does not decode to 32 bytes
        CryptoError: if encryption fails
    """
    raw_key = decode_public_key(public_key_b64)

    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")

    try:
        sealed = SealedBox(PublicKey(raw_key)).encrypt(plaintext)
    except NaClCryptoError as e:
        raise CryptoError(f"Failed to seal secret: {e}") from e

    return base64.b64encode(sealed).decode("ascii")
