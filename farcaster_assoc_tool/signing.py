"""Ed25519 key derivation, signing and verification."""

import logging

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.exceptions import InvalidSignature

from .constants import (
    ED25519_PRIVATE_KEY_LENGTH,
    ED25519_PUBLIC_KEY_LENGTH,
    ED25519_SIGNATURE_LENGTH,
)
from .errors import SigningError, FormatError
from .schemas import KeyPair

logger = logging.getLogger(__name__)


def _load_private_key(private_key: bytes) -> ed25519.Ed25519PrivateKey:
    if not isinstance(private_key, (bytes, bytearray)) or len(private_key) != ED25519_PRIVATE_KEY_LENGTH:
        length = len(private_key) if isinstance(private_key, (bytes, bytearray)) else None
        raise SigningError(
            f"Private key must be {ED25519_PRIVATE_KEY_LENGTH} bytes (got {length})."
        )
    try:
        return ed25519.Ed25519PrivateKey.from_private_bytes(bytes(private_key))
    except ValueError as e:
        raise SigningError(f"Failed to load Ed25519 private key: {e}")


def generate_private_key() -> bytes:
    """Generates a new Ed25519 private key and returns its raw 32 bytes."""
    key = ed25519.Ed25519PrivateKey.generate()
    return key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )


def derive_public_key(private_key: bytes) -> bytes:
    """
    Derives the raw 32-byte Ed25519 public key for a 32-byte private key.

    Raises:
        SigningError: If the private key is not exactly 32 bytes.
    """
    key = _load_private_key(private_key)
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def derive_key_pair(private_key: bytes) -> KeyPair:
    return KeyPair(private_key=bytes(private_key), public_key=derive_public_key(private_key))


def sign(message: str, private_key: bytes) -> bytes:
    """
    Signs the UTF-8 encoding of ``message``. Ed25519 is deterministic, so the
    same (message, key) always yields the same 64-byte signature.

    Raises:
        SigningError: If the private key is malformed or signing fails.
    """
    key = _load_private_key(private_key)
    signature = key.sign(message.encode("utf-8"))
    logger.debug(f"Signed message of {len(message)} chars, signature length {len(signature)}")
    return signature


def verify(signature: bytes, message: str, public_key: bytes) -> bool:
    """
    Checks ``signature`` over UTF-8(``message``) under ``public_key``.

    Returns False for any well-sized but invalid signature or key.

    Raises:
        FormatError: If the signature is not 64 bytes or the key not 32 bytes.
    """
    if len(signature) != ED25519_SIGNATURE_LENGTH:
        raise FormatError(
            f"Expected {ED25519_SIGNATURE_LENGTH} bytes, got {len(signature)}", field="signature"
        )
    if len(public_key) != ED25519_PUBLIC_KEY_LENGTH:
        raise FormatError(
            f"Expected {ED25519_PUBLIC_KEY_LENGTH} bytes, got {len(public_key)}", field="key"
        )
    try:
        key = ed25519.Ed25519PublicKey.from_public_bytes(bytes(public_key))
        key.verify(bytes(signature), message.encode("utf-8"))
    except InvalidSignature:
        logger.debug("Ed25519 signature verification failed: invalid signature")
        return False
    except ValueError as e:
        logger.debug(f"Public key rejected during verification: {e}")
        return False
    return True
