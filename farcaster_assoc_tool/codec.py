"""Hex and base64/JSON conversions used to build and read association fields."""

import base64
import binascii
import json
import logging
import string
from typing import Any

from .constants import HEX_PREFIX
from .errors import FormatError, DecodeError

logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset(string.hexdigits)


def hex_to_bytes(hex_str: str, field: str = "hex") -> bytes:
    """
    Converts a hex string, with or without a leading ``0x``, to bytes.

    Raises:
        FormatError: If the string has odd length or contains non-hex characters.
    """
    if not isinstance(hex_str, str):
        raise FormatError(f"Expected a hex string, got {type(hex_str).__name__}", field=field)
    clean = hex_str[2:] if hex_str[:2].lower() == HEX_PREFIX else hex_str
    if len(clean) % 2:
        raise FormatError(f"Hex string has odd length ({len(clean)})", field=field)
    if not all(c in _HEX_DIGITS for c in clean):
        raise FormatError("Hex string contains non-hex characters", field=field)
    return bytes.fromhex(clean)


def bytes_to_hex(data: bytes) -> str:
    """Lowercase hex, no prefix."""
    return bytes(data).hex()


def b64encode_bytes(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode_bytes(b64: str, field: str = "base64") -> bytes:
    """Strict standard base64 decoding; only the canonical encoding of the bytes is accepted."""
    try:
        raw = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise DecodeError(f"Invalid base64: {e}", field=field)
    # unused trailing bits must be zero
    if b64encode_bytes(raw) != b64:
        raise DecodeError("non-canonical base64", field=field)
    return raw


def encode_base64_json(obj: Any) -> str:
    """
    Serializes ``obj`` as compact UTF-8 JSON in insertion order and base64-encodes it.

    The compact separators match what browsers and Node produce for
    ``JSON.stringify``; the resulting string is part of the signed message.
    """
    text = json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
    return b64encode_bytes(text.encode("utf-8"))


def decode_base64_json(b64: str, field: str = "base64") -> Any:
    """
    Reverses :func:`encode_base64_json`.

    Raises:
        DecodeError: If the base64 is malformed, the bytes are not UTF-8,
                     or the text is not valid (or too deeply nested) JSON.
    """
    raw = b64decode_bytes(b64, field=field)
    try:
        return json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise DecodeError(f"Decoded bytes are not UTF-8: {e}", field=field)
    except json.JSONDecodeError as e:
        logger.debug(f"JSON parse failed for {field}: {e}")
        raise DecodeError(f"Invalid JSON: {e}", field=field)
    except RecursionError:
        raise DecodeError("JSON nested too deeply", field=field)
