"""Builds the header, payload and signed message of an account association."""

import logging
from typing import Any, Dict

from .codec import bytes_to_hex, encode_base64_json, decode_base64_json
from .constants import HEX_PREFIX, MESSAGE_SEPARATOR
from .schemas import Header, Payload

logger = logging.getLogger(__name__)


def build_header(account_id: int, public_key: bytes) -> str:
    """
    Encodes ``{"fid": ..., "type": "custody", "key": "0x..."}`` as base64 JSON.

    ``account_id`` must already be validated as a positive integer.
    """
    header = Header(fid=account_id, key=f"{HEX_PREFIX}{bytes_to_hex(public_key)}")
    logger.debug(f"Built header for fid {account_id} with key {header.key}")
    return encode_base64_json(header.model_dump())


def build_payload(domain: str) -> str:
    """Encodes ``{"domain": ...}`` as base64 JSON; ``domain`` is used verbatim."""
    return encode_base64_json(Payload(domain=domain).model_dump())


def compose_message(header_b64: str, payload_b64: str) -> str:
    """The exact string that is signed: ``header + "." + payload``."""
    return f"{header_b64}{MESSAGE_SEPARATOR}{payload_b64}"


def decode_header(header_b64: str) -> Dict[str, Any]:
    return decode_base64_json(header_b64, field="header")


def decode_payload(payload_b64: str) -> Dict[str, Any]:
    return decode_base64_json(payload_b64, field="payload")
