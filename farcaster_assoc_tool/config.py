"""Loads credentials from CLI flags, the process environment and a .env file."""

import json
import logging
import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from jwcrypto import jwk
from jwcrypto.common import base64url_decode

from .codec import hex_to_bytes
from .constants import (
    DEFAULT_MANIFEST_PATH,
    ED25519_PRIVATE_KEY_LENGTH,
    ENV_DOMAIN,
    ENV_FID,
    ENV_MANIFEST_PATH,
    ENV_PRIVATE_KEY,
)
from .errors import ConfigError, FormatError
from .schemas import Credentials

logger = logging.getLogger(__name__)


def load_env_file(path: Optional[str]) -> bool:
    """Loads ``path`` into os.environ without overriding variables already set."""
    if not path:
        return False
    loaded = load_dotenv(path, override=False)
    if loaded:
        logger.info(f"Loaded environment from {path}")
    else:
        logger.debug(f"No environment file loaded from {path}")
    return loaded


def parse_fid(value: str) -> int:
    text = str(value).strip()
    if not (text.isascii() and text.isdigit()):
        raise ConfigError(f"{ENV_FID} must be a valid number, got '{value}'.")
    fid = int(text)
    if fid <= 0:
        raise ConfigError(f"{ENV_FID} must be a positive integer, got {fid}.")
    return fid


def _private_key_from_jwk(jwk_str: str) -> bytes:
    try:
        key = jwk.JWK(**json.loads(jwk_str))
    except (json.JSONDecodeError, TypeError) as e:
        raise ConfigError(f"{ENV_PRIVATE_KEY} is not valid JWK JSON: {e}")
    except Exception as e:
        raise ConfigError(f"{ENV_PRIVATE_KEY} is not a valid JWK: {e}")

    if key.key_type != 'OKP' or key.get('crv') != 'Ed25519':
        raise ConfigError("JWK must be of type OKP with curve Ed25519.")
    if not key.has_private:
        raise ConfigError("JWK does not contain the private 'd' component.")
    return base64url_decode(key.get('d'))


def parse_private_key(value: str) -> bytes:
    """
    Accepts 64 hex characters (``0x`` optional) or an Ed25519 private JWK.

    Raises:
        ConfigError: If the value is neither form or has the wrong length.
    """
    value = value.strip()
    if value.startswith("{"):
        key_bytes = _private_key_from_jwk(value)
    else:
        try:
            key_bytes = hex_to_bytes(value, field=ENV_PRIVATE_KEY)
        except FormatError as e:
            raise ConfigError(
                f"{ENV_PRIVATE_KEY} must be a 64-character hex string "
                f"(with or without 0x prefix): {e.message}"
            )
    if len(key_bytes) != ED25519_PRIVATE_KEY_LENGTH:
        raise ConfigError(
            f"{ENV_PRIVATE_KEY} must be a 64-character hex string "
            f"(with or without 0x prefix), got {len(key_bytes) * 2} characters."
        )
    return key_bytes


def load_credentials(
    fid: Optional[str] = None,
    private_key: Optional[str] = None,
    domain: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Credentials:
    """
    Builds Credentials from explicit values, falling back to the environment.

    Raises:
        ConfigError: Listing every missing variable, or describing the
                     first malformed one.
    """
    env = os.environ if environ is None else environ
    fid = fid or env.get(ENV_FID)
    private_key = private_key or env.get(ENV_PRIVATE_KEY)
    domain = domain or env.get(ENV_DOMAIN)

    missing = [
        name for name, value in ((ENV_FID, fid), (ENV_PRIVATE_KEY, private_key), (ENV_DOMAIN, domain))
        if not value
    ]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    credentials = Credentials.create(
        account_id=parse_fid(fid),
        private_key=parse_private_key(private_key),
        domain=domain,
    )
    if credentials.domain != domain:
        logger.info(f"Normalized domain '{domain}' to '{credentials.domain}'")
    logger.info("Configuration validated successfully")
    return credentials


def resolve_manifest_path(path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if environ is None else environ
    return path or env.get(ENV_MANIFEST_PATH) or DEFAULT_MANIFEST_PATH
