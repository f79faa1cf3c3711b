"""Shared constants for the farcaster-assoc-tool."""

ENV_FID: str = "FARCASTER_FID"
ENV_PRIVATE_KEY: str = "FARCASTER_PRIVATE_KEY"
ENV_DOMAIN: str = "FARCASTER_DOMAIN"
ENV_MANIFEST_PATH: str = "FARCASTER_MANIFEST_PATH"

DEFAULT_MANIFEST_PATH: str = "public/.well-known/farcaster.json"
DEFAULT_ENV_FILE: str = ".env"

PROOF_TYPE: str = "custody"
HEX_PREFIX: str = "0x"
MESSAGE_SEPARATOR: str = "."
PROTOCOL_PREFIXES = ("http://", "https://")
SIGNATURE_FORMAT_ED25519: str = "real/ed25519"
SIGNATURE_FORMAT_INVALID: str = "invalid"

ED25519_PRIVATE_KEY_LENGTH: int = 32
ED25519_PUBLIC_KEY_LENGTH: int = 32
ED25519_SIGNATURE_LENGTH: int = 64

MANIFEST_ASSOCIATION_KEY: str = "accountAssociation"
MANIFEST_APP_KEY: str = "miniapp"
MANIFEST_INDENT: int = 2

DEFAULT_APP_NAME: str = "Farcaster Mini App"
DEFAULT_BUTTON_TITLE: str = "Launch App"
DEFAULT_SPLASH_BACKGROUND: str = "#0ea5e9"

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
