"""Pydantic models for input validation and output structuring."""

import re
from typing import Any, Optional, List, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field, field_validator
from pydantic.alias_generators import to_camel

from .constants import (
    ED25519_PRIVATE_KEY_LENGTH,
    ED25519_PUBLIC_KEY_LENGTH,
    PROOF_TYPE,
    PROTOCOL_PREFIXES,
    SIGNATURE_FORMAT_ED25519,
    SIGNATURE_FORMAT_INVALID,
)
from .errors import ConfigError

_PROTOCOL_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_domain(domain: str) -> str:
    """Strips an http(s) scheme and trailing slashes: ``https://a.com/`` -> ``a.com``."""
    return _PROTOCOL_RE.sub("", domain.strip()).rstrip("/")


def is_valid_domain(domain: Any) -> bool:
    """True for a non-empty string with no scheme prefix and no trailing slash."""
    return (
        isinstance(domain, str)
        and bool(domain)
        and not domain.lower().startswith(PROTOCOL_PREFIXES)
        and not domain.endswith("/")
    )


def is_valid_fid(fid: Any) -> bool:
    return isinstance(fid, int) and not isinstance(fid, bool) and fid > 0


class Credentials(BaseModel):
    """The inputs needed to produce an account association."""
    model_config = ConfigDict(frozen=True)

    account_id: int = Field(..., gt=0, description="Farcaster ID (FID) of the custody account.")
    private_key: bytes = Field(..., repr=False, description="Raw 32-byte Ed25519 private key.")
    domain: str = Field(..., description="Hosting domain without scheme or trailing slash.")

    @field_validator("private_key")
    @classmethod
    def _check_key_length(cls, v: bytes) -> bytes:
        if len(v) != ED25519_PRIVATE_KEY_LENGTH:
            raise ValueError(f"private key must be {ED25519_PRIVATE_KEY_LENGTH} bytes, got {len(v)}")
        return v

    @field_validator("domain")
    @classmethod
    def _normalize_domain(cls, v: str) -> str:
        domain = normalize_domain(v)
        if not domain:
            raise ValueError("domain is empty")
        if "/" in domain or any(c.isspace() for c in domain):
            raise ValueError(f"domain must be a bare host name, got '{domain}'")
        return domain

    @classmethod
    def create(cls, account_id: int, private_key: bytes, domain: str) -> "Credentials":
        """Builds credentials, reporting validation failures as ConfigError."""
        try:
            return cls(account_id=account_id, private_key=private_key, domain=domain)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigError(f"Invalid credentials: {problems}")


class KeyPair(BaseModel):
    """An Ed25519 key pair; the private half is never shown in repr."""
    model_config = ConfigDict(frozen=True)

    private_key: bytes = Field(..., repr=False)
    public_key: bytes

    @field_validator("public_key")
    @classmethod
    def _check_public_length(cls, v: bytes) -> bytes:
        if len(v) != ED25519_PUBLIC_KEY_LENGTH:
            raise ValueError(f"public key must be {ED25519_PUBLIC_KEY_LENGTH} bytes")
        return v


class Header(BaseModel):
    """Decoded header; field order is the serialization order."""
    fid: int
    type: Literal["custody"] = PROOF_TYPE
    key: str


class Payload(BaseModel):
    """Decoded payload."""
    domain: str


class AccountAssociation(BaseModel):
    """The persisted (header, payload, signature) triple, all base64 strings."""
    model_config = ConfigDict(frozen=True)

    header: str
    payload: str
    signature: str


class VerificationReport(BaseModel):
    """Per-check results of verifying an account association."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    header_valid: bool = Field(False, description="Header decoded to a JSON object.")
    payload_valid: bool = Field(False, description="Payload decoded to a JSON object.")
    domain_format_valid: bool = Field(False, description="Domain has no scheme or trailing slash.")
    fid_valid: bool = Field(False, description="FID is a positive integer.")
    signature_valid: bool = Field(False, description="Ed25519 signature verified under the header key.")
    fid: Optional[Any] = None
    key: Optional[str] = None
    domain: Optional[Any] = None
    signature_length: Optional[int] = None
    errors: List[str] = Field(default_factory=list)

    @computed_field(alias="productionReady")
    @property
    def production_ready(self) -> bool:
        return all((
            self.header_valid,
            self.payload_valid,
            self.domain_format_valid,
            self.fid_valid,
            self.signature_valid,
        ))

    @computed_field(alias="signatureFormat")
    @property
    def signature_format(self) -> str:
        return SIGNATURE_FORMAT_ED25519 if self.signature_valid else SIGNATURE_FORMAT_INVALID

    @computed_field(alias="message")
    @property
    def message(self) -> str:
        if self.signature_valid:
            return "Real Ed25519 signature verified successfully"
        return "Signature verification failed"


class GenerateOutput(BaseModel):
    """Output data for the 'generate' command."""
    accountAssociation: AccountAssociation
    fid: int = Field(..., description="FID the association was generated for.")
    domain: str = Field(..., description="Normalized domain that was signed.")
    publicKey: str = Field(..., description="0x-prefixed custody public key.")
    manifestPath: Optional[str] = Field(None, description="Manifest written, or None for a dry run.")
    signatureValid: bool


class ErrorOutput(BaseModel):
    """Standardized error output format."""
    error: str = Field(..., description="A short error code or category.")
    message: str = Field(..., description="A human-readable description of the error.")
