"""Generation and verification of Farcaster account associations."""

import logging
from typing import Optional

from .codec import b64encode_bytes, b64decode_bytes, hex_to_bytes
from .constants import ED25519_PUBLIC_KEY_LENGTH, ED25519_SIGNATURE_LENGTH, PROOF_TYPE
from .errors import FormatError, IntegrityError
from .message import build_header, build_payload, compose_message, decode_header, decode_payload
from .schemas import AccountAssociation, Credentials, VerificationReport, is_valid_domain, is_valid_fid
from .signing import derive_public_key, sign, verify

logger = logging.getLogger(__name__)


class AssociationService:
    """
    Produces a signed account association for one set of credentials.

    The service holds no state beyond the credentials it was built with;
    derived key material lives only for the duration of :meth:`generate`.
    """

    def __init__(self, credentials: Credentials):
        self.credentials = credentials

    def generate(self) -> AccountAssociation:
        """
        Builds, signs and self-verifies an account association.

        Returns:
            The AccountAssociation with base64 header, payload and signature.

        Raises:
            SigningError: If the key material cannot be used for signing.
            IntegrityError: If the fresh signature does not verify.
        """
        creds = self.credentials
        logger.info(f"Generating account association for fid {creds.account_id} on {creds.domain}")

        public_key = derive_public_key(creds.private_key)
        header = build_header(creds.account_id, public_key)
        payload = build_payload(creds.domain)
        message = compose_message(header, payload)

        signature_bytes = sign(message, creds.private_key)
        if not verify(signature_bytes, message, public_key):
            logger.error("Self-verification of the generated signature failed")
            raise IntegrityError()

        association = AccountAssociation(
            header=header,
            payload=payload,
            signature=b64encode_bytes(signature_bytes),
        )
        logger.info("Account association generated and self-verified.")
        return association

    def public_key(self) -> bytes:
        """Raw 32-byte public key derived from the credentials' private key."""
        return derive_public_key(self.credentials.private_key)


def verify_association(
    association: AccountAssociation,
    expected_domain: Optional[str] = None,
    expected_fid: Optional[int] = None,
) -> VerificationReport:
    """
    Verifies an account association, reporting each check independently.

    The signed message is rebuilt from the stored base64 strings, never from
    re-encoded decoded objects. Decoding problems are recorded in
    ``report.errors`` and clear the affected flags; nothing is raised.

    Args:
        association: The stored header/payload/signature triple.
        expected_domain: If given, the payload domain must equal it.
        expected_fid: If given, the header fid must equal it.

    Returns:
        A VerificationReport; ``production_ready`` is the AND of all flags.
    """
    logger.info("Verifying account association.")
    report = VerificationReport()

    header = None
    try:
        header = decode_header(association.header)
        report.header_valid = isinstance(header, dict)
        if not report.header_valid:
            report.errors.append("header: decoded value is not a JSON object")
    except FormatError as e:
        report.errors.append(e.message)

    payload = None
    try:
        payload = decode_payload(association.payload)
        report.payload_valid = isinstance(payload, dict)
        if not report.payload_valid:
            report.errors.append("payload: decoded value is not a JSON object")
    except FormatError as e:
        report.errors.append(e.message)

    public_key = None
    if report.header_valid:
        report.fid = header.get("fid")
        report.fid_valid = is_valid_fid(report.fid)
        if not report.fid_valid:
            report.errors.append(f"fid: expected a positive integer, got {report.fid!r}")
        elif expected_fid is not None and report.fid != expected_fid:
            report.fid_valid = False
            report.errors.append(f"fid: expected {expected_fid}, found {report.fid}")

        if header.get("type") != PROOF_TYPE:
            report.errors.append(f"type: expected '{PROOF_TYPE}', got {header.get('type')!r}")

        key = header.get("key")
        if isinstance(key, str):
            report.key = key
            try:
                public_key = hex_to_bytes(key, field="key")
                if len(public_key) != ED25519_PUBLIC_KEY_LENGTH:
                    report.errors.append(
                        f"key: expected {ED25519_PUBLIC_KEY_LENGTH} bytes, got {len(public_key)}"
                    )
                    public_key = None
            except FormatError as e:
                report.errors.append(e.message)
        else:
            report.errors.append("key: missing or not a string")

    if report.payload_valid:
        report.domain = payload.get("domain")
        report.domain_format_valid = is_valid_domain(report.domain)
        if not report.domain_format_valid:
            report.errors.append(
                f"domain: expected a bare domain without scheme, got {report.domain!r}"
            )
        elif expected_domain is not None and report.domain != expected_domain:
            report.domain_format_valid = False
            report.errors.append(f"domain: expected '{expected_domain}', found '{report.domain}'")

    signature_bytes = None
    try:
        signature_bytes = b64decode_bytes(association.signature, field="signature")
        report.signature_length = len(signature_bytes)
        if len(signature_bytes) != ED25519_SIGNATURE_LENGTH:
            report.errors.append(
                f"signature: expected {ED25519_SIGNATURE_LENGTH} bytes, got {len(signature_bytes)}"
            )
            signature_bytes = None
    except FormatError as e:
        report.errors.append(e.message)

    if public_key is not None and signature_bytes is not None:
        message = compose_message(association.header, association.payload)
        report.signature_valid = verify(signature_bytes, message, public_key)
        if not report.signature_valid:
            report.errors.append("signature: Ed25519 verification failed")

    if report.production_ready:
        logger.info("Account association verified: all checks passed.")
    else:
        logger.warning(f"Account association verification found problems: {report.errors}")
    return report
