"""Unit tests for association module"""

import base64
import pytest
from unittest.mock import patch

from farcaster_assoc_tool.association import AssociationService, verify_association
from farcaster_assoc_tool.codec import encode_base64_json
from farcaster_assoc_tool.errors import ConfigError, IntegrityError
from farcaster_assoc_tool.message import build_header, build_payload, compose_message, decode_header, decode_payload
from farcaster_assoc_tool.schemas import AccountAssociation, Credentials
from farcaster_assoc_tool.signing import sign


def _flip_b64_char(value: str, index: int) -> str:
    replacement = "B" if value[index] != "B" else "C"
    return value[:index] + replacement + value[index + 1:]


@pytest.fixture
def association(credentials):
    return AssociationService(credentials).generate()


def test_generate_and_verify_all_flags(association, public_key):
    """Test fid 3621 on example.com with a fixed key verifies on every check"""
    report = verify_association(association)

    assert report.header_valid
    assert report.payload_valid
    assert report.domain_format_valid
    assert report.fid_valid
    assert report.signature_valid
    assert report.production_ready
    assert report.errors == []
    assert report.fid == 3621
    assert report.domain == "example.com"
    assert report.key == "0x" + public_key.hex()
    assert report.signature_length == 64

def test_generate_is_deterministic(credentials):
    first = AssociationService(credentials).generate()
    second = AssociationService(credentials).generate()
    assert first == second

def test_generate_fields(association, public_key):
    assert decode_header(association.header) == {
        "fid": 3621, "type": "custody", "key": "0x" + public_key.hex()
    }
    assert decode_payload(association.payload) == {"domain": "example.com"}
    assert len(base64.b64decode(association.signature)) == 64

def test_signature_covers_stored_strings(association, private_key):
    message = compose_message(association.header, association.payload)
    assert base64.b64decode(association.signature) == sign(message, private_key)

def test_scheme_prefix_is_normalized_before_signing(private_key):
    """Test that https:// is stripped from the domain, not signed"""
    creds = Credentials.create(account_id=3621, private_key=private_key, domain="https://example.com")
    assert creds.domain == "example.com"

    association = AssociationService(creds).generate()
    assert decode_payload(association.payload) == {"domain": "example.com"}
    assert verify_association(association).production_ready

def test_path_in_domain_rejected(private_key):
    with pytest.raises(ConfigError):
        Credentials.create(account_id=3621, private_key=private_key, domain="https://example.com/app")

def test_corrupted_signature_only_clears_signature_flag(association):
    """Test that flipping one base64 character only affects signatureValid"""
    tampered = association.model_copy(update={"signature": _flip_b64_char(association.signature, 5)})
    report = verify_association(tampered)

    assert report.signature_valid is False
    assert report.header_valid
    assert report.payload_valid
    assert report.domain_format_valid
    assert report.fid_valid
    assert report.production_ready is False
    assert any("signature" in e for e in report.errors)

def test_swapped_payload_fails_signature(association, credentials):
    tampered = association.model_copy(update={"payload": build_payload("evil.example")})
    report = verify_association(tampered)
    assert report.payload_valid
    assert report.domain == "evil.example"
    assert report.signature_valid is False

def test_undecodable_header_degrades_gracefully(association):
    tampered = association.model_copy(update={"header": "%%%not-base64%%%"})
    report = verify_association(tampered)

    assert report.header_valid is False
    assert report.fid_valid is False
    assert report.signature_valid is False
    assert report.payload_valid
    assert report.domain_format_valid
    assert any(e.startswith("header") for e in report.errors)

def test_undecodable_signature(association):
    tampered = association.model_copy(update={"signature": "@@@"})
    report = verify_association(tampered)
    assert report.signature_valid is False
    assert report.signature_length is None
    assert report.header_valid and report.payload_valid

def test_short_signature(association):
    tampered = association.model_copy(update={"signature": base64.b64encode(b"\x00" * 10).decode()})
    report = verify_association(tampered)
    assert report.signature_valid is False
    assert report.signature_length == 10

def test_domain_with_scheme_is_flagged(private_key, public_key):
    """Test a stored payload carrying https:// fails the domain check even when signed"""
    header = build_header(3621, public_key)
    payload = encode_base64_json({"domain": "https://example.com"})
    signature = base64.b64encode(sign(compose_message(header, payload), private_key)).decode()

    report = verify_association(AccountAssociation(header=header, payload=payload, signature=signature))
    assert report.signature_valid
    assert report.domain_format_valid is False
    assert report.production_ready is False

@pytest.mark.parametrize("fid", [0, -5, "3621", True, None])
def test_invalid_fid_is_flagged(private_key, public_key, fid):
    key = "0x" + public_key.hex()
    header = encode_base64_json({"fid": fid, "type": "custody", "key": key})
    payload = build_payload("example.com")
    signature = base64.b64encode(sign(compose_message(header, payload), private_key)).decode()

    report = verify_association(AccountAssociation(header=header, payload=payload, signature=signature))
    assert report.fid_valid is False
    assert report.signature_valid

def test_missing_key_in_header(association):
    header = encode_base64_json({"fid": 3621, "type": "custody"})
    report = verify_association(association.model_copy(update={"header": header}))
    assert report.header_valid
    assert report.signature_valid is False
    assert any(e.startswith("key") for e in report.errors)

def test_malformed_key_in_header(association):
    header = encode_base64_json({"fid": 3621, "type": "custody", "key": "0xnothex"})
    report = verify_association(association.model_copy(update={"header": header}))
    assert report.signature_valid is False
    assert report.key == "0xnothex"

def test_header_not_an_object(association):
    report = verify_association(association.model_copy(update={"header": encode_base64_json([1, 2])}))
    assert report.header_valid is False
    assert report.fid_valid is False

def test_expected_values(association):
    assert verify_association(association, expected_domain="example.com", expected_fid=3621).production_ready

    report = verify_association(association, expected_domain="other.com", expected_fid=1)
    assert report.domain_format_valid is False
    assert report.fid_valid is False
    assert report.signature_valid
    assert len(report.errors) == 2

def test_report_aliases(association):
    dumped = verify_association(association).model_dump(by_alias=True)
    for name in ("headerValid", "payloadValid", "domainFormatValid", "fidValid",
                 "signatureValid", "productionReady"):
        assert dumped[name] is True

@patch('farcaster_assoc_tool.association.verify', return_value=False)
def test_self_verification_failure_raises(mock_verify, credentials):
    """Test that an association failing its own check is never returned"""
    with pytest.raises(IntegrityError):
        AssociationService(credentials).generate()
    mock_verify.assert_called_once()

def _flip_b64_low_bit(value: str, index: int) -> str:
    alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
    replacement = alphabet[alphabet.index(value[index]) ^ 1]
    return value[:index] + replacement + value[index + 1:]

def test_flipped_padding_bits_in_signature_rejected(association):
    """Test that the last data character before '==' cannot be altered unnoticed"""
    assert association.signature.endswith("==")
    last = len(association.signature.rstrip("=")) - 1
    tampered = association.model_copy(
        update={"signature": _flip_b64_low_bit(association.signature, last)}
    )
    assert base64.b64decode(tampered.signature) == base64.b64decode(association.signature)

    report = verify_association(tampered)
    assert report.signature_valid is False
    assert report.production_ready is False
    assert report.header_valid and report.payload_valid
    assert report.domain_format_valid and report.fid_valid
    assert any("non-canonical" in e for e in report.errors)

def test_deeply_nested_header_degrades_gracefully(association):
    nested = base64.b64encode(("[" * 100000 + "]" * 100000).encode()).decode()
    report = verify_association(association.model_copy(update={"header": nested}))

    assert report.header_valid is False
    assert report.signature_valid is False
    assert report.payload_valid
    assert any("nested too deeply" in e for e in report.errors)

def test_report_signature_format_and_message(association):
    dumped = verify_association(association).model_dump(by_alias=True)
    assert dumped["signatureFormat"] == "real/ed25519"
    assert dumped["message"] == "Real Ed25519 signature verified successfully"

    tampered = association.model_copy(update={"signature": _flip_b64_char(association.signature, 5)})
    dumped = verify_association(tampered).model_dump(by_alias=True)
    assert dumped["signatureFormat"] == "invalid"
    assert dumped["message"] == "Signature verification failed"

def test_service_public_key(credentials, public_key):
    assert AssociationService(credentials).public_key() == public_key
