"""Configuration for pytest"""

import pytest
import logging

from farcaster_assoc_tool.schemas import Credentials

# RFC 8032, section 7.1, TEST 1
RFC8032_SECRET_HEX = "9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60"
RFC8032_PUBLIC_HEX = "d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a"

@pytest.fixture(autouse=True)
def setup_logging():
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(levelname)s - %(name)s - %(message)s'
    )

    logging.getLogger('jwcrypto').setLevel(logging.WARNING)

    return logging.getLogger()

@pytest.fixture
def private_key():
    return bytes.fromhex(RFC8032_SECRET_HEX)

@pytest.fixture
def public_key():
    return bytes.fromhex(RFC8032_PUBLIC_HEX)

@pytest.fixture
def credentials(private_key):
    return Credentials.create(account_id=3621, private_key=private_key, domain="example.com")

@pytest.fixture(autouse=True)
def clean_farcaster_env(monkeypatch):
    """Keep real FARCASTER_* variables from leaking into tests."""
    for name in ("FARCASTER_FID", "FARCASTER_PRIVATE_KEY", "FARCASTER_DOMAIN", "FARCASTER_MANIFEST_PATH"):
        monkeypatch.delenv(name, raising=False)
