"""Reading, merging and writing the mini-app manifest (farcaster.json)."""

import json
import logging
import os
from typing import Dict, Any, Optional

from .constants import (
    DEFAULT_APP_NAME,
    DEFAULT_BUTTON_TITLE,
    DEFAULT_SPLASH_BACKGROUND,
    MANIFEST_APP_KEY,
    MANIFEST_ASSOCIATION_KEY,
    MANIFEST_INDENT,
)
from .errors import FormatError, ManifestIOError
from .schemas import AccountAssociation

logger = logging.getLogger(__name__)

ASSOCIATION_FIELDS = ("header", "payload", "signature")


def default_manifest(domain: Optional[str] = None) -> Dict[str, Any]:
    """Skeleton manifest used when no readable manifest exists yet."""
    base_url = f"https://{domain}" if domain else ""
    return {
        MANIFEST_ASSOCIATION_KEY: {},
        MANIFEST_APP_KEY: {
            "version": "1",
            "name": DEFAULT_APP_NAME,
            "iconUrl": f"{base_url}/images/icon.png",
            "homeUrl": base_url,
            "imageUrl": f"{base_url}/images/embed.png",
            "buttonTitle": DEFAULT_BUTTON_TITLE,
            "splashImageUrl": f"{base_url}/images/splash.png",
            "splashBackgroundColor": DEFAULT_SPLASH_BACKGROUND,
        },
    }


def read_association(manifest: Dict[str, Any]) -> AccountAssociation:
    """
    Extracts the account association from a manifest.

    Raises:
        FormatError: If the association block or one of its fields is missing.
    """
    block = manifest.get(MANIFEST_ASSOCIATION_KEY)
    if not isinstance(block, dict) or not block:
        raise FormatError("No accountAssociation found in manifest", field=MANIFEST_ASSOCIATION_KEY)
    missing = [f for f in ASSOCIATION_FIELDS if not isinstance(block.get(f), str)]
    if missing:
        raise FormatError(
            f"Missing or non-string fields: {', '.join(missing)}", field=MANIFEST_ASSOCIATION_KEY
        )
    return AccountAssociation(**{f: block[f] for f in ASSOCIATION_FIELDS})


class ManifestStore:
    """Load/merge/save cycle for a manifest file at ``path``."""

    def __init__(self, path: str, domain: Optional[str] = None):
        self.path = path
        self.domain = domain

    def load(self) -> Dict[str, Any]:
        """
        Reads the manifest, falling back to :func:`default_manifest` when the
        file is absent, unreadable or not a JSON object.
        """
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                manifest = json.load(f)
        except FileNotFoundError:
            logger.info(f"No manifest at {self.path}; creating a new one.")
            return default_manifest(self.domain)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning(f"Could not read manifest {self.path} ({e}); starting from defaults.")
            return default_manifest(self.domain)

        if not isinstance(manifest, dict):
            logger.warning(f"Manifest {self.path} is not a JSON object; starting from defaults.")
            return default_manifest(self.domain)
        logger.debug(f"Loaded manifest from {self.path}")
        return manifest

    def load_strict(self) -> Dict[str, Any]:
        """Reads the manifest for verification; any failure is an error."""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                manifest = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.error(f"Failed to load manifest from {self.path}: {e}")
            raise ManifestIOError(f"Failed to load manifest from {self.path}: {e}")
        if not isinstance(manifest, dict):
            raise ManifestIOError(f"Manifest {self.path} is not a JSON object.")
        return manifest

    @staticmethod
    def merge(manifest: Dict[str, Any], association: AccountAssociation) -> Dict[str, Any]:
        """Returns a shallow copy of ``manifest`` with the association replaced wholesale."""
        merged = dict(manifest)
        merged[MANIFEST_ASSOCIATION_KEY] = association.model_dump()
        return merged

    def save(self, manifest: Dict[str, Any]) -> None:
        """
        Writes the manifest as 2-space indented JSON, replacing the file.

        Raises:
            ManifestIOError: If the file cannot be written.
        """
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                f.write(json.dumps(manifest, indent=MANIFEST_INDENT, ensure_ascii=False))
                f.write("\n")
            logger.info(f"Manifest saved to {self.path}")
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write manifest to {self.path}: {e}")
            raise ManifestIOError(f"Failed to write manifest to {self.path}: {e}")
