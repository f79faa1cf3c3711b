"""Custom exception classes for farcaster-assoc-tool."""

from typing import Optional

class AssociationToolError(Exception):
    """Base class for tool-specific errors."""
    def __init__(self, message: str, error_code: str = "ToolError"):
        self.message = message
        self.error_code = error_code
        super().__init__(f"[{error_code}] {message}")

class ConfigError(AssociationToolError):
    """Missing or malformed credentials (FID, private key, domain)."""
    def __init__(self, message: str):
        super().__init__(message, error_code="ConfigError")

class FormatError(AssociationToolError):
    """Malformed hex or base64 found while decoding a field."""
    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        if field:
            message = f"{field}: {message}"
        super().__init__(message, error_code="FormatError")

class DecodeError(FormatError):
    """Base64 or JSON content that cannot be decoded."""
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, field=field)
        self.error_code = "DecodeError"

class SigningError(AssociationToolError):
    """Key material of the wrong shape reached the signing primitive."""
    def __init__(self, message: str):
        super().__init__(message, error_code="SigningError")

class IntegrityError(AssociationToolError):
    """A freshly generated association failed its own verification."""
    def __init__(self, message: str = "Generated signature failed self-verification"):
        super().__init__(message, error_code="IntegrityError")

class ManifestIOError(AssociationToolError):
    """Error reading or writing the manifest document."""
    def __init__(self, message: str):
        super().__init__(message, error_code="IOError")
