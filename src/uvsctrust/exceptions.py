from __future__ import annotations


class UvsctrustError(Exception):
    """Base class for all uVSCTrust domain errors."""


class ManifestValidationError(ValueError, UvsctrustError):
    """Raised when an extension manifest cannot be loaded or lacks an identity."""


class PolicyValidationError(ValueError, UvsctrustError):
    """Raised when an override or product policy option is malformed."""
