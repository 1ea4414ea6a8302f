"""Exception taxonomy for payment verification.

Only input problems and data-source failures are exceptions. Business
outcomes such as "not found" or "still pending" are returned as data on the
verdict.
"""


class VerificationError(Exception):
    """Base class for txverify errors."""


class ValidationError(VerificationError, ValueError):
    """Raised when a request is rejected before any network call."""


class MalformedIdentifierError(ValidationError):
    """Transaction id is not a 64-character hex string (optionally 0x-prefixed)."""


class UnsupportedCurrencyError(ValidationError):
    """Currency code has no configured address or chain adapter."""


class InvalidAmountError(ValidationError):
    """Expected amount is not a positive, finite decimal."""


class AdapterError(VerificationError):
    """Raised when a blockchain data source fails or returns unusable data."""
