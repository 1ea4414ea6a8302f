"""txverify - independent on-chain verification of checkout payments."""

__version__ = "0.1.0"

from txverify.engine import VerificationEngine, build_engine
from txverify.models import (
    ChainTransaction,
    Currency,
    VerificationOutcome,
    VerificationRequest,
    VerificationStatus,
    VerificationVerdict,
)

__all__ = [
    "VerificationEngine",
    "build_engine",
    "ChainTransaction",
    "Currency",
    "VerificationOutcome",
    "VerificationRequest",
    "VerificationStatus",
    "VerificationVerdict",
]
