"""Data model for on-chain payment verification.

All monetary values use Decimal, never float. Nothing here is persisted:
requests and verdicts live for the duration of one verification.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel


# =============================================================================
# Enums
# =============================================================================


class Currency(str, Enum):
    """Currencies the engine knows how to verify."""

    BTC = "BTC"
    ETH = "ETH"
    USDT = "USDT"
    USDC = "USDC"


class ChainFamily(str, Enum):
    """Settlement network model."""

    utxo = "utxo"
    account = "account"


class VerificationStatus(str, Enum):
    """Caller-facing verdict states."""

    confirmed = "confirmed"
    pending = "pending"
    failed = "failed"


class VerificationOutcome(str, Enum):
    """Why a verdict ended where it did."""

    invalid_input = "invalid_input"
    unsupported_currency = "unsupported_currency"
    not_found = "not_found"
    address_mismatch = "address_mismatch"
    amount_mismatch = "amount_mismatch"
    unconfirmed = "unconfirmed"
    below_threshold = "below_threshold"
    confirmed = "confirmed"
    lookup_error = "lookup_error"


# =============================================================================
# Request / chain data / verdict
# =============================================================================


class VerificationRequest(BaseModel):
    """A caller's claim that a transaction paid us."""

    transaction_id: str
    currency: str
    expected_amount: Decimal

    class Config:
        frozen = True


@dataclass(frozen=True)
class ChainTransaction:
    """Recipient, amount and block of a transfer as seen on chain.

    ``transferred_amount`` is always in the currency's canonical unit
    (BTC, ETH, whole tokens). ``block_height`` is None while unmined.
    """

    recipient_address: str
    transferred_amount: Decimal
    block_height: Optional[int] = None


class VerificationVerdict(BaseModel):
    """The single artifact returned by the engine."""

    verified: bool
    confirmations: int
    status: VerificationStatus
    message: str
    outcome: VerificationOutcome

    class Config:
        frozen = True

    @classmethod
    def failed(cls, outcome: VerificationOutcome, message: str) -> "VerificationVerdict":
        return cls(
            verified=False,
            confirmations=0,
            status=VerificationStatus.failed,
            message=message,
            outcome=outcome,
        )

    @classmethod
    def pending(
        cls, outcome: VerificationOutcome, message: str, confirmations: int = 0
    ) -> "VerificationVerdict":
        return cls(
            verified=False,
            confirmations=confirmations,
            status=VerificationStatus.pending,
            message=message,
            outcome=outcome,
        )

    @classmethod
    def confirmed(cls, confirmations: int, message: str) -> "VerificationVerdict":
        return cls(
            verified=True,
            confirmations=confirmations,
            status=VerificationStatus.confirmed,
            message=message,
            outcome=VerificationOutcome.confirmed,
        )

    def to_dict(self) -> dict:
        """Caller-facing fields only."""
        return {
            "verified": self.verified,
            "confirmations": self.confirmations,
            "status": self.status.value,
            "message": self.message,
        }
