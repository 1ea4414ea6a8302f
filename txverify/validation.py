"""Input validation for verification requests.

Everything here runs before any network call. A transaction id that does not
look like a hash never reaches URL construction, and garbage input never
spends rate-limit budget on the upstream APIs.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from .currencies import CurrencySpec, get_currency_spec
from .errors import InvalidAmountError, MalformedIdentifierError, UnsupportedCurrencyError
from .models import ChainFamily
from .registry import PaymentAddressRegistry

# 64 hex chars, optional 0x prefix
TRANSACTION_ID_PATTERN = re.compile(r"^(?:0x)?([0-9a-fA-F]{64})$")


@dataclass(frozen=True)
class ValidatedId:
    """A transaction id in the canonical form for its chain family."""

    transaction_id: str
    currency: CurrencySpec
    pay_to: str


def normalize_transaction_id(transaction_id: Any, family: ChainFamily | None = None) -> str:
    """Strip and shape-check a transaction id.

    Returns 64 lowercase hex characters, prefixed with ``0x`` for
    account-family chains.

    Raises:
        MalformedIdentifierError: if the id is not a (0x-prefixed) 64-char hex string.
    """
    if not isinstance(transaction_id, str):
        raise MalformedIdentifierError("Transaction id must be a string")

    match = TRANSACTION_ID_PATTERN.match(transaction_id.strip())
    if not match:
        raise MalformedIdentifierError("Transaction id must be 64 hex characters")

    digits = match.group(1).lower()
    if family == ChainFamily.account:
        return "0x" + digits
    return digits


def validate(
    transaction_id: Any, currency: Any, registry: PaymentAddressRegistry
) -> ValidatedId:
    """Validate a transaction id and currency code against the registry.

    Raises:
        MalformedIdentifierError: bad identifier shape.
        UnsupportedCurrencyError: currency unknown or without a payment address.
    """
    # Shape check first; the family only decides the canonical prefix
    normalize_transaction_id(transaction_id)

    if not isinstance(currency, str) or not currency.strip():
        raise UnsupportedCurrencyError("Currency code is required")

    code = currency.strip().upper()
    spec = get_currency_spec(code)
    pay_to = registry.address_for(code)
    if spec is None or pay_to is None:
        raise UnsupportedCurrencyError(f"Unsupported currency: {code}")

    return ValidatedId(
        transaction_id=normalize_transaction_id(transaction_id, spec.family),
        currency=spec,
        pay_to=pay_to,
    )


def validate_expected_amount(amount: Any) -> Decimal:
    """Return the expected amount as a positive, finite Decimal.

    Raises:
        InvalidAmountError: zero, negative, non-finite or non-numeric amounts.
    """
    if isinstance(amount, bool):
        raise InvalidAmountError("Expected amount must be a number")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmountError("Expected amount must be a number")

    if not value.is_finite():
        raise InvalidAmountError("Expected amount must be finite")
    if value <= 0:
        raise InvalidAmountError("Expected amount must be positive")
    return value
