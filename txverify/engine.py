"""Verification orchestrator.

Sequences validation, lookup, address and amount checks, then confirmation
depth into one verdict. The order is fixed and short-circuits: a transaction
that pays the wrong address or amount is reported as failed no matter how
deep it is buried, and no height lookup is spent on it.

There is no retry inside a verification. Pending payments are re-polled by
the caller, guided by the "waiting for confirmations (n/minimum)" message.
"""

from typing import Mapping, Optional

from .adapters import AccountAdapter, ChainAdapter, LookupOutcome, UtxoAdapter
from .config import Settings
from .currencies import CURRENCIES, get_currency_spec
from .errors import (
    AdapterError,
    InvalidAmountError,
    MalformedIdentifierError,
    UnsupportedCurrencyError,
)
from .logging_config import get_logger, log_verification
from .models import (
    ChainFamily,
    VerificationOutcome,
    VerificationRequest,
    VerificationVerdict,
)
from .policy import evaluate_confirmations, reconcile
from .registry import ConfirmationPolicy, PaymentAddressRegistry
from .validation import normalize_transaction_id, validate, validate_expected_amount

logger = get_logger(__name__)

MSG_INVALID_IDENTIFIER = "invalid identifier format"
MSG_UNSUPPORTED_CURRENCY = "unsupported cryptocurrency"
MSG_INVALID_AMOUNT = "invalid expected amount"
MSG_NOT_FOUND = "transaction not found on blockchain"
MSG_ADDRESS_MISMATCH = "transaction does not send to our address"
MSG_AMOUNT_MISMATCH = "transaction amount does not match"
MSG_UNCONFIRMED = "transaction is unconfirmed"
MSG_WAITING = "waiting for confirmations ({confirmations}/{minimum})"
MSG_CONFIRMED = "payment confirmed"
MSG_UNAVAILABLE = "unable to verify transaction"


def _loggable_id(transaction_id: str) -> str:
    """Canonical hex for well-formed ids, an escaped excerpt otherwise."""
    try:
        return normalize_transaction_id(transaction_id)
    except MalformedIdentifierError:
        return repr(transaction_id[:80])


def _loggable_currency(currency: str) -> str:
    code = currency.strip().upper()
    return code if get_currency_spec(code) else repr(currency[:16])


class VerificationEngine:
    """Turns a :class:`VerificationRequest` into a :class:`VerificationVerdict`.

    Args:
        registry: merchant receiving address per currency.
        policy: minimum confirmations per currency.
        adapters: chain adapter per currency code.
    """

    def __init__(
        self,
        registry: PaymentAddressRegistry,
        policy: ConfirmationPolicy,
        adapters: Mapping[str, ChainAdapter],
    ):
        self.registry = registry
        self.policy = policy
        self._adapters = dict(adapters)

    def adapter_for(self, currency: str) -> Optional[ChainAdapter]:
        return self._adapters.get(currency)

    async def verify(
        self, request: VerificationRequest, caller_id: Optional[str] = None
    ) -> VerificationVerdict:
        verdict = await self._evaluate(request)
        log_verification(
            transaction_id=_loggable_id(request.transaction_id),
            currency=_loggable_currency(request.currency),
            outcome=verdict.outcome.value,
            status=verdict.status.value,
            confirmations=verdict.confirmations,
            caller_id=caller_id,
        )
        return verdict

    async def _evaluate(self, request: VerificationRequest) -> VerificationVerdict:
        try:
            validated = validate(request.transaction_id, request.currency, self.registry)
            expected = validate_expected_amount(request.expected_amount)
        except MalformedIdentifierError:
            return VerificationVerdict.failed(VerificationOutcome.invalid_input, MSG_INVALID_IDENTIFIER)
        except UnsupportedCurrencyError:
            return VerificationVerdict.failed(
                VerificationOutcome.unsupported_currency, MSG_UNSUPPORTED_CURRENCY
            )
        except InvalidAmountError:
            return VerificationVerdict.failed(VerificationOutcome.invalid_input, MSG_INVALID_AMOUNT)

        code = validated.currency.code.value
        adapter = self.adapter_for(code)
        if adapter is None:
            logger.error(f"No chain adapter configured for {code}")
            return VerificationVerdict.failed(
                VerificationOutcome.unsupported_currency, MSG_UNSUPPORTED_CURRENCY
            )

        tx_id = validated.transaction_id
        try:
            lookup = await adapter.fetch_transaction(tx_id, validated.currency, validated.pay_to)

            if lookup.outcome == LookupOutcome.not_found:
                return VerificationVerdict.failed(VerificationOutcome.not_found, MSG_NOT_FOUND)

            tx = lookup.transaction
            if lookup.outcome == LookupOutcome.no_matching_output or not adapter.addresses_match(
                tx.recipient_address, validated.pay_to
            ):
                return VerificationVerdict.failed(
                    VerificationOutcome.address_mismatch, MSG_ADDRESS_MISMATCH
                )

            if not reconcile(expected, tx.transferred_amount):
                logger.info(
                    f"Amount mismatch: tx={tx_id} currency={code} "
                    f"expected={expected} actual={tx.transferred_amount}"
                )
                return VerificationVerdict.failed(
                    VerificationOutcome.amount_mismatch, MSG_AMOUNT_MISMATCH
                )

            if tx.block_height is None:
                return VerificationVerdict.pending(VerificationOutcome.unconfirmed, MSG_UNCONFIRMED)

            current_height = await adapter.fetch_chain_height()
        except AdapterError as e:
            logger.warning(f"Lookup failed for tx={tx_id} currency={code}: {e}")
            return VerificationVerdict.failed(VerificationOutcome.lookup_error, MSG_UNAVAILABLE)

        minimum = self.policy.minimum_for(code)
        confirmations, meets_threshold = evaluate_confirmations(
            tx.block_height, current_height, minimum
        )
        if not meets_threshold:
            return VerificationVerdict.pending(
                VerificationOutcome.below_threshold,
                MSG_WAITING.format(confirmations=confirmations, minimum=minimum),
                confirmations=confirmations,
            )

        return VerificationVerdict.confirmed(confirmations, MSG_CONFIRMED)


def build_adapters(settings: Settings) -> dict[str, ChainAdapter]:
    """One adapter per chain family, keyed by every currency code it serves."""
    by_family: dict[ChainFamily, ChainAdapter] = {
        ChainFamily.utxo: UtxoAdapter(
            base_url=settings.btc_explorer_url,
            timeout=settings.request_timeout_seconds,
        ),
        ChainFamily.account: AccountAdapter(
            api_url=settings.etherscan_api_url,
            chain_id=settings.etherscan_chain_id,
            api_key=settings.etherscan_api_key,
            timeout=settings.request_timeout_seconds,
        ),
    }
    return {code.value: by_family[spec.family] for code, spec in CURRENCIES.items()}


def build_engine(settings: Settings) -> VerificationEngine:
    """Wire the engine from settings (registry, policy, adapters)."""
    return VerificationEngine(
        registry=PaymentAddressRegistry.from_settings(settings),
        policy=ConfirmationPolicy.from_settings(settings),
        adapters=build_adapters(settings),
    )
