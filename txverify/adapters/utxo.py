"""UTXO-family adapter backed by a blockchain.info style explorer.

Uses two read endpoints:
- ``/rawtx/{txid}?format=json`` for the transaction and its outputs
- ``/latestblock`` for the chain tip
"""

from decimal import Decimal
from typing import Optional

import httpx

from ..currencies import CurrencySpec
from ..errors import AdapterError
from ..logging_config import get_logger
from ..models import ChainFamily, ChainTransaction
from .base import DEFAULT_TIMEOUT, ChainAdapter, TransactionLookup

logger = get_logger(__name__)

DEFAULT_EXPLORER_URL = "https://blockchain.info"


def _to_units(subunits: int, decimals: int) -> Decimal:
    """Convert integer subunits (satoshis) to the canonical unit."""
    return Decimal(subunits) / Decimal(10**decimals)


class UtxoAdapter(ChainAdapter):
    family = ChainFamily.utxo

    def __init__(
        self,
        base_url: str = DEFAULT_EXPLORER_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.base_url = base_url.rstrip("/")

    async def fetch_transaction(
        self, transaction_id: str, currency: CurrencySpec, pay_to: str
    ) -> TransactionLookup:
        tx = await self._get_json(
            f"{self.base_url}/rawtx/{transaction_id}",
            params={"format": "json"},
            allow_not_found=True,
        )
        if tx is None:
            return TransactionLookup.not_found()
        if not isinstance(tx, dict):
            raise AdapterError(f"Unexpected rawtx payload for {transaction_id}")

        try:
            # A transaction may pay the same address in more than one output
            paid = [int(out.get("value", 0)) for out in tx.get("out") or [] if out.get("addr") == pay_to]
            block_height = tx.get("block_height")
            block_height = int(block_height) if block_height is not None else None
        except (AttributeError, TypeError, ValueError) as e:
            raise AdapterError(f"Unparseable rawtx payload for {transaction_id}") from e

        if not paid:
            logger.info(f"No output to merchant address in tx={transaction_id}")
            return TransactionLookup.no_matching_output()

        return TransactionLookup.found(
            ChainTransaction(
                recipient_address=pay_to,
                transferred_amount=_to_units(sum(paid), currency.decimals),
                block_height=block_height,
            )
        )

    async def fetch_chain_height(self) -> int:
        data = await self._get_json(f"{self.base_url}/latestblock")
        try:
            return int(data["height"])
        except (KeyError, TypeError, ValueError) as e:
            raise AdapterError("Unparseable latestblock payload") from e
