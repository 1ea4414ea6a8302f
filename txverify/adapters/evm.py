"""Account-family adapter (Ethereum and ERC-20 tokens) via an Etherscan proxy.

Base-asset payments are read straight off the transaction. Token payments
are read from the ERC-20 ``Transfer`` logs in the receipt:
1. Fetch the transaction (``eth_getTransactionByHash``)
2. Once mined, fetch the receipt (``eth_getTransactionReceipt``)
3. Parse Transfer events emitted by the token contract
4. Sum transfers to the merchant address

The outer ``to``/``value`` of a token transaction describe the call into the
token contract, not the tokens moved, so they are never used for tokens.
"""

from decimal import Decimal
from typing import Any, Optional

import httpx

from ..currencies import CurrencySpec
from ..errors import AdapterError
from ..logging_config import get_logger
from ..models import ChainFamily, ChainTransaction
from .base import DEFAULT_TIMEOUT, ChainAdapter, TransactionLookup

logger = get_logger(__name__)

DEFAULT_API_URL = "https://api.etherscan.io/v2/api"

# ERC20 Transfer event signature: Transfer(address indexed from, address indexed to, uint256 value)
TRANSFER_EVENT_SIGNATURE = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"

# transfer(address,uint256)
TRANSFER_METHOD_SELECTOR = "0xa9059cbb"


def _normalize_address(address: Optional[str]) -> str:
    """Normalize an Ethereum address to lowercase with 0x prefix."""
    if not address:
        return ""
    address = address.lower()
    if not address.startswith("0x"):
        address = "0x" + address
    if len(address) == 66:  # 32-byte padded address from event log
        address = "0x" + address[-40:]
    return address


def _hex_to_int(value: Any) -> int:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ValueError(f"Not a hex quantity: {value!r}")
    return int(value, 16) if value != "0x" else 0


def _scale(raw: int, decimals: int) -> Decimal:
    return Decimal(raw) / Decimal(10**decimals)


def _parse_transfer_log(log: dict, decimals: int) -> Optional[dict]:
    """Parse an ERC20 Transfer event log.

    Transfer event: Transfer(address indexed from, address indexed to, uint256 value)
    - topics[0]: event signature
    - topics[1]: from address (indexed, padded to 32 bytes)
    - topics[2]: to address (indexed, padded to 32 bytes)
    - data: value (uint256)
    """
    topics = log.get("topics") or []

    if len(topics) < 3:
        return None

    if topics[0].lower() != TRANSFER_EVENT_SIGNATURE:
        return None

    amount_raw = _hex_to_int(log.get("data") or "0x")
    return {
        "from_address": _normalize_address(topics[1]),
        "to_address": _normalize_address(topics[2]),
        "amount": _scale(amount_raw, decimals),
        "amount_raw": amount_raw,
    }


def _decode_transfer_call(tx: dict, token_contract: str, decimals: int) -> Optional[dict]:
    """Decode ``transfer(address,uint256)`` call data sent to the token contract.

    Only used while the transaction is unmined and has no receipt yet.
    """
    if _normalize_address(tx.get("to")) != _normalize_address(token_contract):
        return None

    data = (tx.get("input") or "").lower()
    if not data.startswith(TRANSFER_METHOD_SELECTOR):
        return None

    args = data[len(TRANSFER_METHOD_SELECTOR):]
    if len(args) < 128:
        return None

    amount_raw = int(args[64:128], 16)
    return {
        "from_address": _normalize_address(tx.get("from")),
        "to_address": _normalize_address(args[:64]),
        "amount": _scale(amount_raw, decimals),
        "amount_raw": amount_raw,
    }


class AccountAdapter(ChainAdapter):
    family = ChainFamily.account

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        chain_id: int = 1,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.api_url = api_url
        self.chain_id = chain_id
        self.api_key = api_key

    def addresses_match(self, left: str, right: str) -> bool:
        return _normalize_address(left) == _normalize_address(right)

    async def _proxy_call(self, action: str, **params) -> Any:
        """Make a JSON-RPC call through the explorer's proxy module."""
        query = {"chainid": self.chain_id, "module": "proxy", "action": action, **params}
        if self.api_key:
            query["apikey"] = self.api_key

        data = await self._get_json(self.api_url, params=query)
        if not isinstance(data, dict):
            raise AdapterError(f"Unexpected {action} payload")
        if "error" in data:
            raise AdapterError(f"RPC error from {action}: {data['error']}")
        # Explorer-level failures (bad key, rate limited) use a status envelope
        if data.get("status") == "0":
            raise AdapterError(f"{action} rejected: {data.get('message')} {data.get('result')}")
        return data.get("result")

    async def fetch_transaction(
        self, transaction_id: str, currency: CurrencySpec, pay_to: str
    ) -> TransactionLookup:
        tx = await self._proxy_call("eth_getTransactionByHash", txhash=transaction_id)
        if not tx:
            return TransactionLookup.not_found()
        if not isinstance(tx, dict):
            raise AdapterError(f"Unexpected transaction payload for {transaction_id}")

        try:
            block_height = _hex_to_int(tx["blockNumber"]) if tx.get("blockNumber") else None

            if not currency.is_token:
                return TransactionLookup.found(
                    ChainTransaction(
                        recipient_address=_normalize_address(tx.get("to")),
                        transferred_amount=_scale(_hex_to_int(tx.get("value") or "0x"), currency.decimals),
                        block_height=block_height,
                    )
                )

            transfers = await self._token_transfers(tx, transaction_id, currency, block_height)
            if transfers is None:
                # Receipt not visible yet; fall back to the call data and stay unconfirmed
                transfer = _decode_transfer_call(tx, currency.token_contract, currency.decimals)
                transfers = [transfer] if transfer else []
                block_height = None
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise AdapterError(f"Unparseable transaction data for {transaction_id}") from e

        merchant = _normalize_address(pay_to)
        paid = [t["amount"] for t in transfers if t["to_address"] == merchant]
        if not paid:
            logger.info(f"No {currency.code.value} transfer to merchant address in tx={transaction_id}")
            return TransactionLookup.no_matching_output()

        return TransactionLookup.found(
            ChainTransaction(
                recipient_address=merchant,
                transferred_amount=sum(paid, Decimal(0)),
                block_height=block_height,
            )
        )

    async def _token_transfers(
        self, tx: dict, transaction_id: str, currency: CurrencySpec, block_height: Optional[int]
    ) -> Optional[list[dict]]:
        """Transfer events for the token in this transaction, or None without a receipt."""
        if block_height is None:
            return None

        receipt = await self._proxy_call("eth_getTransactionReceipt", txhash=transaction_id)
        if not receipt:
            logger.info(f"Receipt not yet available for mined tx={transaction_id}")
            return None

        if not isinstance(receipt, dict):
            raise AdapterError(f"Unexpected receipt payload for {transaction_id}")

        # Reverted transactions move no tokens
        if _hex_to_int(receipt.get("status") or "0x0") != 1:
            logger.info(f"Token tx reverted: tx={transaction_id}")
            return []

        token = _normalize_address(currency.token_contract)
        transfers = []
        for log in receipt.get("logs") or []:
            if _normalize_address(log.get("address")) != token:
                continue
            transfer = _parse_transfer_log(log, currency.decimals)
            if transfer:
                transfers.append(transfer)
        return transfers

    async def fetch_chain_height(self) -> int:
        result = await self._proxy_call("eth_blockNumber")
        try:
            return _hex_to_int(result)
        except ValueError as e:
            raise AdapterError("Unparseable eth_blockNumber result") from e
