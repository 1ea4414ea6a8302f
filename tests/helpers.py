"""Shared test constants and a call-counting stub adapter."""

from txverify.adapters.base import ChainAdapter, TransactionLookup
from txverify.models import ChainFamily

BTC_ADDRESS = "3BuLwoGXiWx56RD7GsP98Nu6i9G2igYHss"
ETH_ADDRESS = "0x30eD305B89b6207A5fa907575B395c9189728EbC"
TOKEN_ADDRESS = "0xbC1bF337c63B2A1B8115001b356E6b5C2F09685c"

PAYMENT_ADDRESSES = {
    "BTC": BTC_ADDRESS,
    "ETH": ETH_ADDRESS,
    "USDT": TOKEN_ADDRESS,
    "USDC": TOKEN_ADDRESS,
}
MIN_CONFIRMATIONS = {"BTC": 3, "ETH": 12, "USDT": 12, "USDC": 12}

BTC_TXID = "4a5e1e4baab89f3a32518a88c31bc87f618f76673e2cc77ab2127b7afdeda33b"
ETH_TXID = "0x88df016429689c079f3b2f6ad39fa052532c56795b733da78a91ebe6a713944b"


class StubAdapter(ChainAdapter):
    """In-memory adapter that counts every call made to it."""

    family = ChainFamily.utxo

    def __init__(self, lookup=None, height=0, error=None, height_error=None):
        super().__init__()
        self.lookup = lookup or TransactionLookup.not_found()
        self.height = height
        self.error = error
        self.height_error = height_error
        self.transaction_calls = []
        self.height_calls = 0

    @property
    def calls(self) -> int:
        return len(self.transaction_calls) + self.height_calls

    async def fetch_transaction(self, transaction_id, currency, pay_to):
        self.transaction_calls.append((transaction_id, currency.code.value, pay_to))
        if self.error:
            raise self.error
        return self.lookup

    async def fetch_chain_height(self):
        self.height_calls += 1
        if self.height_error:
            raise self.height_error
        return self.height
