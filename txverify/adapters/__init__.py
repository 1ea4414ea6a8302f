"""Chain adapters, one per settlement family."""

from .base import ChainAdapter, LookupOutcome, TransactionLookup
from .evm import AccountAdapter
from .utxo import UtxoAdapter

__all__ = [
    "ChainAdapter",
    "LookupOutcome",
    "TransactionLookup",
    "AccountAdapter",
    "UtxoAdapter",
]
