"""Static per-currency chain facts."""

from dataclasses import dataclass
from typing import Optional

from .models import ChainFamily, Currency


@dataclass(frozen=True)
class CurrencySpec:
    """How a currency settles: which chain family, at what precision."""

    code: Currency
    family: ChainFamily
    decimals: int
    token_contract: Optional[str] = None  # ERC-20 contract for account-family tokens

    @property
    def is_token(self) -> bool:
        return self.token_contract is not None


CURRENCIES: dict[Currency, CurrencySpec] = {
    Currency.BTC: CurrencySpec(Currency.BTC, ChainFamily.utxo, decimals=8),
    Currency.ETH: CurrencySpec(Currency.ETH, ChainFamily.account, decimals=18),
    Currency.USDT: CurrencySpec(
        Currency.USDT,
        ChainFamily.account,
        decimals=6,
        token_contract="0xdAC17F958D2ee523a2206206994597C13D831ec7",
    ),
    Currency.USDC: CurrencySpec(
        Currency.USDC,
        ChainFamily.account,
        decimals=6,
        token_contract="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    ),
}


def get_currency_spec(code: str) -> Optional[CurrencySpec]:
    """Look up a currency by code, or None if the engine has no chain for it."""
    try:
        return CURRENCIES[Currency(code)]
    except ValueError:
        return None
