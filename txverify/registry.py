"""Read-only payment configuration: where we get paid and how deep is final.

Both maps are built once from :class:`~txverify.config.Settings` and exposed
through ``MappingProxyType`` so they can be shared across requests without
locking.
"""

from types import MappingProxyType
from typing import Mapping, Optional

from .config import Settings

DEFAULT_MIN_CONFIRMATIONS = 12


def _normalize_code(code: str) -> str:
    return code.strip().upper()


class PaymentAddressRegistry:
    """Currency code -> merchant receiving address."""

    def __init__(self, addresses: Mapping[str, str]):
        cleaned = {}
        for code, address in addresses.items():
            address = (address or "").strip()
            if not address:
                raise ValueError(f"Empty payment address configured for {code}")
            cleaned[_normalize_code(code)] = address
        self._addresses = MappingProxyType(cleaned)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PaymentAddressRegistry":
        return cls(settings.payment_addresses)

    def address_for(self, currency: str) -> Optional[str]:
        return self._addresses.get(_normalize_code(currency))

    @property
    def currencies(self) -> tuple[str, ...]:
        return tuple(sorted(self._addresses))

    def as_mapping(self) -> Mapping[str, str]:
        return self._addresses

    def __contains__(self, currency: object) -> bool:
        return isinstance(currency, str) and _normalize_code(currency) in self._addresses

    def __len__(self) -> int:
        return len(self._addresses)


class ConfirmationPolicy:
    """Currency code -> minimum confirmations before a payment counts."""

    def __init__(self, minimums: Mapping[str, int], default: int = DEFAULT_MIN_CONFIRMATIONS):
        cleaned = {}
        for code, minimum in minimums.items():
            minimum = int(minimum)
            if minimum < 1:
                raise ValueError(f"Minimum confirmations for {code} must be >= 1, got {minimum}")
            cleaned[_normalize_code(code)] = minimum
        if default < 1:
            raise ValueError(f"Default minimum confirmations must be >= 1, got {default}")
        self._minimums = MappingProxyType(cleaned)
        self._default = default

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConfirmationPolicy":
        return cls(settings.min_confirmations)

    def minimum_for(self, currency: str) -> int:
        return self._minimums.get(_normalize_code(currency), self._default)

    def as_mapping(self) -> Mapping[str, int]:
        return self._minimums
