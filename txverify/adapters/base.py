"""Chain adapter interface and shared HTTP plumbing."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import httpx

from ..currencies import CurrencySpec
from ..errors import AdapterError
from ..logging_config import get_logger
from ..models import ChainFamily, ChainTransaction

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 5.0


class LookupOutcome(str, Enum):
    found = "found"
    not_found = "not_found"
    no_matching_output = "no_matching_output"  # exists, but did not pay pay_to


@dataclass(frozen=True)
class TransactionLookup:
    """Tagged result of a transaction lookup."""

    outcome: LookupOutcome
    transaction: Optional[ChainTransaction] = None

    @classmethod
    def found(cls, transaction: ChainTransaction) -> "TransactionLookup":
        return cls(LookupOutcome.found, transaction)

    @classmethod
    def not_found(cls) -> "TransactionLookup":
        return cls(LookupOutcome.not_found)

    @classmethod
    def no_matching_output(cls) -> "TransactionLookup":
        return cls(LookupOutcome.no_matching_output)


class ChainAdapter(ABC):
    """Read-only view of one settlement network.

    Implementations raise :class:`AdapterError` for network failures,
    timeouts and unparseable responses. Everything else is returned as data.
    """

    family: ChainFamily

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self._transport = transport

    @abstractmethod
    async def fetch_transaction(
        self, transaction_id: str, currency: CurrencySpec, pay_to: str
    ) -> TransactionLookup:
        """Look up a transaction and extract what it paid to ``pay_to``."""

    @abstractmethod
    async def fetch_chain_height(self) -> int:
        """Return the current chain tip height."""

    def addresses_match(self, left: str, right: str) -> bool:
        return left == right

    async def _get_json(
        self, url: str, params: Optional[dict] = None, allow_not_found: bool = False
    ) -> Any:
        """GET a JSON document, mapping every transport/parse failure to AdapterError.

        Returns None for HTTP 404 when ``allow_not_found`` is set.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params)
                if allow_not_found and response.status_code == 404:
                    return None
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as e:
            raise AdapterError(f"Timed out after {self.timeout}s calling {url}") from e
        except httpx.HTTPStatusError as e:
            raise AdapterError(f"HTTP {e.response.status_code} from {url}") from e
        except httpx.HTTPError as e:
            raise AdapterError(f"Network error calling {url}: {e}") from e
        except ValueError as e:
            raise AdapterError(f"Invalid JSON from {url}") from e
