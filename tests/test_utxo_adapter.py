"""Tests for the blockchain.info style UTXO adapter."""

from decimal import Decimal

import httpx
import pytest
from helpers import BTC_ADDRESS, BTC_TXID

from txverify.adapters.base import LookupOutcome
from txverify.adapters.utxo import UtxoAdapter
from txverify.currencies import CURRENCIES
from txverify.errors import AdapterError
from txverify.models import Currency

BTC = CURRENCIES[Currency.BTC]
OTHER_ADDRESS = "bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq"


def _adapter(handler) -> UtxoAdapter:
    return UtxoAdapter(base_url="https://explorer.test", transport=httpx.MockTransport(handler))


def _rawtx(outputs, block_height=None):
    tx = {"hash": BTC_TXID, "out": outputs}
    if block_height is not None:
        tx["block_height"] = block_height
    return tx


class TestFetchTransaction:
    """Tests for rawtx lookups."""

    @pytest.mark.asyncio
    async def test_matching_output(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json=_rawtx(
                    [
                        {"addr": OTHER_ADDRESS, "value": 42_000},
                        {"addr": BTC_ADDRESS, "value": 150_000_000},
                    ],
                    block_height=800_000,
                ),
            )

        lookup = await _adapter(handler).fetch_transaction(BTC_TXID, BTC, BTC_ADDRESS)

        assert lookup.outcome == LookupOutcome.found
        assert lookup.transaction.recipient_address == BTC_ADDRESS
        assert lookup.transaction.transferred_amount == Decimal("1.5")
        assert lookup.transaction.block_height == 800_000
        assert seen[0].url.path == f"/rawtx/{BTC_TXID}"
        assert seen[0].url.params["format"] == "json"

    @pytest.mark.asyncio
    async def test_amount_is_decimal_not_satoshis(self):
        def handler(request):
            return httpx.Response(200, json=_rawtx([{"addr": BTC_ADDRESS, "value": 1}], 1))

        lookup = await _adapter(handler).fetch_transaction(BTC_TXID, BTC, BTC_ADDRESS)

        assert isinstance(lookup.transaction.transferred_amount, Decimal)
        assert lookup.transaction.transferred_amount == Decimal("0.00000001")

    @pytest.mark.asyncio
    async def test_multiple_outputs_to_merchant_are_summed(self):
        def handler(request):
            return httpx.Response(
                200,
                json=_rawtx(
                    [{"addr": BTC_ADDRESS, "value": 60_000_000}, {"addr": BTC_ADDRESS, "value": 40_000_000}],
                    800_000,
                ),
            )

        lookup = await _adapter(handler).fetch_transaction(BTC_TXID, BTC, BTC_ADDRESS)
        assert lookup.transaction.transferred_amount == Decimal("1")

    @pytest.mark.asyncio
    async def test_no_matching_output(self):
        def handler(request):
            return httpx.Response(200, json=_rawtx([{"addr": OTHER_ADDRESS, "value": 100_000_000}], 800_000))

        lookup = await _adapter(handler).fetch_transaction(BTC_TXID, BTC, BTC_ADDRESS)

        assert lookup.outcome == LookupOutcome.no_matching_output
        assert lookup.transaction is None

    @pytest.mark.asyncio
    async def test_address_match_is_case_sensitive(self):
        def handler(request):
            return httpx.Response(200, json=_rawtx([{"addr": BTC_ADDRESS.lower(), "value": 1}], 1))

        lookup = await _adapter(handler).fetch_transaction(BTC_TXID, BTC, BTC_ADDRESS)
        assert lookup.outcome == LookupOutcome.no_matching_output

    @pytest.mark.asyncio
    async def test_unconfirmed_has_no_height(self):
        def handler(request):
            return httpx.Response(200, json=_rawtx([{"addr": BTC_ADDRESS, "value": 100_000_000}]))

        lookup = await _adapter(handler).fetch_transaction(BTC_TXID, BTC, BTC_ADDRESS)

        assert lookup.outcome == LookupOutcome.found
        assert lookup.transaction.block_height is None

    @pytest.mark.asyncio
    async def test_not_found(self):
        def handler(request):
            return httpx.Response(404, text="Transaction not found")

        lookup = await _adapter(handler).fetch_transaction(BTC_TXID, BTC, BTC_ADDRESS)
        assert lookup.outcome == LookupOutcome.not_found

    @pytest.mark.asyncio
    async def test_server_error(self):
        def handler(request):
            return httpx.Response(503, text="upstream down")

        with pytest.raises(AdapterError):
            await _adapter(handler).fetch_transaction(BTC_TXID, BTC, BTC_ADDRESS)

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(AdapterError, match="Timed out"):
            await _adapter(handler).fetch_transaction(BTC_TXID, BTC, BTC_ADDRESS)

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(AdapterError):
            await _adapter(handler).fetch_transaction(BTC_TXID, BTC, BTC_ADDRESS)

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        with pytest.raises(AdapterError):
            await _adapter(handler).fetch_transaction(BTC_TXID, BTC, BTC_ADDRESS)

    @pytest.mark.asyncio
    async def test_garbage_output_value(self):
        def handler(request):
            return httpx.Response(200, json=_rawtx([{"addr": BTC_ADDRESS, "value": "lots"}], 1))

        with pytest.raises(AdapterError):
            await _adapter(handler).fetch_transaction(BTC_TXID, BTC, BTC_ADDRESS)


class TestFetchChainHeight:
    """Tests for latestblock lookups."""

    @pytest.mark.asyncio
    async def test_height(self):
        def handler(request):
            assert request.url.path == "/latestblock"
            return httpx.Response(200, json={"hash": "00" * 32, "height": 800_123})

        assert await _adapter(handler).fetch_chain_height() == 800_123

    @pytest.mark.asyncio
    async def test_missing_height(self):
        def handler(request):
            return httpx.Response(200, json={"hash": "00" * 32})

        with pytest.raises(AdapterError):
            await _adapter(handler).fetch_chain_height()
