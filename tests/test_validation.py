"""Tests for request validation."""

from decimal import Decimal

import pytest
from helpers import BTC_ADDRESS, BTC_TXID, ETH_TXID, TOKEN_ADDRESS

from txverify.errors import (
    InvalidAmountError,
    MalformedIdentifierError,
    UnsupportedCurrencyError,
    ValidationError,
)
from txverify.models import ChainFamily, Currency
from txverify.registry import PaymentAddressRegistry
from txverify.validation import normalize_transaction_id, validate, validate_expected_amount


class TestNormalizeTransactionId:
    """Tests for identifier shape checks."""

    def test_bare_hex(self):
        assert normalize_transaction_id(BTC_TXID) == BTC_TXID

    def test_strips_whitespace(self):
        assert normalize_transaction_id(f"  {BTC_TXID}\n") == BTC_TXID

    def test_lowercases(self):
        assert normalize_transaction_id(BTC_TXID.upper()) == BTC_TXID

    def test_utxo_drops_prefix(self):
        assert normalize_transaction_id("0x" + BTC_TXID, ChainFamily.utxo) == BTC_TXID

    def test_account_adds_prefix(self):
        assert normalize_transaction_id(ETH_TXID[2:], ChainFamily.account) == ETH_TXID

    def test_account_keeps_prefix(self):
        assert normalize_transaction_id(ETH_TXID, ChainFamily.account) == ETH_TXID

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "   ",
            "0x",
            "a" * 63,
            "a" * 65,
            "0x" + "a" * 63,
            "g" * 64,
            "0X" + "a" * 64,
            BTC_TXID[:-1] + "/",
            BTC_TXID + "?format=json",
            "../" + BTC_TXID[3:],
        ],
    )
    def test_rejects_malformed(self, value):
        with pytest.raises(MalformedIdentifierError):
            normalize_transaction_id(value)

    def test_rejects_non_string(self):
        with pytest.raises(MalformedIdentifierError):
            normalize_transaction_id(12345)

    def test_malformed_is_value_error(self):
        with pytest.raises(ValueError):
            normalize_transaction_id("nope")


class TestValidate:
    """Tests for id + currency validation against the registry."""

    def test_btc(self, registry):
        validated = validate(BTC_TXID, "BTC", registry)
        assert validated.transaction_id == BTC_TXID
        assert validated.currency.code == Currency.BTC
        assert validated.pay_to == BTC_ADDRESS

    def test_token_gets_account_form(self, registry):
        validated = validate(ETH_TXID[2:], "USDC", registry)
        assert validated.transaction_id == ETH_TXID
        assert validated.currency.is_token
        assert validated.pay_to == TOKEN_ADDRESS

    def test_currency_code_is_case_insensitive(self, registry):
        assert validate(BTC_TXID, " btc ", registry).currency.code == Currency.BTC

    @pytest.mark.parametrize("currency", ["DOGE", "", "   ", None, "BTC2"])
    def test_unknown_currency(self, registry, currency):
        with pytest.raises(UnsupportedCurrencyError):
            validate(BTC_TXID, currency, registry)

    def test_known_currency_missing_from_registry(self):
        registry = PaymentAddressRegistry({"BTC": BTC_ADDRESS})
        with pytest.raises(UnsupportedCurrencyError):
            validate(ETH_TXID, "ETH", registry)

    def test_identifier_checked_before_currency(self, registry):
        with pytest.raises(MalformedIdentifierError):
            validate("bad", "DOGE", registry)

    def test_errors_share_base_class(self, registry):
        with pytest.raises(ValidationError):
            validate(BTC_TXID, "DOGE", registry)


class TestValidateExpectedAmount:
    """Tests for expected amount checks."""

    @pytest.mark.parametrize("value", [Decimal("0.001"), "12.5", 3, 0.25])
    def test_accepts_positive(self, value):
        assert validate_expected_amount(value) > 0

    def test_returns_decimal(self):
        assert validate_expected_amount("1.10") == Decimal("1.10")

    @pytest.mark.parametrize(
        "value",
        [0, "0", Decimal("-1"), -0.5, "NaN", "Infinity", Decimal("-Infinity"), "abc", None, True],
    )
    def test_rejects(self, value):
        with pytest.raises(InvalidAmountError):
            validate_expected_amount(value)
