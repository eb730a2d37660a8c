from __future__ import annotations

import asyncio

import pytest

from usdc_payroll.balance import BalanceQuery, format_token_amount
from usdc_payroll.config import CdpCredentials
from usdc_payroll.errors import BalanceQueryError, ConfigurationError

from conftest import PAYROLL_ADDRESS, FakeWalletService, usdc_balance


def _fetch(query, symbol="USDC"):
    return asyncio.run(query.fetch(PAYROLL_ADDRESS, "base-sepolia", symbol))


def test_format_keeps_all_fractional_digits():
    assert format_token_amount("6715000", 6) == "6.715000"
    assert format_token_amount("0", 6) == "0.000000"
    assert format_token_amount("42", 0) == "42"
    assert format_token_amount(1, 18) == "0.000000000000000001"


def test_format_preserves_precision_beyond_float():
    raw = "123456789012345678901234567890"
    assert format_token_amount(raw, 18) == "123456789012.345678901234567890"


def test_fetch_formats_matching_record(credentials):
    wallet = FakeWalletService(
        balances=[usdc_balance("5", 18, symbol="WETH"), usdc_balance("6715000")]
    )

    assert _fetch(BalanceQuery(wallet, credentials)) == "6.715000"
    assert wallet.balance_calls == [(PAYROLL_ADDRESS, "base-sepolia")]


def test_first_matching_record_wins(credentials):
    wallet = FakeWalletService(balances=[usdc_balance("1000000"), usdc_balance("2000000")])

    assert _fetch(BalanceQuery(wallet, credentials)) == "1.000000"


def test_no_matching_symbol_returns_zero(credentials):
    wallet = FakeWalletService(balances=[usdc_balance("6715000", symbol="usdc")])

    assert _fetch(BalanceQuery(wallet, credentials)) == "0"


def test_every_call_queries_the_service(credentials):
    wallet = FakeWalletService(balances=[usdc_balance("6715000")])
    query = BalanceQuery(wallet, credentials)

    _fetch(query)
    wallet.balances = [usdc_balance("1000000")]

    assert _fetch(query) == "1.000000"
    assert len(wallet.balance_calls) == 2


def test_missing_credentials_fail_before_any_request():
    wallet = FakeWalletService(balances=[usdc_balance("6715000")])
    query = BalanceQuery(wallet, CdpCredentials(api_key_id="", api_key_secret="${CDP_API_KEY_SECRET}"))

    with pytest.raises(ConfigurationError, match="api_key_id, api_key_secret"):
        _fetch(query)
    assert len(wallet.balance_calls) == 0


def test_service_failure_raises_balance_query_error(credentials):
    wallet = FakeWalletService(balance_error=TimeoutError("read timed out"))

    with pytest.raises(BalanceQueryError, match="read timed out"):
        _fetch(BalanceQuery(wallet, credentials))


def test_malformed_records_raise_balance_query_error(credentials):
    wallet = FakeWalletService(
        balances=[{"symbol": "USDC", "contract_address": "0x0", "raw_amount": "-5", "decimals": 6}]
    )

    with pytest.raises(BalanceQueryError, match="Malformed"):
        _fetch(BalanceQuery(wallet, credentials))


def test_check_reports_unavailable_instead_of_raising(credentials):
    wallet = FakeWalletService(balance_error=BalanceQueryError("503 Service Unavailable"))
    snapshot = asyncio.run(
        BalanceQuery(wallet, credentials).check(PAYROLL_ADDRESS, "base-sepolia", "USDC")
    )

    assert snapshot.available is False
    assert snapshot.balance == "0"
    assert "503" in snapshot.error


def test_check_wraps_available_balance(credentials):
    wallet = FakeWalletService(balances=[usdc_balance("6715000")])
    snapshot = asyncio.run(
        BalanceQuery(wallet, credentials).check(PAYROLL_ADDRESS, "base-sepolia", "USDC")
    )

    assert snapshot.available is True
    assert snapshot.balance == "6.715000"
    assert snapshot.error is None
