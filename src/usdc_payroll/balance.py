"""Token balance lookup for the payroll account."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from usdc_payroll.config import CdpCredentials
from usdc_payroll.errors import BalanceQueryError, ConfigurationError, PayrollError
from usdc_payroll.models import BalanceSnapshot, TokenBalanceRecord
from usdc_payroll.wallet.base import BaseWalletService

logger = logging.getLogger("usdc_payroll.balance")


def format_token_amount(raw_amount: int | str, decimals: int) -> str:
    """Render smallest-unit *raw_amount* with exactly *decimals* fractional digits.

    Integer arithmetic only, so amounts beyond float precision stay exact.

    >>> format_token_amount("6715000", 6)
    '6.715000'
    """
    value = int(raw_amount)
    if value < 0:
        raise ValueError(f"Raw token amount must be non-negative, got {value}")
    if decimals == 0:
        return str(value)
    whole, fraction = divmod(value, 10**decimals)
    return f"{whole}.{fraction:0{decimals}d}"


class BalanceQuery:
    """Fetches one token's balance for an address, fresh on every call."""

    def __init__(self, wallet: BaseWalletService, credentials: CdpCredentials) -> None:
        self._wallet = wallet
        self._credentials = credentials

    async def fetch(self, address: str, network: str, symbol: str) -> str:
        """Return the *symbol* balance of *address*, or ``"0"`` if none is held.

        Raises
        ------
        ConfigurationError
            If API credentials are missing; no request is made.
        BalanceQueryError
            If the service call fails or returns malformed records.
        """
        self._credentials.require()

        try:
            records = await self._wallet.list_token_balances(address, network)
        except BalanceQueryError:
            raise
        except PayrollError as exc:
            raise BalanceQueryError(str(exc)) from exc
        except Exception as exc:
            raise BalanceQueryError(f"Failed to fetch token balances: {exc}") from exc

        record = _find_symbol(records, symbol)
        if record is None:
            return "0"
        return format_token_amount(record.raw_amount, record.decimals)

    async def check(self, address: str, network: str, symbol: str) -> BalanceSnapshot:
        """Like :meth:`fetch`, but reports failures as an unavailable snapshot."""
        try:
            balance = await self.fetch(address, network, symbol)
        except (BalanceQueryError, ConfigurationError) as exc:
            logger.warning(f"{symbol} balance unavailable for {address}: {exc}")
            return BalanceSnapshot(
                balance="0", symbol=symbol, available=False, error=str(exc)
            )
        return BalanceSnapshot(balance=balance, symbol=symbol)


def _find_symbol(records: object, symbol: str) -> TokenBalanceRecord | None:
    if not isinstance(records, (list, tuple)):
        raise BalanceQueryError(
            f"Expected a list of token balances, got {type(records).__name__}"
        )
    for item in records:
        try:
            record = TokenBalanceRecord.model_validate(item)
        except ValidationError as exc:
            raise BalanceQueryError(f"Malformed token balance record: {exc}") from exc
        if record.symbol == symbol:
            return record
    return None
