"""Resolution and caching of the payroll signing account."""

from __future__ import annotations

import asyncio
import logging

from usdc_payroll.errors import AccountResolutionError, ConfigurationError, PayrollError
from usdc_payroll.models import Account
from usdc_payroll.wallet.base import BaseWalletService

logger = logging.getLogger("usdc_payroll.account")


class AccountResolver:
    """Looks up (or creates) the signing account once and caches it.

    Parameters
    ----------
    wallet:
        The wallet service that owns the account.
    expected_address:
        Address the operator expects the account to have. A mismatch is
        logged as a warning; the resolved account is always the one used.
    """

    def __init__(
        self,
        wallet: BaseWalletService,
        expected_address: str | None = None,
    ) -> None:
        self._wallet = wallet
        self._expected_address = expected_address
        self._account: Account | None = None
        self._label: str | None = None
        self._lock = asyncio.Lock()

    @property
    def account(self) -> Account | None:
        """The cached account, or ``None`` before the first resolution."""
        return self._account

    async def resolve(self, label: str) -> Account:
        """Return the account registered under *label*.

        Only the first call reaches the wallet service; concurrent first
        callers wait on the same lookup.
        """
        if self._account is not None:
            return self._check_label(label)

        async with self._lock:
            if self._account is not None:
                return self._check_label(label)

            try:
                account = await self._wallet.get_or_create_account(label)
            except (AccountResolutionError, ConfigurationError):
                raise
            except PayrollError as exc:
                raise AccountResolutionError(str(exc)) from exc
            except Exception as exc:
                raise AccountResolutionError(
                    f"Failed to resolve payroll account '{label}': {exc}"
                ) from exc

            logger.info(f"Using payroll account: {account.address}")
            self._warn_on_mismatch(account)
            self._label = label
            self._account = account
            return account

    def _check_label(self, label: str) -> Account:
        assert self._account is not None
        if label != self._label:
            raise AccountResolutionError(
                f"Resolver already holds account '{self._label}'; "
                f"cannot switch to '{label}'."
            )
        return self._account

    def _warn_on_mismatch(self, account: Account) -> None:
        if not self._expected_address:
            return
        if account.address.lower() != self._expected_address.lower():
            logger.warning(
                f"Account address mismatch: expected {self._expected_address}, "
                f"got {account.address}. Proceeding with the resolved account."
            )
