"""PayrollService - wires config, wallet, resolver, disburser, and balances."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Iterable, Sequence

from usdc_payroll.account import AccountResolver
from usdc_payroll.balance import BalanceQuery
from usdc_payroll.config import PayrollConfig, get_config_path, load_config
from usdc_payroll.disburser import Disburser, summarize
from usdc_payroll.models import Account, BalanceSnapshot, Employee, PaymentResult
from usdc_payroll.roster import load_roster, select_employees
from usdc_payroll.wallet.base import BaseWalletService

logger = logging.getLogger("usdc_payroll.service")


class PayrollService:
    """High-level payroll operations for one configured account and network.

    One instance owns one signing account; its batches are serialised by the
    underlying :class:`Disburser`.
    """

    def __init__(
        self,
        config: PayrollConfig,
        wallet: BaseWalletService | None = None,
        *,
        base_dir: Path | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        if wallet is None:
            from usdc_payroll.wallet.cdp import CdpWalletService

            wallet = CdpWalletService(config.cdp)

        self.config = config
        self.base_dir = base_dir or Path.cwd()
        self.network = config.get_network()
        self.wallet = wallet
        self.resolver = AccountResolver(wallet, expected_address=config.expected_address)
        self.balance_query = BalanceQuery(wallet, config.cdp)
        self.disburser = Disburser(
            wallet,
            self.resolver,
            self.network,
            account_label=config.account_name,
            token_contract=config.token_contract(),
            decimals=config.token.decimals,
            pacing_seconds=config.pacing_seconds,
            sleep=sleep,
        )

    @classmethod
    def load(cls, base_path: Path | None = None, **kwargs) -> PayrollService:
        """Build a service from ``.usdc-payroll/config.yaml`` (or defaults)."""
        config = load_config(get_config_path(base_path))
        return cls(config, base_dir=base_path, **kwargs)

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    async def initialize(self) -> Account:
        """Resolve the payroll account (once per service)."""
        return await self.resolver.resolve(self.config.account_name)

    @property
    def account_address(self) -> str | None:
        account = self.resolver.account
        return account.address if account else None

    # ------------------------------------------------------------------
    # Roster / payments
    # ------------------------------------------------------------------

    def load_roster(self) -> list[Employee]:
        path = Path(self.config.roster_path)
        if not path.is_absolute():
            path = self.base_dir / path
        return load_roster(path)

    async def pay_all(self, employees: Sequence[Employee]) -> list[PaymentResult]:
        """Pay *employees* in order; fatal errors propagate, per-item ones don't."""
        account = await self.initialize()
        snapshot = await self.balance_query.check(
            account.address, self.network.name, self.config.token.symbol
        )
        if snapshot.available:
            logger.info(f"Account {snapshot.symbol} balance: {snapshot.balance}")

        results = await self.disburser.pay_all(account, employees)
        summary = summarize(results, decimals=self.config.token.decimals)
        logger.info(
            f"Payroll processed for {summary.total} employees "
            f"({summary.total_amount} {self.config.token.symbol})"
        )
        return results

    async def pay_selected(
        self, roster: Sequence[Employee], employee_ids: Iterable[int]
    ) -> list[PaymentResult]:
        return await self.pay_all(select_employees(roster, employee_ids))

    # ------------------------------------------------------------------
    # Balance
    # ------------------------------------------------------------------

    async def balance(self, address: str | None = None) -> BalanceSnapshot:
        """Current token balance; failures come back as ``available=False``.

        The address defaults to ``expected_address`` from config, then to the
        resolved payroll account.
        """
        if address is None:
            address = self.config.expected_address
        if address is None:
            address = (await self.initialize()).address
        return await self.balance_query.check(
            address, self.network.name, self.config.token.symbol
        )

    async def close(self) -> None:
        await self.wallet.close()
