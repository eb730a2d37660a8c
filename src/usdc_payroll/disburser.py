"""Sequential, paced USDC disbursement across an employee roster."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Awaitable, Callable, Sequence

from usdc_payroll.account import AccountResolver
from usdc_payroll.encoder import build_transfer
from usdc_payroll.errors import BatchInProgressError, TransactionSubmissionError
from usdc_payroll.models import Account, Employee, PaymentResult, PayrollSummary
from usdc_payroll.roster import format_amount, sum_amounts
from usdc_payroll.wallet.base import BaseWalletService
from usdc_payroll.wallet.networks import Network

logger = logging.getLogger("usdc_payroll.disburser")


class Disburser:
    """Pays employees one transfer at a time from a single signing account.

    Submissions are strictly sequential with ``pacing_seconds`` between them;
    the wallet service serialises nonces for the account and enforces rate
    limits. A failure for one employee is recorded in that employee's
    :class:`PaymentResult` and the batch carries on.

    Parameters
    ----------
    wallet:
        Wallet service that signs and submits the transfers.
    resolver:
        Resolves the signing account when ``pay_all`` is not given one.
    network:
        The single network every transfer is sent on.
    account_label:
        Wallet-service name of the payroll account.
    token_contract:
        Address of the token contract receiving the ``transfer`` calls.
    decimals:
        Token decimal places (6 for USDC).
    pacing_seconds:
        Delay between consecutive submissions.
    sleep:
        Awaitable sleep used for pacing; replaceable in tests.
    """

    def __init__(
        self,
        wallet: BaseWalletService,
        resolver: AccountResolver,
        network: Network,
        *,
        account_label: str,
        token_contract: str,
        decimals: int = 6,
        pacing_seconds: float = 2.0,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._wallet = wallet
        self._resolver = resolver
        self._network = network
        self._account_label = account_label
        self._token_contract = token_contract
        self._decimals = decimals
        self._pacing_seconds = pacing_seconds
        self._sleep = sleep
        self._batch_running = False

    @property
    def is_running(self) -> bool:
        return self._batch_running

    async def pay_employee(self, account: Account, employee: Employee) -> PaymentResult:
        """Encode and submit one salary transfer; never raises."""
        amount = str(employee.salary)
        try:
            instruction = build_transfer(
                employee.address,
                employee.salary,
                self._decimals,
                self._token_contract,
            )
            logger.info(f"Paying {employee.name}: {amount} USDC to {instruction.recipient}")
            tx_hash = await self._wallet.send_transaction(
                account,
                to=instruction.contract_address,
                value=0,
                data=instruction.data,
                network=self._network.name,
            )
            if not isinstance(tx_hash, str) or not tx_hash:
                raise TransactionSubmissionError(
                    f"Wallet service returned no transaction hash: {tx_hash!r}"
                )
            logger.info(f"Payment sent! Tx: {tx_hash}")
            return PaymentResult(
                employee_id=employee.id,
                transaction_hash=tx_hash,
                amount=amount,
                success=True,
            )
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            logger.error(f"Failed to pay employee {employee.name}: {message}")
            return PaymentResult(
                employee_id=employee.id,
                transaction_hash="",
                amount=amount,
                success=False,
                error=message,
            )

    async def pay_all(
        self,
        account: Account | None,
        employees: Sequence[Employee],
    ) -> list[PaymentResult]:
        """Pay every employee in order and return one result per employee.

        If *account* is ``None`` it is resolved first; a resolution failure
        raises :class:`~usdc_payroll.errors.AccountResolutionError` before any
        payment is attempted.
        """
        if self._batch_running:
            raise BatchInProgressError(
                "A payroll batch is already running; wait for it to finish."
            )
        self._batch_running = True
        try:
            if account is None:
                account = await self._resolver.resolve(self._account_label)
            return await self._run_batch(account, list(employees))
        finally:
            self._batch_running = False

    async def _run_batch(
        self, account: Account, employees: list[Employee]
    ) -> list[PaymentResult]:
        logger.info(
            f"Starting payroll for {len(employees)} employees from {account.address} "
            f"on {self._network.name}"
        )
        results: list[PaymentResult] = []
        for index, employee in enumerate(employees):
            logger.info(
                f"Processing payment {index + 1}/{len(employees)} for {employee.name}"
            )
            results.append(await self.pay_employee(account, employee))
            if index < len(employees) - 1:
                await self._sleep(self._pacing_seconds)

        successful = sum(1 for r in results if r.success)
        logger.info(
            f"Payroll complete: {successful} successful, "
            f"{len(results) - successful} failed"
        )
        return results


def summarize(results: Sequence[PaymentResult], *, decimals: int = 6) -> PayrollSummary:
    """Count successes and failures; total the quoted amounts."""
    successful = sum(1 for r in results if r.success)
    quoted = sum_amounts(Decimal(r.amount) for r in results)
    return PayrollSummary(
        total=len(results),
        successful=successful,
        failed=len(results) - successful,
        total_amount=format_amount(quoted, decimals),
    )
