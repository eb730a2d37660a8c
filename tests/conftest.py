from __future__ import annotations

from decimal import Decimal

import pytest

from usdc_payroll.config import CdpCredentials
from usdc_payroll.errors import TransactionSubmissionError
from usdc_payroll.models import Account, Employee, TokenBalanceRecord
from usdc_payroll.wallet.base import BaseWalletService

PAYROLL_ADDRESS = "0x4f53d06DE83CB8f2eaF8B2AAb647983Dcb496b1E"
USDC_BASE_SEPOLIA = "0x036CbD53842c5426634e7929541eC2318f3dCF7e"


class FakeWalletService(BaseWalletService):
    """In-memory wallet service that records every call."""

    def __init__(
        self,
        *,
        address: str = PAYROLL_ADDRESS,
        balances: list | None = None,
        fail_recipients: set[str] | None = None,
        account_error: Exception | None = None,
        balance_error: Exception | None = None,
    ) -> None:
        self.address = address
        self.balances = balances if balances is not None else []
        self.fail_recipients = {a.lower() for a in (fail_recipients or set())}
        self.account_error = account_error
        self.balance_error = balance_error
        self.account_calls: list[str] = []
        self.sent: list[dict] = []
        self.balance_calls: list[tuple[str, str]] = []
        self.closed = False

    async def get_or_create_account(self, name: str) -> Account:
        self.account_calls.append(name)
        if self.account_error is not None:
            raise self.account_error
        return Account(address=self.address, name=name)

    async def send_transaction(self, account, to, value, data, network) -> str:
        # recipient sits in the last 20 bytes of the first ABI word
        recipient = "0x" + data[16:36].hex()
        self.sent.append(
            {"account": account, "to": to, "value": value, "data": data, "network": network}
        )
        if recipient in self.fail_recipients:
            raise TransactionSubmissionError(f"insufficient funds for {recipient}")
        return "0x" + f"{len(self.sent):064x}"

    async def list_token_balances(self, address, network):
        self.balance_calls.append((address, network))
        if self.balance_error is not None:
            raise self.balance_error
        return list(self.balances)

    async def close(self) -> None:
        self.closed = True


async def no_sleep(seconds: float) -> None:
    return None


def make_employee(id: int, address: str | None = None, salary: str = "1000", **kwargs) -> Employee:
    return Employee(
        id=id,
        name=kwargs.pop("name", f"Employee {id}"),
        address=address or "0x" + f"{id:040x}",
        salary=Decimal(salary),
        department=kwargs.pop("department", "Engineering"),
        position=kwargs.pop("position", "Engineer"),
    )


def usdc_balance(raw: str, decimals: int = 6, symbol: str = "USDC") -> TokenBalanceRecord:
    return TokenBalanceRecord(
        symbol=symbol,
        contract_address=USDC_BASE_SEPOLIA,
        raw_amount=raw,
        decimals=decimals,
    )


@pytest.fixture
def credentials() -> CdpCredentials:
    return CdpCredentials(
        api_key_id="key-id", api_key_secret="key-secret", wallet_secret="wallet-secret"
    )


@pytest.fixture
def wallet() -> FakeWalletService:
    return FakeWalletService()
