"""Abstract interface to the custodial wallet service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from usdc_payroll.models import Account, TokenBalanceRecord


class BaseWalletService(ABC):
    """Everything the payroll core needs from a custodial wallet service.

    Implementations sign and submit transactions on the caller's behalf, so
    no key material ever passes through this package. Every method is a
    single request/response round trip.
    """

    @abstractmethod
    async def get_or_create_account(self, name: str) -> Account:
        """Load the account registered under *name*, creating it if needed."""

    @abstractmethod
    async def send_transaction(
        self,
        account: Account,
        to: str,
        value: int,
        data: bytes,
        network: str,
    ) -> str:
        """Sign and submit a transaction from *account*.

        Returns the transaction hash reported by the service.
        """

    @abstractmethod
    async def list_token_balances(
        self, address: str, network: str
    ) -> list[TokenBalanceRecord]:
        """Return every token balance held by *address* on *network*."""

    async def close(self) -> None:
        """Release any underlying connections."""
