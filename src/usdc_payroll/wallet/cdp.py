"""Coinbase Developer Platform wallet service using the ``cdp-sdk`` package."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from usdc_payroll.config import CdpCredentials
from usdc_payroll.errors import (
    AccountResolutionError,
    BalanceQueryError,
    TransactionSubmissionError,
)
from usdc_payroll.models import Account, TokenBalanceRecord
from usdc_payroll.wallet.base import BaseWalletService

logger = logging.getLogger("usdc_payroll.wallet.cdp")


class CdpWalletService(BaseWalletService):
    """Wallet service backed by CDP server accounts.

    Uses :class:`cdp.CdpClient`, created lazily on first use so that
    constructing the service never touches credentials or the network.

    Parameters
    ----------
    credentials:
        CDP API key and wallet secret.
    client:
        Pre-built SDK client (mainly for tests). When given, it is not
        closed by :meth:`close`.
    """

    def __init__(self, credentials: CdpCredentials, client: Any | None = None) -> None:
        self._credentials = credentials
        self._client = client
        self._owns_client = client is None

    def _get_client(self, *, signing: bool = False) -> Any:
        self._credentials.require(signing=signing)
        if self._client is not None:
            return self._client

        try:
            from cdp import CdpClient
        except ImportError as exc:
            raise ImportError(
                "The 'cdp-sdk' package is required for the CDP wallet service. "
                "Install it with: pip install cdp-sdk"
            ) from exc

        self._client = CdpClient(
            api_key_id=self._credentials.api_key_id,
            api_key_secret=self._credentials.api_key_secret,
            wallet_secret=self._credentials.wallet_secret or None,
        )
        return self._client

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def get_or_create_account(self, name: str) -> Account:
        client = self._get_client(signing=True)
        try:
            sdk_account = await client.evm.get_or_create_account(name=name)
        except Exception as exc:
            raise AccountResolutionError(
                f"CDP could not load or create account '{name}': {exc}"
            ) from exc

        address = getattr(sdk_account, "address", None)
        if not isinstance(address, str) or not address:
            raise AccountResolutionError(
                f"CDP returned an account without an address for '{name}'"
            )
        return Account(address=address, name=getattr(sdk_account, "name", None) or name)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def send_transaction(
        self,
        account: Account,
        to: str,
        value: int,
        data: bytes,
        network: str,
    ) -> str:
        client = self._get_client(signing=True)
        from cdp.evm_transaction_types import TransactionRequestEIP1559

        transaction = TransactionRequestEIP1559(to=to, value=value, data="0x" + data.hex())
        try:
            tx_hash = await client.evm.send_transaction(
                address=account.address,
                transaction=transaction,
                network=network,
            )
        except Exception as exc:
            raise TransactionSubmissionError(f"CDP rejected the transaction: {exc}") from exc

        tx_hash = getattr(tx_hash, "transaction_hash", tx_hash)
        if not isinstance(tx_hash, str) or not tx_hash:
            raise TransactionSubmissionError(
                f"CDP returned no transaction hash (got {tx_hash!r})"
            )
        return tx_hash

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    async def list_token_balances(
        self, address: str, network: str
    ) -> list[TokenBalanceRecord]:
        """Return all token balances, following pagination to the end."""
        client = self._get_client()
        records: list[TokenBalanceRecord] = []
        page_token: str | None = None
        while True:
            try:
                page = await client.evm.list_token_balances(
                    address=address,
                    network=network,
                    page_token=page_token,
                )
            except Exception as exc:
                raise BalanceQueryError(f"CDP balance request failed: {exc}") from exc

            for item in getattr(page, "balances", None) or []:
                records.append(_to_balance_record(item))

            page_token = getattr(page, "next_page_token", None)
            if not page_token:
                return records

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.close()
            self._client = None


def _to_balance_record(item: Any) -> TokenBalanceRecord:
    """Validate one SDK ``EvmTokenBalance`` into a typed record."""
    try:
        token = item.token
        amount = item.amount
        return TokenBalanceRecord(
            symbol=token.symbol or "",
            contract_address=token.contract_address,
            raw_amount=str(amount.amount),
            decimals=amount.decimals,
        )
    except (AttributeError, TypeError, ValidationError) as exc:
        raise BalanceQueryError(f"Unexpected token balance shape from CDP: {exc}") from exc
