"""Pydantic models for rosters, accounts, transfers, and payment results."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Record(BaseModel):
    """Snake_case fields, camelCase aliases for JSON consumers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _FrozenRecord(_Record):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


# ---------------------------------------------------------------------------
# Roster / account
# ---------------------------------------------------------------------------


class Employee(_FrozenRecord):
    """One roster entry.

    ``address`` is not validated here. A malformed address fails only that
    employee's payment when the transfer is encoded.
    """

    id: int
    name: str
    address: str
    salary: Decimal = Field(ge=0)
    department: str = ""
    position: str = ""


class Account(_FrozenRecord):
    """The signing account that originates every outgoing transfer."""

    address: str
    name: str


# ---------------------------------------------------------------------------
# Transfers / results
# ---------------------------------------------------------------------------


class TransferInstruction(_FrozenRecord):
    """An encoded ERC-20 ``transfer`` call, ready to submit."""

    recipient: str
    amount_smallest_unit: int = Field(ge=0)
    contract_address: str
    data: bytes

    @property
    def data_hex(self) -> str:
        return "0x" + self.data.hex()


class PaymentResult(_Record):
    """Outcome of one employee's payment.

    ``success`` means the wallet service accepted the submission; it says
    nothing about on-chain confirmation.
    """

    employee_id: int
    transaction_hash: str = ""
    amount: str
    success: bool
    error: Optional[str] = None


class PayrollSummary(_Record):
    total: int
    successful: int
    failed: int
    total_amount: str


# ---------------------------------------------------------------------------
# Balances
# ---------------------------------------------------------------------------


class TokenBalanceRecord(_FrozenRecord):
    """One token holding as reported by the wallet service."""

    symbol: str
    contract_address: str
    raw_amount: str = Field(pattern=r"^[0-9]+$")  # smallest units, may exceed 2**64
    decimals: int = Field(ge=0)


class BalanceSnapshot(_Record):
    """A balance ready for display, including the "unavailable" state."""

    balance: str = "0"
    symbol: str = "USDC"
    available: bool = True
    error: Optional[str] = None
