"""ERC-20 ``transfer(address,uint256)`` call-data encoding.

The wire format is fixed by the token contract's ABI::

    selector (4 bytes) || zero-pad(recipient, 32) || zero-pad(amount, 32)

Amounts are scaled to smallest token units with exact integer arithmetic;
a value that needs more fractional digits than the token has is rejected
rather than rounded.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector, is_hex_address
from web3 import Web3

from usdc_payroll.errors import EncodingError
from usdc_payroll.models import TransferInstruction

TRANSFER_SIGNATURE = "transfer(address,uint256)"
TRANSFER_SELECTOR = function_signature_to_4byte_selector(TRANSFER_SIGNATURE)  # a9059cbb
TRANSFER_DATA_LENGTH = 4 + 32 + 32

_UINT256_LIMIT = 2**256


def normalize_address(address: str) -> str:
    """Return the checksummed form of a 20-byte hex address.

    Any letter case is accepted; an existing (possibly wrong) checksum is
    ignored.
    """
    if not isinstance(address, str) or not address.startswith("0x"):
        raise EncodingError(f"Invalid recipient address: {address!r}")
    if not is_hex_address(address):
        raise EncodingError(f"Invalid recipient address: {address!r}")
    return Web3.to_checksum_address(address.lower())


def to_smallest_unit(amount: Decimal | int | str | float, decimals: int) -> int:
    """Scale *amount* by ``10**decimals`` exactly.

    >>> to_smallest_unit(Decimal("1250.5"), 6)
    1250500000
    """
    if decimals < 0:
        raise EncodingError(f"Token decimals must be non-negative, got {decimals}")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError) as exc:
        raise EncodingError(f"Invalid amount: {amount!r}") from exc
    if not value.is_finite():
        raise EncodingError(f"Invalid amount: {amount!r}")
    if value < 0:
        raise EncodingError(f"Amount must be non-negative, got {value}")

    _, digits, exponent = value.as_tuple()
    coefficient = int("".join(str(d) for d in digits)) if digits else 0
    shift = exponent + decimals
    if shift >= 0:
        units = coefficient * 10**shift
    else:
        units, remainder = divmod(coefficient, 10**-shift)
        if remainder:
            raise EncodingError(
                f"Amount {value} has more than {decimals} decimal places"
            )
    if units >= _UINT256_LIMIT:
        raise EncodingError(f"Amount {value} does not fit in uint256")
    return units


def encode_transfer(
    recipient: str, amount: Decimal | int | str | float, decimals: int
) -> bytes:
    """Build the call data for ``transfer(recipient, amount * 10**decimals)``."""
    checksum = normalize_address(recipient)
    units = to_smallest_unit(amount, decimals)
    return TRANSFER_SELECTOR + encode(["address", "uint256"], [checksum, units])


def decode_transfer(data: bytes) -> tuple[str, int]:
    """Recover ``(recipient, amount_smallest_unit)`` from transfer call data."""
    if len(data) != TRANSFER_DATA_LENGTH:
        raise EncodingError(
            f"Transfer call data must be {TRANSFER_DATA_LENGTH} bytes, got {len(data)}"
        )
    if data[:4] != TRANSFER_SELECTOR:
        raise EncodingError(f"Unexpected function selector 0x{data[:4].hex()}")
    recipient, units = decode(["address", "uint256"], data[4:])
    return Web3.to_checksum_address(recipient), units


def build_transfer(
    recipient: str,
    amount: Decimal | int | str | float,
    decimals: int,
    contract_address: str,
) -> TransferInstruction:
    checksum = normalize_address(recipient)
    units = to_smallest_unit(amount, decimals)
    return TransferInstruction(
        recipient=checksum,
        amount_smallest_unit=units,
        contract_address=contract_address,
        data=TRANSFER_SELECTOR + encode(["address", "uint256"], [checksum, units]),
    )
