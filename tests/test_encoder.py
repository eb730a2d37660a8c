from __future__ import annotations

from decimal import Decimal

import pytest
from web3 import Web3

from usdc_payroll.encoder import (
    TRANSFER_SELECTOR,
    build_transfer,
    decode_transfer,
    encode_transfer,
    normalize_address,
    to_smallest_unit,
)
from usdc_payroll.errors import EncodingError

from conftest import PAYROLL_ADDRESS, USDC_BASE_SEPOLIA

RECIPIENT = Web3.to_checksum_address("0x549fe250ba5c12633dc87ec7e2ed013c3562f412")


def test_selector_is_erc20_transfer():
    assert TRANSFER_SELECTOR.hex() == "a9059cbb"


def test_fractional_salary_scales_exactly():
    assert to_smallest_unit(Decimal("1250.5"), 6) == 1250500000
    assert to_smallest_unit(1250.5, 6) == 1250500000
    assert to_smallest_unit("0.000001", 6) == 1
    assert to_smallest_unit(3000, 6) == 3_000_000_000


def test_layout_matches_transfer_abi():
    data = encode_transfer(RECIPIENT, Decimal("1250.5"), 6)

    assert len(data) == 68
    assert data[:4] == bytes.fromhex("a9059cbb")
    assert data[4:16] == b"\x00" * 12
    assert data[16:36] == bytes.fromhex(RECIPIENT[2:])
    assert int.from_bytes(data[36:68], "big") == 1250500000


def test_decode_recovers_recipient_and_amount():
    recipient, units = decode_transfer(encode_transfer(RECIPIENT.lower(), "42.123456", 6))

    assert recipient == RECIPIENT
    assert units == 42_123_456


def test_encoding_is_deterministic():
    assert encode_transfer(RECIPIENT, "10", 6) == encode_transfer(RECIPIENT, Decimal("10.000"), 6)


def test_address_case_is_ignored():
    upper = "0x" + RECIPIENT[2:].upper()
    assert normalize_address(upper) == RECIPIENT
    assert encode_transfer(upper, "1", 6) == encode_transfer(RECIPIENT.lower(), "1", 6)


@pytest.mark.parametrize(
    "address",
    ["", "0x1234", "549FE250ba5C12633Dc87ec7e2Ed013C3562F412", "0xZZ9FE250ba5C12633Dc87ec7e2Ed013C3562F412"],
)
def test_malformed_recipient_rejected(address):
    with pytest.raises(EncodingError):
        encode_transfer(address, "1", 6)


def test_negative_amount_rejected():
    with pytest.raises(EncodingError, match="non-negative"):
        to_smallest_unit(Decimal("-1"), 6)


def test_too_many_decimal_places_rejected():
    with pytest.raises(EncodingError, match="decimal places"):
        to_smallest_unit(Decimal("1.0000001"), 6)


@pytest.mark.parametrize("amount", ["abc", "NaN", "Infinity"])
def test_unparseable_amount_rejected(amount):
    with pytest.raises(EncodingError):
        to_smallest_unit(amount, 6)


def test_uint256_overflow_rejected():
    with pytest.raises(EncodingError, match="uint256"):
        to_smallest_unit(2**256, 0)


def test_decode_rejects_foreign_selector():
    data = bytearray(encode_transfer(RECIPIENT, "1", 6))
    data[:4] = bytes.fromhex("095ea7b3")  # approve(address,uint256)
    with pytest.raises(EncodingError, match="selector"):
        decode_transfer(bytes(data))


def test_build_transfer_bundles_instruction():
    instruction = build_transfer(PAYROLL_ADDRESS.lower(), Decimal("2.5"), 6, USDC_BASE_SEPOLIA)

    assert instruction.recipient == Web3.to_checksum_address(PAYROLL_ADDRESS)
    assert instruction.amount_smallest_unit == 2_500_000
    assert instruction.contract_address == USDC_BASE_SEPOLIA
    assert instruction.data_hex.startswith("0xa9059cbb")
    assert decode_transfer(instruction.data) == (instruction.recipient, 2_500_000)
