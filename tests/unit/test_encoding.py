"""
Unit Tests for calldata encoding
"""

import pytest
from eth_abi import decode

from conftest import CREATOR, EXTENSION, WALLET

from mintkit.infrastructure.chain.encoding import (
    _arg_types,
    encode_approve,
    encode_mint_proxy,
    encode_mint_reserve,
    to_bytes32,
)


def test_approve_selector_and_args():
    data = encode_approve(EXTENSION, 2 ** 256 - 1)
    assert data.startswith("0x095ea7b3")
    spender, amount = decode(["address", "uint256"], bytes.fromhex(data[10:]))
    assert spender.lower() == EXTENSION
    assert amount == 2 ** 256 - 1


def test_tuple_argument_split():
    assert _arg_types("f(address,(uint48,bytes32[])[],uint32)") == [
        "address", "(uint48,bytes32[])[]", "uint32",
    ]


def test_mint_proxy_round_trips_arguments():
    proof = ["0x" + "ab" * 32]
    data = encode_mint_proxy(CREATOR, 42, 1, [9], [proof], WALLET)
    values = decode(
        ["address", "uint256", "uint16", "uint32[]", "bytes32[][]", "address"],
        bytes.fromhex(data[10:]),
    )
    assert values[0].lower() == CREATOR
    assert values[1:4] == (42, 1, (9,))
    assert values[4] == ((bytes.fromhex("ab" * 32),),)
    assert values[5].lower() == WALLET


def test_mint_reserve_differs_by_count():
    assert encode_mint_reserve(CREATOR, 1, 1) != encode_mint_reserve(CREATOR, 1, 2)


def test_to_bytes32_length():
    with pytest.raises(ValueError):
        to_bytes32("0x1234")
