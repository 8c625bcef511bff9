"""
Calldata encoding for write calls.
"""

from __future__ import annotations

from typing import Any, Sequence

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

APPROVE_SIGNATURE = "approve(address,uint256)"
MINT_PROXY_SIGNATURE = "mintProxy(address,uint256,uint16,uint32[],bytes32[][],address)"
MINT_RESERVE_SIGNATURE = "mintReserve(address,uint256,uint32)"
BURN_REDEEM_SIGNATURE = (
    "burnRedeem(address,uint256,uint32,(uint48,uint48,address,uint256,bytes32[])[])"
)


def _arg_types(signature: str) -> list:
    """Split the top-level argument list of a canonical signature."""
    inner = signature[signature.index("(") + 1 : -1]
    types, depth, current = [], 0, ""
    for char in inner:
        if char == "," and depth == 0:
            types.append(current)
            current = ""
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current += char
    if current:
        types.append(current)
    return types


def encode_call(signature: str, args: Sequence[Any]) -> str:
    """``0x``-prefixed selector + ABI-encoded arguments."""
    selector = function_signature_to_4byte_selector(signature)
    body = encode(_arg_types(signature), list(args))
    return "0x" + (selector + body).hex()


def to_bytes32(value: str) -> bytes:
    raw = bytes.fromhex(value[2:] if value.startswith("0x") else value)
    if len(raw) != 32:
        raise ValueError(f"Expected 32 bytes, got {len(raw)}")
    return raw


def encode_approve(spender: str, amount: int) -> str:
    return encode_call(APPROVE_SIGNATURE, [to_checksum_address(spender), amount])


def encode_mint_proxy(
    creator_contract: str,
    instance_id: int,
    mint_count: int,
    mint_indices: Sequence[int],
    merkle_proofs: Sequence[Sequence[str]],
    mint_for: str,
) -> str:
    return encode_call(
        MINT_PROXY_SIGNATURE,
        [
            to_checksum_address(creator_contract),
            instance_id,
            mint_count,
            list(mint_indices),
            [[to_bytes32(node) for node in proof] for proof in merkle_proofs],
            to_checksum_address(mint_for),
        ],
    )


def encode_mint_reserve(creator_contract: str, instance_id: int, mint_count: int) -> str:
    return encode_call(
        MINT_RESERVE_SIGNATURE,
        [to_checksum_address(creator_contract), instance_id, mint_count],
    )


def encode_burn_redeem(
    creator_contract: str,
    instance_id: int,
    redeem_count: int,
    burn_tokens: Sequence[Any],
) -> str:
    encoded_tokens = [
        (
            token.group_index,
            token.item_index,
            to_checksum_address(token.contract_address),
            token.token_id,
            [to_bytes32(node) for node in token.merkle_proof],
        )
        for token in burn_tokens
    ]
    return encode_call(
        BURN_REDEEM_SIGNATURE,
        [to_checksum_address(creator_contract), instance_id, redeem_count, encoded_tokens],
    )
