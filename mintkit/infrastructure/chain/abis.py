"""
Minimal ABI fragments for the contracts the pipeline reads.

Write calls are encoded in ``encoding.py``; only view functions live here.
"""

from typing import List, Optional


def _fn(name: str, inputs: List[dict], outputs: List[dict]) -> dict:
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view",
        "inputs": inputs,
        "outputs": outputs,
    }


def _arg(name: str, type_: str, components: Optional[List[dict]] = None) -> dict:
    arg = {"name": name, "type": type_}
    if components is not None:
        arg["components"] = components
    return arg


_CLAIM_LOOKUP_INPUTS = [
    _arg("creatorContractAddress", "address"),
    _arg("instanceId", "uint256"),
]

_UINT_OUT = [_arg("", "uint256")]


# ----------------------------------------------------------------------
# ERC-20
# ----------------------------------------------------------------------

ERC20_ABI = [
    _fn("balanceOf", [_arg("owner", "address")], _UINT_OUT),
    _fn("allowance", [_arg("owner", "address"), _arg("spender", "address")], _UINT_OUT),
    _fn("decimals", [], [_arg("", "uint8")]),
    _fn("symbol", [], [_arg("", "string")]),
]


# ----------------------------------------------------------------------
# Edition (ERC721 / ERC1155 lazy claim extensions)
# ----------------------------------------------------------------------

_EDITION_721_CLAIM = [
    _arg("total", "uint32"),
    _arg("totalMax", "uint32"),
    _arg("walletMax", "uint32"),
    _arg("startDate", "uint48"),
    _arg("endDate", "uint48"),
    _arg("storageProtocol", "uint8"),
    _arg("identical", "bool"),
    _arg("merkleRoot", "bytes32"),
    _arg("location", "string"),
    _arg("cost", "uint256"),
    _arg("paymentReceiver", "address"),
    _arg("erc20", "address"),
    _arg("signingAddress", "address"),
]

_EDITION_1155_CLAIM = [
    _arg("total", "uint32"),
    _arg("totalMax", "uint32"),
    _arg("walletMax", "uint32"),
    _arg("startDate", "uint48"),
    _arg("endDate", "uint48"),
    _arg("storageProtocol", "uint8"),
    _arg("merkleRoot", "bytes32"),
    _arg("location", "string"),
    _arg("tokenId", "uint256"),
    _arg("cost", "uint256"),
    _arg("paymentReceiver", "address"),
    _arg("erc20", "address"),
    _arg("signingAddress", "address"),
]

_EDITION_COMMON = [
    _fn(
        "getTotalMints",
        [
            _arg("minter", "address"),
            _arg("creatorContractAddress", "address"),
            _arg("instanceId", "uint256"),
        ],
        [_arg("", "uint32")],
    ),
    _fn(
        "checkMintIndices",
        [
            _arg("creatorContractAddress", "address"),
            _arg("instanceId", "uint256"),
            _arg("mintIndices", "uint32[]"),
        ],
        [_arg("minted", "bool[]")],
    ),
    _fn("MINT_FEE", [], _UINT_OUT),
    _fn("MINT_FEE_MERKLE", [], _UINT_OUT),
]

EDITION_721_ABI = [
    _fn("getClaim", _CLAIM_LOOKUP_INPUTS, [_arg("claim", "tuple", _EDITION_721_CLAIM)]),
    *_EDITION_COMMON,
]

EDITION_1155_ABI = [
    _fn("getClaim", _CLAIM_LOOKUP_INPUTS, [_arg("claim", "tuple", _EDITION_1155_CLAIM)]),
    *_EDITION_COMMON,
]


# ----------------------------------------------------------------------
# Blind mint (gacha extension)
# ----------------------------------------------------------------------

_BLIND_MINT_CLAIM = [
    _arg("storageProtocol", "uint8"),
    _arg("total", "uint32"),
    _arg("totalMax", "uint32"),
    _arg("startDate", "uint48"),
    _arg("endDate", "uint48"),
    _arg("startingTokenId", "uint80"),
    _arg("tokenVariations", "uint8"),
    _arg("location", "string"),
    _arg("paymentReceiver", "address"),
    _arg("cost", "uint96"),
    _arg("erc20", "address"),
]

BLIND_MINT_ABI = [
    _fn("getClaim", _CLAIM_LOOKUP_INPUTS, [_arg("claim", "tuple", _BLIND_MINT_CLAIM)]),
    _fn("MINT_FEE", [], _UINT_OUT),
]


# ----------------------------------------------------------------------
# Burn-redeem
# ----------------------------------------------------------------------

_BURN_ITEM = [
    _arg("validationType", "uint8"),
    _arg("contractAddress", "address"),
    _arg("tokenSpec", "uint8"),
    _arg("burnSpec", "uint8"),
    _arg("amount", "uint72"),
    _arg("minTokenId", "uint256"),
    _arg("maxTokenId", "uint256"),
    _arg("merkleRoot", "bytes32"),
]

_BURN_GROUP = [
    _arg("requiredCount", "uint256"),
    _arg("items", "tuple[]", _BURN_ITEM),
]

_BURN_REDEEM = [
    _arg("paymentReceiver", "address"),
    _arg("storageProtocol", "uint8"),
    _arg("redeemedCount", "uint32"),
    _arg("redeemAmount", "uint16"),
    _arg("totalSupply", "uint32"),
    _arg("contractVersion", "uint8"),
    _arg("startDate", "uint48"),
    _arg("endDate", "uint48"),
    _arg("cost", "uint160"),
    _arg("location", "string"),
    _arg("burnSet", "tuple[]", _BURN_GROUP),
]

BURN_REDEEM_ABI = [
    _fn("getBurnRedeem", _CLAIM_LOOKUP_INPUTS, [_arg("", "tuple", _BURN_REDEEM)]),
    _fn("BURN_FEE", [], _UINT_OUT),
    _fn("MULTI_BURN_FEE", [], _UINT_OUT),
]
