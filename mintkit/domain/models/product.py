"""
DOMAIN MODELS - PRODUCTS

Product references and the per-family purchase payloads.
Payloads are resolved once at the API boundary (``ProductHandle``) and never
travel through the pipeline untyped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union

from mintkit.domain.errors import InvalidInputError


class ProductFamily(str, Enum):
    """On-chain product family"""
    EDITION = "edition"
    BURN_REDEEM = "burn-redeem"
    BLIND_MINT = "blind-mint"


class TokenSpec(str, Enum):
    ERC721 = "erc721"
    ERC1155 = "erc1155"


@dataclass(frozen=True)
class ProductRef:
    """
    Everything the pipeline needs to locate a product instance on-chain.

    ``extension_address`` is the claim/extension contract: it is read for
    claim data, receives the mint call and is the ERC-20 spender.
    """
    family: ProductFamily
    network_id: int
    creator_contract: str
    extension_address: str
    instance_id: int
    spec: TokenSpec = TokenSpec.ERC1155
    merkle_tree_id: Optional[int] = None
    name: str = ""

    def __post_init__(self):
        if self.instance_id < 0:
            raise InvalidInputError("instance_id must be non-negative")
        if self.network_id <= 0:
            raise InvalidInputError("network_id must be positive")

    @property
    def key(self) -> str:
        return f"{self.network_id}:{self.extension_address.lower()}:{self.instance_id}"


# ----------------------------------------------------------------------
# Payloads
# ----------------------------------------------------------------------

def _check_quantity(quantity: int) -> None:
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise InvalidInputError(
            "Quantity must be a positive integer", details={"quantity": quantity}
        )


@dataclass(frozen=True)
class EditionPayload:
    quantity: int = 1
    family: ProductFamily = field(default=ProductFamily.EDITION, init=False)

    def __post_init__(self):
        _check_quantity(self.quantity)


@dataclass(frozen=True)
class BurnToken:
    """One token offered for burning in a burn-redeem."""
    group_index: int
    item_index: int
    contract_address: str
    token_id: int
    merkle_proof: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BurnRedeemPayload:
    quantity: int = 1
    burn_tokens: Tuple[BurnToken, ...] = ()
    family: ProductFamily = field(default=ProductFamily.BURN_REDEEM, init=False)

    def __post_init__(self):
        _check_quantity(self.quantity)
        if not self.burn_tokens:
            raise InvalidInputError("Burn-redeem requires at least one burn token")


@dataclass(frozen=True)
class BlindMintPayload:
    quantity: int = 1
    family: ProductFamily = field(default=ProductFamily.BLIND_MINT, init=False)

    def __post_init__(self):
        _check_quantity(self.quantity)


PurchasePayload = Union[EditionPayload, BurnRedeemPayload, BlindMintPayload]


# ----------------------------------------------------------------------
# Product info (read helpers)
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class ProductInventory:
    """``total_supply`` is -1 for unbounded supply."""
    total_supply: int
    total_purchased: int


@dataclass(frozen=True)
class ProductRules:
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    audience_restriction: str
    max_per_wallet: Optional[int]
