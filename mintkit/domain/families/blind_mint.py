"""
Blind mint (randomized pool) claims.

The claim has no per-wallet cap or allowlist.
"""

from __future__ import annotations

from typing import Any, List, Sequence

from mintkit.domain.families.base import DecodedClaim, ProductFamilyStrategy
from mintkit.domain.models.claim import MerkleEntry, timestamp_to_datetime
from mintkit.domain.models.money import ZERO_ADDRESS
from mintkit.domain.models.product import ProductFamily, ProductRef, PurchasePayload
from mintkit.infrastructure.chain.abis import BLIND_MINT_ABI
from mintkit.infrastructure.chain.encoding import encode_mint_reserve


class BlindMintStrategy(ProductFamilyStrategy):
    family = ProductFamily.BLIND_MINT

    def abi(self, product: ProductRef) -> List[dict]:
        return BLIND_MINT_ABI

    def decode_claim(self, product: ProductRef, raw: Sequence[Any]) -> DecodedClaim:
        if len(raw) != 11:
            raise ValueError(f"Unexpected blind mint claim shape ({len(raw)} fields)")
        (_storage, total, total_max, start, end, starting_token_id,
         token_variations, location, receiver, cost, erc20) = raw
        return DecodedClaim(
            total_minted=int(total),
            total_max=int(total_max) or None,
            wallet_max=0,
            start_date=timestamp_to_datetime(start),
            end_date=timestamp_to_datetime(end),
            allowlist_root=None,
            unit_cost=int(cost),
            payment_token=None if erc20.lower() == ZERO_ADDRESS else erc20,
            payment_receiver=receiver,
            extra={
                "starting_token_id": int(starting_token_id),
                "token_variations": int(token_variations),
                "location": location,
            },
        )

    def encode_mint(
        self,
        product: ProductRef,
        payload: PurchasePayload,
        recipient: str,
        proofs: Sequence[MerkleEntry] = (),
    ) -> str:
        return encode_mint_reserve(product.creator_contract, product.instance_id, payload.quantity)
