"""
Burn-redeem claims.

Supply counters are kept in redeemed *tokens*; the pipeline works in
redemptions, so both are divided by ``redeemAmount`` at decode time.
Cost is always paid in the native currency.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence

from mintkit.domain.errors import InvalidInputError
from mintkit.domain.families.base import DecodedClaim, ProductFamilyStrategy
from mintkit.domain.models.claim import MerkleEntry, timestamp_to_datetime
from mintkit.domain.models.product import (
    BurnRedeemPayload,
    ProductFamily,
    ProductRef,
    PurchasePayload,
)
from mintkit.infrastructure.chain.abis import BURN_REDEEM_ABI
from mintkit.infrastructure.chain.encoding import encode_burn_redeem


class BurnRedeemStrategy(ProductFamilyStrategy):
    family = ProductFamily.BURN_REDEEM
    claim_function = "getBurnRedeem"
    fee_functions = ("BURN_FEE", "MULTI_BURN_FEE")

    def abi(self, product: ProductRef) -> List[dict]:
        return BURN_REDEEM_ABI

    def decode_claim(self, product: ProductRef, raw: Sequence[Any]) -> DecodedClaim:
        if len(raw) != 11:
            raise ValueError(f"Unexpected burn-redeem shape ({len(raw)} fields)")
        (receiver, _storage, redeemed_count, redeem_amount, total_supply,
         contract_version, start, end, cost, location, burn_set) = raw
        redeem_amount = max(int(redeem_amount), 1)
        required = sum(int(group[0]) for group in burn_set)
        return DecodedClaim(
            total_minted=int(redeemed_count) // redeem_amount,
            total_max=(int(total_supply) // redeem_amount) or None,
            wallet_max=0,
            start_date=timestamp_to_datetime(start),
            end_date=timestamp_to_datetime(end),
            allowlist_root=None,
            unit_cost=int(cost),
            payment_token=None,
            payment_receiver=receiver,
            extra={
                "redeem_amount": redeem_amount,
                "burn_required_count": required,
                "burn_groups": len(burn_set),
                "contract_version": int(contract_version),
                "location": location,
            },
        )

    def select_fee(self, decoded: DecodedClaim, fees: Mapping[str, int]) -> int:
        if decoded.extra.get("burn_required_count", 1) > 1:
            return int(fees["MULTI_BURN_FEE"])
        return int(fees["BURN_FEE"])

    def encode_mint(
        self,
        product: ProductRef,
        payload: PurchasePayload,
        recipient: str,
        proofs: Sequence[MerkleEntry] = (),
    ) -> str:
        if not isinstance(payload, BurnRedeemPayload):
            raise InvalidInputError("Burn-redeem purchases need a BurnRedeemPayload")
        return encode_burn_redeem(
            product.creator_contract,
            product.instance_id,
            payload.quantity,
            payload.burn_tokens,
        )
