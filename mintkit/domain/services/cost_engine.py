"""
COST ENGINE
Claim state + quantity → exact per-token cost breakdown

RULES:
- Integer (raw value) arithmetic only
- Amounts grouped by token before summing
- Zero totals are omitted from the per-token map
"""

from typing import Dict

from mintkit.domain.models.claim import ClaimState
from mintkit.domain.models.money import Money
from mintkit.domain.models.purchase import CostBreakdown
from mintkit.utils.validation import validate_quantity


def compute_cost(state: ClaimState, quantity: int) -> CostBreakdown:
    """
    Total cost of ``quantity`` units.

    For allowlisted editions the merkle platform fee has already been
    selected into ``platform_fee_per_unit`` when the claim was read.
    """
    validate_quantity(quantity)

    product_subtotal = state.unit_cost.multiply_int(quantity)
    platform_fee_subtotal = state.platform_fee_per_unit.multiply_int(quantity)

    per_token: Dict[str, Money] = {}
    for amount in (product_subtotal, platform_fee_subtotal):
        if amount.is_zero:
            continue
        existing = per_token.get(amount.token_id)
        per_token[amount.token_id] = existing.add(amount) if existing else amount

    return CostBreakdown(
        per_token=per_token,
        product_subtotal=product_subtotal,
        platform_fee_subtotal=platform_fee_subtotal,
    )
