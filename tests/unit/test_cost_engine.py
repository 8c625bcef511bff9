"""
Unit Tests for the cost engine
"""

from decimal import Decimal

import pytest

from conftest import MINT_FEE, NETWORK_ID, USDC, claim_state

from mintkit.domain.errors import InvalidInputError
from mintkit.domain.models import NATIVE_TOKEN, Money
from mintkit.domain.services.cost_engine import compute_cost


def usdc(raw: int) -> Money:
    return Money(raw, 6, USDC, "USDC", NETWORK_ID)


def test_native_cost_is_exact():
    cost = compute_cost(claim_state(), 2)
    native = cost.per_token[NATIVE_TOKEN]
    assert native.raw_value == 101_380_000_000_000_000
    assert native.formatted == "0.10138"
    assert cost.product_subtotal.formatted == "0.1"
    assert cost.platform_fee_subtotal.formatted == "0.00138"


def test_erc20_price_splits_tokens():
    state = claim_state(unit_cost=usdc(50_000_000))
    cost = compute_cost(state, 2)
    assert set(cost.per_token) == {NATIVE_TOKEN, USDC}
    assert cost.per_token[USDC].raw_value == 100_000_000
    assert cost.per_token[NATIVE_TOKEN].raw_value == 2 * MINT_FEE
    assert cost.native_total == 2 * MINT_FEE
    assert [m.token_id for m in cost.erc20_totals] == [USDC]


def test_zero_totals_omitted():
    state = claim_state(
        unit_cost=Money.native(0, NETWORK_ID),
        platform_fee_per_unit=Money.native(0, NETWORK_ID),
    )
    cost = compute_cost(state, 3)
    assert dict(cost.per_token) == {}
    assert cost.native_total == 0


def test_free_mint_with_fee_only():
    state = claim_state(unit_cost=Money.native(0, NETWORK_ID))
    cost = compute_cost(state, 1)
    assert cost.per_token[NATIVE_TOKEN].raw_value == MINT_FEE


@pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
def test_invalid_quantity_rejected(quantity):
    with pytest.raises(InvalidInputError):
        compute_cost(claim_state(), quantity)


@pytest.mark.parametrize("q1,q2", [(1, 1), (2, 3), (7, 11)])
def test_cost_is_additive(q1, q2):
    state = claim_state(unit_cost=usdc(1_250_000))
    combined = compute_cost(state, q1).combine(compute_cost(state, q2))
    direct = compute_cost(state, q1 + q2)
    assert set(combined.per_token) == set(direct.per_token)
    for token_id, amount in direct.per_token.items():
        assert combined.per_token[token_id].equals(amount)


def test_total_usd_needs_both_snapshots():
    priced = claim_state(
        unit_cost=Money.native(10 ** 16, NETWORK_ID).with_usd(Decimal("30.00")),
        platform_fee_per_unit=Money.native(MINT_FEE, NETWORK_ID).with_usd(Decimal("2.07")),
    )
    assert compute_cost(priced, 2).total_usd == Decimal("64.14")
    assert compute_cost(claim_state(), 2).total_usd is None
