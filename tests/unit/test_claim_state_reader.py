"""
Unit Tests for ClaimStateReader
"""

from decimal import Decimal

import pytest

from conftest import (
    EXTENSION,
    MINT_FEE,
    MINT_FEE_MERKLE,
    NOW,
    RECEIVER,
    USDC,
    configure_edition,
    configure_usdc,
    edition_claim,
    edition_product,
    ts,
)

from mintkit.domain.errors import ContractReadError
from mintkit.domain.models import NATIVE_TOKEN
from mintkit.services.claim_state_reader import ClaimStateReader

ROOT = b"\xab" * 32


class FixedRates:
    def __init__(self, rate: Decimal):
        self.rate = rate

    async def attach_usd(self, money):
        usd = (Decimal(money.raw_value) / Decimal(10 ** money.decimals) * self.rate)
        return money.with_usd(usd.quantize(Decimal("0.01")))


@pytest.mark.asyncio
async def test_decodes_edition_claim(reader):
    configure_edition(reader, edition_claim(
        total=3, total_max=100, wallet_max=2, start=ts(NOW), cost=5 * 10 ** 16,
    ))
    state = await ClaimStateReader(reader).fetch_claim_state(edition_product())

    assert state.total_minted == 3
    assert state.total_max == 100
    assert state.wallet_max == 2
    assert state.start_date == NOW
    assert state.end_date is None
    assert state.allowlist_root is None
    assert state.unit_cost.token_id == NATIVE_TOKEN
    assert state.unit_cost.formatted == "0.05"
    assert state.platform_fee_per_unit.raw_value == MINT_FEE
    assert state.payment_receiver == RECEIVER
    assert state.extra["token_id"] == 7


@pytest.mark.asyncio
async def test_zero_sentinels_normalised(reader):
    configure_edition(reader, edition_claim())
    state = await ClaimStateReader(reader).fetch_claim_state(edition_product())
    assert state.total_max is None
    assert state.start_date is None and state.end_date is None
    assert state.is_supply_bounded is False


@pytest.mark.asyncio
async def test_allowlist_claim_uses_merkle_fee(reader):
    configure_edition(reader, edition_claim(root=ROOT))
    state = await ClaimStateReader(reader).fetch_claim_state(edition_product())
    assert state.allowlist_root == "0x" + "ab" * 32
    assert state.platform_fee_per_unit.raw_value == MINT_FEE_MERKLE


@pytest.mark.asyncio
async def test_erc20_payment_token_metadata(reader):
    configure_edition(reader, edition_claim(cost=25_000_000, erc20=USDC))
    configure_usdc(reader)
    state = await ClaimStateReader(reader).fetch_claim_state(edition_product())

    assert state.unit_cost.token_id.lower() == USDC
    assert state.unit_cost.symbol == "USDC"
    assert state.unit_cost.formatted == "25.0"
    # fee stays native
    assert state.platform_fee_per_unit.token_id == NATIVE_TOKEN


@pytest.mark.asyncio
async def test_cache_and_force_refresh(reader):
    configure_edition(reader, edition_claim(total=1))
    claims = ClaimStateReader(reader)
    product = edition_product()

    first = await claims.fetch_claim_state(product)
    configure_edition(reader, edition_claim(total=2))
    assert await claims.fetch_claim_state(product) is first
    assert reader.call_count("getClaim") == 1

    fresh = await claims.fetch_claim_state(product, force_refresh=True)
    assert fresh.total_minted == 2
    assert claims.cached(product) is fresh


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_entry(reader):
    configure_edition(reader, edition_claim(total=1))
    claims = ClaimStateReader(reader)
    product = edition_product()
    good = await claims.fetch_claim_state(product)

    reader.set(EXTENSION, "getClaim", ContractReadError("rpc down"))
    with pytest.raises(ContractReadError):
        await claims.fetch_claim_state(product, force_refresh=True)
    assert claims.cached(product) is good


@pytest.mark.asyncio
async def test_malformed_claim_is_read_error(reader):
    configure_edition(reader, (1, 2, 3))
    claims = ClaimStateReader(reader)
    with pytest.raises(ContractReadError) as exc:
        await claims.fetch_claim_state(edition_product())
    assert isinstance(exc.value.__cause__, ValueError)
    assert claims.cached(edition_product()) is None


@pytest.mark.asyncio
async def test_invalidate_forces_read(reader):
    configure_edition(reader, edition_claim())
    claims = ClaimStateReader(reader)
    product = edition_product()
    await claims.fetch_claim_state(product)
    claims.invalidate(product)
    await claims.fetch_claim_state(product)
    assert reader.call_count("getClaim") == 2


@pytest.mark.asyncio
async def test_usd_values_attached_when_rates_given(reader):
    configure_edition(reader, edition_claim(cost=5 * 10 ** 16))
    claims = ClaimStateReader(reader, rates=FixedRates(Decimal("3000")))
    state = await claims.fetch_claim_state(edition_product())
    assert state.unit_cost.usd == Decimal("150.00")
    assert state.platform_fee_per_unit.usd == Decimal("2.07")
