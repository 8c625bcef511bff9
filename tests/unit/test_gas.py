"""
Unit Tests for gas estimation helpers
"""

import pytest

from conftest import EXTENSION, NETWORK_ID, WALLET, FakeChainReader

from mintkit.config import settings
from mintkit.domain.errors import ContractReadError, GasEstimationError, InvalidInputError
from mintkit.domain.models import GasBuffer, StepKind, TransactionRequest
from mintkit.domain.services.gas import (
    apply_gas_buffer,
    estimate_gas,
    estimate_gas_limit,
    fallback_gas,
)

REQUEST = TransactionRequest(to=EXTENSION, data="0x", network_id=NETWORK_ID)


def test_default_multiplier():
    assert apply_gas_buffer(100_000) == 100_000 * settings.DEFAULT_GAS_MULTIPLIER // 100


def test_fixed_buffer_wins():
    assert apply_gas_buffer(100_000, GasBuffer(fixed=1_000, multiplier=200)) == 101_000


def test_custom_multiplier():
    assert apply_gas_buffer(100_000, GasBuffer(multiplier=150)) == 150_000


@pytest.mark.parametrize("kwargs", [{"fixed": -1}, {"multiplier": 99}])
def test_invalid_buffers(kwargs):
    with pytest.raises(InvalidInputError):
        GasBuffer(**kwargs)


def test_fallbacks_per_kind():
    assert fallback_gas(StepKind.APPROVE) == settings.APPROVE_GAS_FALLBACK
    assert fallback_gas(StepKind.MINT) == settings.MINT_GAS_FALLBACK


@pytest.mark.asyncio
async def test_estimate_wraps_errors():
    reader = FakeChainReader()
    reader.gas_error = ContractReadError("execution reverted")
    with pytest.raises(GasEstimationError) as exc:
        await estimate_gas(reader, REQUEST, WALLET)
    assert isinstance(exc.value.__cause__, ContractReadError)
    assert exc.value.details["from"] == WALLET


@pytest.mark.asyncio
async def test_estimate_limit_falls_back():
    reader = FakeChainReader()
    reader.gas_error = RuntimeError("node unavailable")
    limit = await estimate_gas_limit(reader, REQUEST, WALLET, StepKind.APPROVE, GasBuffer(fixed=0))
    assert limit == settings.APPROVE_GAS_FALLBACK


@pytest.mark.asyncio
async def test_estimate_limit_buffers_estimate():
    reader = FakeChainReader()
    reader.gas_estimate = 80_000
    limit = await estimate_gas_limit(reader, REQUEST, WALLET, StepKind.MINT, GasBuffer(multiplier=125))
    assert limit == 100_000
