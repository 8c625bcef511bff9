"""
Gas limit estimation with buffer and per-operation fallback.
"""

import logging
from typing import Optional

from mintkit.config import settings
from mintkit.domain.errors import GasEstimationError
from mintkit.domain.models.purchase import GasBuffer, StepKind, TransactionRequest
from mintkit.infrastructure.chain.types import ChainReader

logger = logging.getLogger(__name__)


def fallback_gas(kind: StepKind) -> int:
    if kind == StepKind.APPROVE:
        return settings.APPROVE_GAS_FALLBACK
    return settings.MINT_GAS_FALLBACK


def apply_gas_buffer(estimate: int, gas_buffer: Optional[GasBuffer] = None) -> int:
    buffer = gas_buffer or GasBuffer()
    return buffer.apply(estimate, settings.DEFAULT_GAS_MULTIPLIER)


async def estimate_gas(reader: ChainReader, request: TransactionRequest, sender: str) -> int:
    try:
        return int(await reader.estimate_gas(request.network_id, request, sender))
    except Exception as exc:
        raise GasEstimationError(
            f"Failed to estimate gas for call to {request.to}",
            details={"to": request.to, "from": sender, "network_id": request.network_id},
        ) from exc


async def estimate_gas_limit(
    reader: ChainReader,
    request: TransactionRequest,
    sender: str,
    kind: StepKind,
    gas_buffer: Optional[GasBuffer] = None,
) -> int:
    """Buffered gas limit; a failed estimate falls back to the constant for ``kind``."""
    try:
        estimate = await estimate_gas(reader, request, sender)
    except GasEstimationError as exc:
        estimate = fallback_gas(kind)
        logger.warning(
            "%s, using %s fallback of %s: %s",
            exc.message, kind.value, estimate, exc.__cause__,
        )
    return apply_gas_buffer(estimate, gas_buffer)
