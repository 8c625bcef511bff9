"""
STEP EXECUTOR
Prepared purchase + account → confirmed receipts → order

RESPONSIBILITIES:
- Run steps strictly in order, one at a time
- Make sure the wallet is on the product network before every step
- Report progress as a stream of step events
- On failure stop, and report what already confirmed

RULES:
- No retries; a failed purchase is re-prepared by the caller
- A reverted receipt is a failure
- Cancelling = stop iterating ``stream``
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, List, Optional

from mintkit.config import settings
from mintkit.domain.errors import (
    InvalidInputError,
    MintKitError,
    PurchaseExecutionError,
    TransactionFailedError,
    TransactionRejectedError,
    TransactionRevertedError,
    WrongNetworkError,
    is_user_rejection,
)
from mintkit.domain.models.purchase import (
    Order,
    OrderStatus,
    PreparedPurchase,
    StepEvent,
    StepEventKind,
    TransactionReceipt,
)
from mintkit.infrastructure.chain.types import Account

logger = logging.getLogger(__name__)


async def ensure_connected_network(
    account: Account,
    network_id: int,
    max_attempts: Optional[int] = None,
    poll_interval: Optional[float] = None,
) -> None:
    """Switch the wallet to ``network_id`` and wait until it reports it."""
    max_attempts = settings.NETWORK_SWITCH_MAX_ATTEMPTS if max_attempts is None else max_attempts
    poll_interval = (
        settings.NETWORK_SWITCH_POLL_INTERVAL if poll_interval is None else poll_interval
    )

    current = await account.get_connected_network_id()
    if current == network_id:
        return

    logger.info("Switching wallet from network %s to %s", current, network_id)
    await account.switch_network(network_id)
    for attempt in range(max_attempts):
        current = await account.get_connected_network_id()
        if current == network_id:
            return
        if attempt + 1 < max_attempts:
            await asyncio.sleep(poll_interval)

    raise WrongNetworkError(
        f"Wallet is on network {current}, expected {network_id}",
        details={"expected": network_id, "actual": current},
    )


def _as_step_failure(exc: Exception) -> MintKitError:
    if isinstance(exc, MintKitError):
        return exc
    if is_user_rejection(exc):
        return TransactionRejectedError(f"Transaction rejected by user: {exc}")
    return TransactionFailedError(f"Transaction failed: {exc}")


class StepExecutor:
    def __init__(
        self,
        network_max_attempts: Optional[int] = None,
        network_poll_interval: Optional[float] = None,
    ):
        self.network_max_attempts = network_max_attempts
        self.network_poll_interval = network_poll_interval

    async def execute(
        self,
        prepared: PreparedPurchase,
        account: Account,
        confirmations: Optional[int] = None,
    ) -> Order:
        """Run every step and return the completed order.

        Raises ``PurchaseExecutionError`` (with the partial/failed order and
        the receipts collected so far) when a step fails.
        """
        receipts: List[TransactionReceipt] = []
        async for event in self.stream(prepared, account, confirmations):
            if event.kind == StepEventKind.COMPLETED and event.receipt is not None:
                receipts.append(event.receipt)
        return self._order(prepared, receipts, OrderStatus.COMPLETED)

    async def stream(
        self,
        prepared: PreparedPurchase,
        account: Account,
        confirmations: Optional[int] = None,
    ) -> AsyncIterator[StepEvent]:
        """Async generator of step lifecycle events.

        The generator raises ``PurchaseExecutionError`` right after yielding
        the ``failed`` event of the failing step.
        """
        confirmations = settings.DEFAULT_CONFIRMATIONS if confirmations is None else confirmations
        if confirmations < 1:
            raise InvalidInputError("confirmations must be >= 1")

        sender = await account.get_address()
        if sender.lower() != prepared.buyer.lower():
            raise InvalidInputError(
                "Account does not match the wallet the purchase was prepared for",
                details={"prepared_for": prepared.buyer, "account": sender},
            )

        total = len(prepared.steps)
        network_id = prepared.product.network_id
        receipts: List[TransactionReceipt] = []

        for index, step in enumerate(prepared.steps):
            yield StepEvent(step.id, StepEventKind.STARTED, index, total)
            try:
                await ensure_connected_network(
                    account, network_id, self.network_max_attempts, self.network_poll_interval
                )
                yield StepEvent(
                    step.id, StepEventKind.CONFIRMING, index, total,
                    details={"confirmations": confirmations},
                )
                receipt = await step.execute(account, confirmations)
                if not receipt.succeeded:
                    raise TransactionRevertedError(
                        f"Step {step.id} reverted in {receipt.tx_hash}",
                        details={"tx_hash": receipt.tx_hash, "step": step.id},
                    )
            except Exception as exc:
                failure = _as_step_failure(exc)
                status = OrderStatus.FAILED if index == 0 else OrderStatus.PARTIAL
                order = self._order(prepared, receipts, status, step.id, str(failure))
                logger.error("Step %s (%s/%s) failed: %s", step.id, index + 1, total, failure)
                yield StepEvent(step.id, StepEventKind.FAILED, index, total, error=failure)
                raise PurchaseExecutionError(
                    f"Purchase stopped at step {step.id}: {failure.message}",
                    step_id=step.id,
                    receipts=receipts,
                    order=order,
                    cause=failure,
                ) from exc

            receipts.append(receipt)
            logger.info("Step %s confirmed in %s", step.id, receipt.tx_hash)
            yield StepEvent(step.id, StepEventKind.COMPLETED, index, total, receipt=receipt)

    def _order(
        self,
        prepared: PreparedPurchase,
        receipts: List[TransactionReceipt],
        status: OrderStatus,
        failed_step_id: Optional[str] = None,
        error: Optional[str] = None,
    ) -> Order:
        return Order(
            receipts=tuple(receipts),
            status=status,
            buyer_address=prepared.buyer,
            total_cost=prepared.cost,
            failed_step_id=failed_step_id,
            error=error,
        )
