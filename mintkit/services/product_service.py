"""
Product Service
One handle per product instance: status, allocation, prepare, purchase.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import AsyncIterator, Callable, Optional

from mintkit.domain.errors import (
    EndedError,
    InvalidInputError,
    NotEligibleError,
    NotOnAllowlistError,
    NotStartedError,
    QuantityExceedsAllocationError,
    SoldOutError,
    WalletLimitReachedError,
)
from mintkit.domain.families import get_strategy
from mintkit.domain.models.allocation import (
    REASON_ENDED,
    REASON_NOT_ON_ALLOWLIST,
    REASON_NOT_STARTED,
    REASON_SOLD_OUT,
    REASON_WALLET_LIMIT,
    AllocationResult,
)
from mintkit.domain.models.claim import ClaimState, ProductStatus
from mintkit.domain.models.product import (
    ProductInventory,
    ProductRef,
    ProductRules,
    PurchasePayload,
)
from mintkit.domain.models.purchase import GasBuffer, Order, PreparedPurchase, StepEvent
from mintkit.domain.services.allocation_engine import AllocationEngine
from mintkit.domain.services.cost_engine import compute_cost
from mintkit.domain.services.status_resolver import resolve_status
from mintkit.domain.services.step_builder import StepBuilder
from mintkit.domain.services.step_executor import StepExecutor
from mintkit.infrastructure.chain.types import Account, AllowlistProvider, ChainReader
from mintkit.services.claim_state_reader import ClaimStateReader
from mintkit.utils.validation import normalize_address

logger = logging.getLogger(__name__)

_REASON_ERRORS = {
    REASON_NOT_STARTED: NotStartedError,
    REASON_ENDED: EndedError,
    REASON_SOLD_OUT: SoldOutError,
    REASON_WALLET_LIMIT: WalletLimitReachedError,
    REASON_NOT_ON_ALLOWLIST: NotOnAllowlistError,
}


class ProductHandle:
    """
    Product Handle

    Wires the pipeline for one product:
    claim reader → status → allocation → cost → steps → executor.
    """

    def __init__(
        self,
        product: ProductRef,
        reader: ChainReader,
        claim_reader: Optional[ClaimStateReader] = None,
        allowlist: Optional[AllowlistProvider] = None,
        executor: Optional[StepExecutor] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.product = product
        self.reader = reader
        self.claim_reader = claim_reader or ClaimStateReader(reader)
        self.allocation_engine = AllocationEngine(self.claim_reader, reader, allowlist, clock)
        self.step_builder = StepBuilder(reader)
        self.executor = executor or StepExecutor()
        self.clock = clock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch_claim_state(self, force_refresh: bool = False) -> ClaimState:
        return await self.claim_reader.fetch_claim_state(self.product, force_refresh)

    async def get_status(self, force_refresh: bool = False) -> ProductStatus:
        state = await self.fetch_claim_state(force_refresh)
        return resolve_status(state, self.clock() if self.clock else None)

    async def get_allocation(self, wallet: str, force_refresh: bool = False) -> AllocationResult:
        return await self.allocation_engine.get_allocation(self.product, wallet, force_refresh)

    async def get_inventory(self, force_refresh: bool = False) -> ProductInventory:
        state = await self.fetch_claim_state(force_refresh)
        return ProductInventory(
            total_supply=-1 if state.total_max is None else state.total_max,
            total_purchased=state.total_minted,
        )

    async def get_rules(self, force_refresh: bool = False) -> ProductRules:
        state = await self.fetch_claim_state(force_refresh)
        return ProductRules(
            start_date=state.start_date,
            end_date=state.end_date,
            audience_restriction="allowlist" if state.has_allowlist else "none",
            max_per_wallet=state.wallet_max or None,
        )

    # ------------------------------------------------------------------
    # Purchase
    # ------------------------------------------------------------------

    async def prepare_purchase(
        self,
        wallet: str,
        payload: PurchasePayload,
        gas_buffer: Optional[GasBuffer] = None,
        account: Optional[Account] = None,
        recipient: Optional[str] = None,
    ) -> PreparedPurchase:
        """
        Fail-closed preparation: any eligibility, funding or read problem
        raises before a step list is returned. Always reads fresh claim state.

        Args:
            wallet: Paying address (balances, allowances)
            payload: Family payload with the quantity
            gas_buffer: Override for the settings gas buffer
            account: Optional wallet; its native balance is used and a
                network mismatch is reported on the result (not raised)
            recipient: Address that receives the tokens; defaults to ``wallet``.
                Allocation and allowlist proofs are computed for it.
        """
        wallet = normalize_address(wallet, "wallet")
        strategy = get_strategy(self.product.family)
        strategy.check_payload(payload)
        if recipient is not None:
            recipient = normalize_address(recipient, "recipient")
            if recipient != wallet and not strategy.supports_recipient:
                raise InvalidInputError(
                    f"{self.product.family.value} purchases always mint to the paying wallet",
                    details={"wallet": wallet, "recipient": recipient},
                )
        minter = recipient or wallet

        connected_network_id = None
        if account is not None:
            connected_network_id = await account.get_connected_network_id()
            if connected_network_id != self.product.network_id:
                logger.warning(
                    "Wallet is on network %s, %s needs %s; it will be switched at purchase",
                    connected_network_id, self.product.key, self.product.network_id,
                )

        state = await self.fetch_claim_state(force_refresh=True)
        allocation = await self.allocation_engine.allocate(self.product, state, minter)
        if not allocation.is_eligible:
            error_cls = _REASON_ERRORS.get(allocation.reason, NotEligibleError)
            raise error_cls(
                f"Wallet cannot purchase: {allocation.reason}",
                details={"wallet": minter, "product": self.product.key, "reason": allocation.reason},
            )
        if not allocation.allows(payload.quantity):
            raise QuantityExceedsAllocationError(
                f"Requested {payload.quantity}, at most {allocation.max_quantity} available",
                details={"requested": payload.quantity, "max_quantity": allocation.max_quantity},
            )

        cost = compute_cost(state, payload.quantity)
        steps = await self.step_builder.build_steps(
            self.product, wallet, cost, payload, gas_buffer, allocation,
            recipient=minter, account=account,
        )
        return PreparedPurchase(
            product=self.product,
            buyer=wallet,
            quantity=payload.quantity,
            cost=cost,
            steps=steps,
            recipient=minter,
            connected_network_id=connected_network_id,
        )

    async def purchase(
        self,
        account: Account,
        prepared: PreparedPurchase,
        confirmations: Optional[int] = None,
    ) -> Order:
        """Fail-open execution: partial receipts travel on ``PurchaseExecutionError``."""
        order = await self.executor.execute(prepared, account, confirmations)
        # supply and wallet counters changed
        self.claim_reader.invalidate(self.product)
        return order

    def purchase_events(
        self,
        account: Account,
        prepared: PreparedPurchase,
        confirmations: Optional[int] = None,
    ) -> AsyncIterator[StepEvent]:
        return self.executor.stream(prepared, account, confirmations)
