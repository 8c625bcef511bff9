"""
ALLOCATION ENGINE
Claim state + wallet → how many units the wallet may still buy

RESPONSIBILITIES:
- Gate on lifecycle status (upcoming / sold out / ended)
- Allowlist claims: count the wallet's unused, verified proofs
- Public claims with a wallet cap: subtract the wallet's prior mints
- Clamp to remaining supply

RULES:
- No cost or balance logic
- Results are never cached
- Invalid wallet is an error, not an ineligible result
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from mintkit.domain.families import get_strategy
from mintkit.domain.models.allocation import (
    REASON_ENDED,
    REASON_NO_MINTS,
    REASON_NOT_ON_ALLOWLIST,
    REASON_NOT_STARTED,
    REASON_SOLD_OUT,
    REASON_WALLET_LIMIT,
    AllocationResult,
)
from mintkit.domain.models.claim import ClaimState, MerkleEntry, ProductStatus
from mintkit.domain.models.product import ProductRef
from mintkit.domain.services.status_resolver import resolve_status
from mintkit.infrastructure.allowlist.merkle import verify_proof
from mintkit.infrastructure.chain.types import AllowlistProvider, ChainReader
from mintkit.services.claim_state_reader import ClaimStateReader
from mintkit.utils.validation import normalize_address

logger = logging.getLogger(__name__)

_STATUS_REASONS = {
    ProductStatus.UPCOMING: REASON_NOT_STARTED,
    ProductStatus.ENDED: REASON_ENDED,
    ProductStatus.SOLD_OUT: REASON_SOLD_OUT,
}


def _min_optional(*values: Optional[int]) -> Optional[int]:
    bounded = [v for v in values if v is not None]
    return min(bounded) if bounded else None


class AllocationEngine:
    """
    Allocation Engine
    Computes a wallet's remaining purchasable quantity for one product
    """

    def __init__(
        self,
        claim_reader: ClaimStateReader,
        chain_reader: ChainReader,
        allowlist: Optional[AllowlistProvider] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.claim_reader = claim_reader
        self.chain_reader = chain_reader
        self.allowlist = allowlist
        self.clock = clock

    async def get_allocation(
        self,
        product: ProductRef,
        wallet: str,
        force_refresh: bool = False,
    ) -> AllocationResult:
        """
        Args:
            product: Product instance to check
            wallet: Buyer address
            force_refresh: Re-read the claim instead of using the cached state

        Returns:
            AllocationResult; ``max_quantity`` None means unbounded
        """
        wallet = normalize_address(wallet, "wallet")
        state = await self.claim_reader.fetch_claim_state(product, force_refresh=force_refresh)
        return await self.allocate(product, state, wallet)

    async def allocate(
        self, product: ProductRef, state: ClaimState, wallet: str
    ) -> AllocationResult:
        """Allocation against an already fetched claim state."""
        now = self.clock() if self.clock else None
        status = resolve_status(state, now)
        if status in _STATUS_REASONS:
            return AllocationResult(False, 0, _STATUS_REASONS[status])

        proofs: Tuple[MerkleEntry, ...] = ()
        if state.has_allowlist:
            valid, proofs = await self._allowlist_slots(product, state, wallet)
            if not valid:
                return AllocationResult(False, 0, REASON_NOT_ON_ALLOWLIST)
            if not proofs:
                return AllocationResult(False, 0, REASON_WALLET_LIMIT)
            wallet_cap: Optional[int] = len(proofs)
        elif state.wallet_max > 0:
            strategy = get_strategy(product.family)
            prior = await strategy.read_prior_mints(self.chain_reader, product, wallet)
            wallet_cap = max(state.wallet_max - prior, 0)
            if wallet_cap == 0:
                return AllocationResult(False, 0, REASON_WALLET_LIMIT)
        else:
            wallet_cap = None

        max_quantity = _min_optional(wallet_cap, state.supply_remaining)
        if max_quantity is not None and max_quantity <= 0:
            return AllocationResult(False, 0, REASON_NO_MINTS)
        return AllocationResult(True, max_quantity, None, proofs)

    async def _allowlist_slots(
        self, product: ProductRef, state: ClaimState, wallet: str
    ) -> Tuple[List[MerkleEntry], Tuple[MerkleEntry, ...]]:
        """(verified entries, verified entries not yet used on-chain)."""
        strategy = get_strategy(product.family)
        if not strategy.supports_allowlist:
            logger.warning(
                "Claim %s reports an allowlist root but %s claims have no allowlist",
                product.key, product.family.value,
            )
            return [], ()
        if self.allowlist is None or product.merkle_tree_id is None:
            logger.warning(
                "Claim %s has an allowlist but no merkle tree/provider is configured",
                product.key,
            )
            return [], ()

        entries = await self.allowlist.get_merkle_entries(product.merkle_tree_id, wallet)
        valid = [
            entry for entry in entries
            if verify_proof(state.allowlist_root, wallet, entry.index, entry.proof)
        ]
        if len(valid) < len(entries):
            logger.warning(
                "Dropped %s allowlist entries for %s that do not match the on-chain root",
                len(entries) - len(valid), wallet,
            )
        if not valid:
            return [], ()

        used = await strategy.check_used_indices(
            self.chain_reader, product, [entry.index for entry in valid]
        )
        unused = tuple(entry for entry, is_used in zip(valid, used) if not is_used)
        return valid, unused
