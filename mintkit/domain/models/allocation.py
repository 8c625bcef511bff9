from dataclasses import dataclass
from typing import Optional, Tuple

from mintkit.domain.models.claim import MerkleEntry

# Callers build UI messages from these; treat them as part of the API.
REASON_NOT_STARTED = "not started"
REASON_ENDED = "ended"
REASON_SOLD_OUT = "sold out"
REASON_WALLET_LIMIT = "wallet limit reached"
REASON_NOT_ON_ALLOWLIST = "not on allowlist"
REASON_NO_MINTS = "no mints available"


@dataclass(frozen=True)
class AllocationResult:
    """
    How many units a wallet may still buy.

    ``max_quantity`` of ``None`` means unbounded. ``proofs`` carries the
    unused allowlist slots found while checking, so the mint call can reuse
    them without a second provider round-trip.
    """
    is_eligible: bool
    max_quantity: Optional[int]
    reason: Optional[str] = None
    proofs: Tuple[MerkleEntry, ...] = ()

    def allows(self, quantity: int) -> bool:
        if not self.is_eligible:
            return False
        return self.max_quantity is None or quantity <= self.max_quantity
