"""
STATUS RESOLVER

Pure function of (claim state, now). Order of checks:
upcoming -> sold-out -> ended -> active.
A sold-out claim stays sold-out after its end date.
"""

from datetime import datetime, timezone
from typing import Optional

from mintkit.domain.models.claim import ClaimState, ProductStatus


def resolve_status(state: ClaimState, now: Optional[datetime] = None) -> ProductStatus:
    if now is None:
        now = datetime.now(timezone.utc)

    if state.start_date is not None and now < state.start_date:
        return ProductStatus.UPCOMING
    if state.total_max is not None and state.total_minted >= state.total_max:
        return ProductStatus.SOLD_OUT
    if state.end_date is not None and now >= state.end_date:
        return ProductStatus.ENDED
    return ProductStatus.ACTIVE
