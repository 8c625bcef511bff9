"""
DOMAIN MODELS - CLAIM STATE

Snapshot of one product instance's on-chain claim. Fetched on demand,
cached on the product handle and replaced wholesale on refresh.

Sentinels are normalised once at decode time:
- ``total_max is None``  -> unbounded supply (on-chain ``0``)
- ``wallet_max == 0``    -> no per-wallet limit
- ``start_date``/``end_date`` is ``None`` -> no bound (on-chain ``0``)
- ``allowlist_root is None`` -> public sale (on-chain zero hash)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from mintkit.domain.errors import InvalidInputError
from mintkit.domain.models.money import Money

ZERO_HASH = "0x" + "00" * 32


class ProductStatus(str, Enum):
    """Lifecycle state derived from claim state and time"""
    UPCOMING = "upcoming"
    ACTIVE = "active"
    SOLD_OUT = "sold-out"
    ENDED = "ended"


@dataclass(frozen=True)
class ClaimState:
    total_minted: int
    total_max: Optional[int]
    wallet_max: int
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    allowlist_root: Optional[str]
    unit_cost: Money
    platform_fee_per_unit: Money
    payment_receiver: str
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.total_minted < 0:
            raise InvalidInputError("total_minted cannot be negative")
        if self.total_max is not None and self.total_max <= 0:
            raise InvalidInputError("total_max must be positive or None (unbounded)")
        if self.wallet_max < 0:
            raise InvalidInputError("wallet_max cannot be negative")
        # Freeze the family-specific extras as well
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @property
    def has_allowlist(self) -> bool:
        return self.allowlist_root is not None

    @property
    def is_supply_bounded(self) -> bool:
        return self.total_max is not None

    @property
    def supply_remaining(self) -> Optional[int]:
        """Remaining supply, ``None`` when unbounded."""
        if self.total_max is None:
            return None
        return max(self.total_max - self.total_minted, 0)


@dataclass(frozen=True)
class MerkleEntry:
    """One allowlist slot: the mint index and its proof."""
    index: int
    proof: tuple


def timestamp_to_datetime(value: int) -> Optional[datetime]:
    """Unix seconds -> aware UTC datetime; ``0`` means "not set"."""
    if not value:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def normalize_root(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        value = "0x" + bytes(value).hex()
    text = str(value).lower()
    if not text.startswith("0x"):
        text = "0x" + text
    return None if text == ZERO_HASH or int(text, 16) == 0 else text
