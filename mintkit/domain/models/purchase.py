"""
DOMAIN MODELS - PURCHASE

Immutable structures produced by ``prepare_purchase`` and consumed by the
step executor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional, Tuple

from mintkit.domain.errors import InvalidInputError
from mintkit.domain.models.money import NATIVE_TOKEN, Money

if TYPE_CHECKING:
    from mintkit.domain.models.product import ProductRef
    from mintkit.infrastructure.chain.types import Account


class StepKind(str, Enum):
    APPROVE = "approve"
    MINT = "mint"


class OrderStatus(str, Enum):
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


class StepEventKind(str, Enum):
    STARTED = "started"
    CONFIRMING = "confirming"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class GasBuffer:
    """
    Gas headroom on top of a raw estimate.

    ``fixed`` adds a constant amount of gas; otherwise ``multiplier`` is a
    percentage (120 means +20%).
    """
    fixed: Optional[int] = None
    multiplier: Optional[int] = None

    def __post_init__(self):
        if self.fixed is not None and self.fixed < 0:
            raise InvalidInputError("Gas buffer cannot be negative")
        if self.multiplier is not None and self.multiplier < 100:
            raise InvalidInputError("Gas multiplier is a percentage and must be >= 100")

    def apply(self, estimate: int, default_multiplier: int) -> int:
        if self.fixed is not None:
            return estimate + self.fixed
        multiplier = self.multiplier if self.multiplier is not None else default_multiplier
        return estimate * multiplier // 100


@dataclass(frozen=True)
class TransactionRequest:
    to: str
    data: str
    network_id: int
    value: int = 0
    gas_limit: Optional[int] = None


@dataclass(frozen=True)
class TransactionReceipt:
    network_id: int
    step_id: str
    tx_hash: str
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    status: str = "success"

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], step_id: str, network_id: int) -> "TransactionReceipt":
        """Build from a wallet confirmation mapping (``hash``, ``blockNumber``, ``gasUsed``, ``status``)."""
        tx_hash = raw.get("hash") or raw.get("transactionHash")
        if isinstance(tx_hash, (bytes, bytearray)):
            tx_hash = "0x" + bytes(tx_hash).hex()
        tx_hash = str(tx_hash)
        if not tx_hash.startswith("0x"):
            tx_hash = "0x" + tx_hash

        status = raw.get("status", "success")
        if status in (0, "0x0", "reverted", False):
            status = "reverted"
        else:
            status = "success"

        block_number = raw.get("blockNumber")
        gas_used = raw.get("gasUsed")
        return cls(
            network_id=int(raw.get("chainId") or network_id),
            step_id=step_id,
            tx_hash=tx_hash,
            block_number=int(block_number) if block_number is not None else None,
            gas_used=int(gas_used) if gas_used is not None else None,
            status=status,
        )


StepExecutorFn = Callable[["Account", int], Awaitable[TransactionReceipt]]


@dataclass(frozen=True)
class TransactionStep:
    """
    One transaction of a purchase.

    The step is a specification until ``execute`` is awaited. Allowance was
    checked when the step list was built, so a prepared purchase should not
    be reused after a long delay.
    """
    id: str
    kind: StepKind
    description: str
    request: TransactionRequest
    executor: StepExecutorFn = field(repr=False, compare=False)
    cost: Optional[Money] = None

    async def execute(self, account: "Account", confirmations: int = 1) -> TransactionReceipt:
        return await self.executor(account, confirmations)


@dataclass(frozen=True)
class CostBreakdown:
    per_token: Mapping[str, Money]
    product_subtotal: Money
    platform_fee_subtotal: Money

    def __post_init__(self):
        object.__setattr__(self, "per_token", MappingProxyType(dict(self.per_token)))

    @property
    def native_total(self) -> int:
        native = self.per_token.get(NATIVE_TOKEN)
        return native.raw_value if native is not None else 0

    @property
    def erc20_totals(self) -> Tuple[Money, ...]:
        return tuple(m for m in self.per_token.values() if m.is_erc20)

    @property
    def total_usd(self) -> Optional[Decimal]:
        parts = [self.product_subtotal.usd, self.platform_fee_subtotal.usd]
        if any(p is None for p in parts):
            return None
        return sum(parts, Decimal("0"))

    def combine(self, other: "CostBreakdown") -> "CostBreakdown":
        """Per-token sum of two breakdowns for the same claim."""
        merged = dict(self.per_token)
        for token_id, amount in other.per_token.items():
            merged[token_id] = merged[token_id].add(amount) if token_id in merged else amount
        return CostBreakdown(
            per_token=merged,
            product_subtotal=self.product_subtotal.add(other.product_subtotal),
            platform_fee_subtotal=self.platform_fee_subtotal.add(other.platform_fee_subtotal),
        )


@dataclass(frozen=True)
class PreparedPurchase:
    product: "ProductRef"
    buyer: str
    quantity: int
    cost: CostBreakdown
    steps: Tuple[TransactionStep, ...]
    is_eligible: bool = True
    prepared_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    recipient: Optional[str] = None
    # network the wallet was on at preparation time, when an account was given
    connected_network_id: Optional[int] = None

    @property
    def step_ids(self) -> Tuple[str, ...]:
        return tuple(step.id for step in self.steps)

    @property
    def needs_approval(self) -> bool:
        return any(step.kind == StepKind.APPROVE for step in self.steps)

    @property
    def on_wrong_network(self) -> bool:
        return (
            self.connected_network_id is not None
            and self.connected_network_id != self.product.network_id
        )


@dataclass(frozen=True)
class Order:
    receipts: Tuple[TransactionReceipt, ...]
    status: OrderStatus
    buyer_address: str
    total_cost: CostBreakdown
    failed_step_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def mint_receipt(self) -> Optional[TransactionReceipt]:
        if self.status != OrderStatus.COMPLETED or not self.receipts:
            return None
        return self.receipts[-1]


@dataclass(frozen=True)
class StepEvent:
    step_id: str
    kind: StepEventKind
    index: int
    total: int
    receipt: Optional[TransactionReceipt] = None
    error: Optional[BaseException] = None
    details: Mapping[str, Any] = field(default_factory=dict)
