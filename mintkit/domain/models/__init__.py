"""
Domain Models Package
Export all domain entities
"""

from .money import NATIVE_TOKEN, ZERO_ADDRESS, Money, format_units, parse_units
from .claim import ClaimState, MerkleEntry, ProductStatus
from .allocation import (
    REASON_ENDED,
    REASON_NO_MINTS,
    REASON_NOT_ON_ALLOWLIST,
    REASON_NOT_STARTED,
    REASON_SOLD_OUT,
    REASON_WALLET_LIMIT,
    AllocationResult,
)
from .product import (
    BlindMintPayload,
    BurnRedeemPayload,
    BurnToken,
    EditionPayload,
    ProductFamily,
    ProductInventory,
    ProductRef,
    ProductRules,
    PurchasePayload,
    TokenSpec,
)
from .purchase import (
    CostBreakdown,
    GasBuffer,
    Order,
    OrderStatus,
    PreparedPurchase,
    StepEvent,
    StepEventKind,
    StepKind,
    TransactionReceipt,
    TransactionRequest,
    TransactionStep,
)

__all__ = [
    # Money
    "NATIVE_TOKEN",
    "ZERO_ADDRESS",
    "Money",
    "format_units",
    "parse_units",

    # Claim
    "ClaimState",
    "MerkleEntry",
    "ProductStatus",

    # Allocation
    "AllocationResult",
    "REASON_ENDED",
    "REASON_NO_MINTS",
    "REASON_NOT_ON_ALLOWLIST",
    "REASON_NOT_STARTED",
    "REASON_SOLD_OUT",
    "REASON_WALLET_LIMIT",

    # Product
    "BlindMintPayload",
    "BurnRedeemPayload",
    "BurnToken",
    "EditionPayload",
    "ProductFamily",
    "ProductInventory",
    "ProductRef",
    "ProductRules",
    "PurchasePayload",
    "TokenSpec",

    # Purchase
    "CostBreakdown",
    "GasBuffer",
    "Order",
    "OrderStatus",
    "PreparedPurchase",
    "StepEvent",
    "StepEventKind",
    "StepKind",
    "TransactionReceipt",
    "TransactionRequest",
    "TransactionStep",
]
