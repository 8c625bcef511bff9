"""
mintkit
Prepare and execute purchases of on-chain mintable products
"""

from .client import MintClient
from .core.logging import setup_logging
from .domain.errors import (
    ErrorCode,
    InsufficientFundsError,
    InvalidInputError,
    MintKitError,
    NotEligibleError,
    PurchaseExecutionError,
    WrongNetworkError,
)
from .domain.models import (
    AllocationResult,
    BlindMintPayload,
    BurnRedeemPayload,
    BurnToken,
    EditionPayload,
    GasBuffer,
    Money,
    Order,
    PreparedPurchase,
    ProductFamily,
    ProductRef,
    ProductStatus,
    StepEvent,
)
from .services.product_service import ProductHandle

__version__ = "0.1.0"

__all__ = [
    "MintClient",
    "ProductHandle",
    "setup_logging",
    # Models
    "AllocationResult",
    "BlindMintPayload",
    "BurnRedeemPayload",
    "BurnToken",
    "EditionPayload",
    "GasBuffer",
    "Money",
    "Order",
    "PreparedPurchase",
    "ProductFamily",
    "ProductRef",
    "ProductStatus",
    "StepEvent",
    # Errors
    "ErrorCode",
    "InsufficientFundsError",
    "InvalidInputError",
    "MintKitError",
    "NotEligibleError",
    "PurchaseExecutionError",
    "WrongNetworkError",
]
