"""
Error taxonomy for the purchase pipeline.

Every error carries an ``ErrorCode`` and a ``details`` dict so callers can
branch on the code and log the context without parsing messages.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from mintkit.domain.models.purchase import Order, TransactionReceipt


class ErrorCode(str, Enum):
    # Input
    INVALID_INPUT = "INVALID_INPUT"
    CURRENCY_MISMATCH = "CURRENCY_MISMATCH"

    # Eligibility
    NOT_ELIGIBLE = "NOT_ELIGIBLE"
    NOT_STARTED = "NOT_STARTED"
    ENDED = "ENDED"
    SOLD_OUT = "SOLD_OUT"
    LIMIT_REACHED = "LIMIT_REACHED"
    NOT_ON_ALLOWLIST = "NOT_ON_ALLOWLIST"
    QUANTITY_EXCEEDS_ALLOCATION = "QUANTITY_EXCEEDS_ALLOCATION"

    # Funding
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"

    # Network
    WRONG_NETWORK = "WRONG_NETWORK"
    UNSUPPORTED_NETWORK = "UNSUPPORTED_NETWORK"

    # Transaction
    TRANSACTION_FAILED = "TRANSACTION_FAILED"
    TRANSACTION_REVERTED = "TRANSACTION_REVERTED"
    TRANSACTION_REJECTED = "TRANSACTION_REJECTED"

    # Contract / API
    CONTRACT_ERROR = "CONTRACT_ERROR"
    API_ERROR = "API_ERROR"
    GAS_ESTIMATION_FAILED = "GAS_ESTIMATION_FAILED"
    TIMEOUT = "TIMEOUT"


class MintKitError(RuntimeError):
    """Base class for all SDK errors."""

    code: ErrorCode = ErrorCode.CONTRACT_ERROR

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: Optional[ErrorCode] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


# ----------------------------------------------------------------------
# Input
# ----------------------------------------------------------------------

class InvalidInputError(MintKitError, ValueError):
    code = ErrorCode.INVALID_INPUT


class CurrencyMismatchError(InvalidInputError):
    code = ErrorCode.CURRENCY_MISMATCH


# ----------------------------------------------------------------------
# Eligibility
# ----------------------------------------------------------------------

class NotEligibleError(MintKitError):
    code = ErrorCode.NOT_ELIGIBLE


class NotStartedError(NotEligibleError):
    code = ErrorCode.NOT_STARTED


class EndedError(NotEligibleError):
    code = ErrorCode.ENDED


class SoldOutError(NotEligibleError):
    code = ErrorCode.SOLD_OUT


class WalletLimitReachedError(NotEligibleError):
    code = ErrorCode.LIMIT_REACHED


class NotOnAllowlistError(NotEligibleError):
    code = ErrorCode.NOT_ON_ALLOWLIST


class QuantityExceedsAllocationError(InvalidInputError):
    code = ErrorCode.QUANTITY_EXCEEDS_ALLOCATION


# ----------------------------------------------------------------------
# Funding / network
# ----------------------------------------------------------------------

class InsufficientFundsError(MintKitError):
    code = ErrorCode.INSUFFICIENT_FUNDS


class WrongNetworkError(MintKitError):
    code = ErrorCode.WRONG_NETWORK


class UnsupportedNetworkError(MintKitError):
    code = ErrorCode.UNSUPPORTED_NETWORK


# ----------------------------------------------------------------------
# Contract / API
# ----------------------------------------------------------------------

class ContractReadError(MintKitError):
    code = ErrorCode.CONTRACT_ERROR


class AllowlistProviderError(MintKitError):
    code = ErrorCode.API_ERROR


class GasEstimationError(MintKitError):
    code = ErrorCode.GAS_ESTIMATION_FAILED


class ReadTimeoutError(ContractReadError):
    code = ErrorCode.TIMEOUT


# ----------------------------------------------------------------------
# Transactions
# ----------------------------------------------------------------------

class TransactionFailedError(MintKitError):
    code = ErrorCode.TRANSACTION_FAILED


class TransactionRevertedError(TransactionFailedError):
    code = ErrorCode.TRANSACTION_REVERTED


class TransactionRejectedError(TransactionFailedError):
    code = ErrorCode.TRANSACTION_REJECTED


class PurchaseExecutionError(TransactionFailedError):
    """
    Raised by the step executor when a step fails.

    ``receipts`` holds the receipts of the steps that already confirmed and
    ``order`` the partial/failed order built from them, so the caller can
    re-prepare and resume from ``step_id``.
    """

    def __init__(
        self,
        message: str,
        step_id: str,
        receipts: Sequence["TransactionReceipt"],
        order: "Order",
        cause: Optional[BaseException] = None,
    ):
        code = cause.code if isinstance(cause, TransactionFailedError) else None
        super().__init__(
            message,
            details={"step": step_id, "receipts": [r.tx_hash for r in receipts]},
            code=code,
        )
        self.step_id = step_id
        self.receipts = tuple(receipts)
        self.order = order
        self.cause = cause


_REJECTION_MARKERS = (
    "user rejected",
    "user denied",
    "rejected by user",
    "request rejected",
)


def is_user_rejection(exc: BaseException) -> bool:
    """EIP-1193 code 4001 or a wallet message saying the user declined."""
    if getattr(exc, "code", None) == 4001:
        return True
    text = str(exc).lower()
    return any(marker in text for marker in _REJECTION_MARKERS)
