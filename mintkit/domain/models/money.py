"""
DOMAIN MODEL - MONEY

Immutable, token-tagged on-chain amount. All arithmetic happens on the raw
integer value; ``formatted`` is derived exactly (no floats). Amounts of
different tokens never mix: grouping by ``token_id`` has to happen first.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional

from mintkit.domain.errors import CurrencyMismatchError, InvalidInputError

NATIVE_TOKEN = "native"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def format_units(raw_value: int, decimals: int) -> str:
    """Exact decimal rendering of ``raw_value / 10**decimals``."""
    if decimals == 0:
        return str(raw_value)
    whole, fraction = divmod(raw_value, 10 ** decimals)
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0") or "0"
    return f"{whole}.{fraction_str}"


def parse_units(amount: str, decimals: int) -> int:
    """Inverse of ``format_units``; rejects more precision than ``decimals``."""
    value = Decimal(amount)
    scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise InvalidInputError(
            f"{amount} has more than {decimals} decimal places",
            details={"amount": amount, "decimals": decimals},
        )
    return int(scaled)


@dataclass(frozen=True)
class Money:
    raw_value: int
    decimals: int
    token_id: str
    symbol: str
    network_id: int
    usd: Optional[Decimal] = None

    def __post_init__(self):
        if not isinstance(self.raw_value, int) or isinstance(self.raw_value, bool):
            raise InvalidInputError("Money raw_value must be an int")
        if self.raw_value < 0:
            raise InvalidInputError(
                "Money cannot be negative", details={"raw_value": self.raw_value}
            )
        if self.decimals < 0 or self.decimals > 255:
            raise InvalidInputError("decimals must fit in a uint8")

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def native(cls, raw_value: int, network_id: int, symbol: str = "ETH") -> "Money":
        return cls(raw_value, 18, NATIVE_TOKEN, symbol, network_id)

    def with_value(self, raw_value: int) -> "Money":
        """Same currency, different amount; USD snapshot is dropped."""
        return replace(self, raw_value=raw_value, usd=None)

    def with_usd(self, usd: Optional[Decimal]) -> "Money":
        return replace(self, usd=usd)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def formatted(self) -> str:
        return format_units(self.raw_value, self.decimals)

    @property
    def is_native(self) -> bool:
        return self.token_id == NATIVE_TOKEN

    @property
    def is_erc20(self) -> bool:
        return not self.is_native

    @property
    def is_zero(self) -> bool:
        return self.raw_value == 0

    @property
    def erc20_address(self) -> str:
        """Contract address for ERC-20 amounts, zero address for native."""
        return ZERO_ADDRESS if self.is_native else self.token_id

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def is_same_currency(self, other: "Money") -> bool:
        return (
            self.token_id.lower() == other.token_id.lower()
            and self.decimals == other.decimals
            and self.network_id == other.network_id
        )

    def _require_same_currency(self, other: "Money", op: str) -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Cannot {op} Money and {type(other).__name__}")
        if not self.is_same_currency(other):
            raise CurrencyMismatchError(
                f"Cannot {op} different currencies: {self.symbol} and {other.symbol}",
                details={"left": self.token_id, "right": other.token_id},
            )

    def add(self, other: "Money") -> "Money":
        self._require_same_currency(other, "add")
        usd = None
        if self.usd is not None and other.usd is not None:
            usd = self.usd + other.usd
        return replace(self, raw_value=self.raw_value + other.raw_value, usd=usd)

    def subtract(self, other: "Money") -> "Money":
        self._require_same_currency(other, "subtract")
        if other.raw_value > self.raw_value:
            raise InvalidInputError(
                f"Cannot subtract {other.formatted} from {self.formatted}: result would be negative"
            )
        usd = None
        if self.usd is not None and other.usd is not None:
            usd = self.usd - other.usd
        return replace(self, raw_value=self.raw_value - other.raw_value, usd=usd)

    def multiply_int(self, factor: int) -> "Money":
        if not isinstance(factor, int) or isinstance(factor, bool) or factor < 0:
            raise InvalidInputError(
                "Money can only be multiplied by a non-negative integer",
                details={"factor": factor},
            )
        usd = self.usd * factor if self.usd is not None else None
        return replace(self, raw_value=self.raw_value * factor, usd=usd)

    def divide_int(self, divisor: int) -> "Money":
        """Floor division, so no fractional base units are created."""
        if not isinstance(divisor, int) or isinstance(divisor, bool) or divisor <= 0:
            raise InvalidInputError(
                "Divisor must be a positive integer", details={"divisor": divisor}
            )
        usd = (self.usd / divisor).quantize(Decimal("0.01")) if self.usd is not None else None
        return replace(self, raw_value=self.raw_value // divisor, usd=usd)

    def __add__(self, other: "Money") -> "Money":
        return self.add(other)

    def __sub__(self, other: "Money") -> "Money":
        return self.subtract(other)

    def __mul__(self, factor: int) -> "Money":
        return self.multiply_int(factor)

    __rmul__ = __mul__

    # ------------------------------------------------------------------
    # Comparisons
    # ------------------------------------------------------------------

    def compare_to(self, other: "Money") -> int:
        self._require_same_currency(other, "compare")
        if self.raw_value < other.raw_value:
            return -1
        if self.raw_value > other.raw_value:
            return 1
        return 0

    def __lt__(self, other: "Money") -> bool:
        return self.compare_to(other) < 0

    def __le__(self, other: "Money") -> bool:
        return self.compare_to(other) <= 0

    def __gt__(self, other: "Money") -> bool:
        return self.compare_to(other) > 0

    def __ge__(self, other: "Money") -> bool:
        return self.compare_to(other) >= 0

    def equals(self, other: "Money") -> bool:
        """Value equality, ignoring the USD snapshot."""
        return self.is_same_currency(other) and self.raw_value == other.raw_value

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def to_display_string(self, include_usd: bool = False) -> str:
        base = f"{self.formatted} {self.symbol}"
        if include_usd and self.usd is not None:
            return f"{base} (${self.usd.quantize(Decimal('0.01'))})"
        return base

    def __str__(self) -> str:
        return self.to_display_string()
