"""
PRODUCT FAMILY STRATEGY

The eligibility, cost and step logic is shared by every product family.
What differs per family lives here:
- which ABI / getter describes the claim and how to decode it
- which platform-fee getters exist and which one applies
- how prior mints of a wallet are counted
- whether allowlists exist and whether the mint can go to another address
- how the mint call is encoded
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from mintkit.domain.errors import InvalidInputError
from mintkit.domain.models.claim import MerkleEntry
from mintkit.domain.models.product import ProductFamily, ProductRef, PurchasePayload
from mintkit.infrastructure.chain.types import ChainReader


@dataclass(frozen=True)
class DecodedClaim:
    """Family-neutral view of a raw claim tuple; amounts are still raw ints."""
    total_minted: int
    total_max: Optional[int]
    wallet_max: int
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    allowlist_root: Optional[str]
    unit_cost: int
    payment_token: Optional[str]
    payment_receiver: str
    extra: Dict[str, Any] = field(default_factory=dict)


class ProductFamilyStrategy(ABC):
    family: ProductFamily
    claim_function: str = "getClaim"
    fee_functions: Tuple[str, ...] = ("MINT_FEE",)
    supports_allowlist: bool = False
    supports_recipient: bool = False

    @abstractmethod
    def abi(self, product: ProductRef) -> List[dict]:
        ...

    @abstractmethod
    def decode_claim(self, product: ProductRef, raw: Sequence[Any]) -> DecodedClaim:
        ...

    def select_fee(self, decoded: DecodedClaim, fees: Mapping[str, int]) -> int:
        """Per-unit platform fee in native base units."""
        return int(fees["MINT_FEE"])

    async def read_prior_mints(
        self, reader: ChainReader, product: ProductRef, wallet: str
    ) -> int:
        return 0

    async def check_used_indices(
        self, reader: ChainReader, product: ProductRef, indices: Sequence[int]
    ) -> List[bool]:
        """Used flags per index; families without an allowlist never consume one."""
        return [False] * len(indices)

    @abstractmethod
    def encode_mint(
        self,
        product: ProductRef,
        payload: PurchasePayload,
        recipient: str,
        proofs: Sequence[MerkleEntry] = (),
    ) -> str:
        ...

    def check_payload(self, payload: PurchasePayload) -> None:
        if payload.family != self.family:
            raise InvalidInputError(
                f"{payload.family.value} payload given for a {self.family.value} product",
                details={"expected": self.family.value, "got": payload.family.value},
            )

    async def read_claim(self, reader: ChainReader, product: ProductRef) -> Any:
        return await reader.read_contract(
            product.network_id,
            product.extension_address,
            self.abi(product),
            self.claim_function,
            [product.creator_contract, product.instance_id],
        )

    async def read_fee(self, reader: ChainReader, product: ProductRef, name: str) -> int:
        value = await reader.read_contract(
            product.network_id, product.extension_address, self.abi(product), name
        )
        return int(value)
