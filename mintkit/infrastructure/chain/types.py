"""
Chain collaborator protocols for type hints.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence

from mintkit.domain.models.claim import MerkleEntry
from mintkit.domain.models.money import Money
from mintkit.domain.models.purchase import TransactionRequest


class ChainReader(Protocol):
    """Read-only access to one or more networks."""

    async def get_chain_id(self, network_id: int) -> int:
        ...

    async def read_contract(
        self,
        network_id: int,
        address: str,
        abi: List[dict],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> Any:
        ...

    async def get_balance(
        self, network_id: int, address: str, token: Optional[str] = None
    ) -> int:
        ...

    async def estimate_gas(
        self, network_id: int, request: TransactionRequest, sender: str
    ) -> int:
        ...


class Account(Protocol):
    """
    Caller-supplied wallet. Signing happens behind this interface.

    ``send_transaction_with_confirmation`` returns a receipt-like mapping
    with at least ``hash`` and ideally ``blockNumber``, ``gasUsed``,
    ``status`` and ``chainId``.
    """

    async def get_address(self) -> str:
        ...

    async def get_connected_network_id(self) -> int:
        ...

    async def switch_network(self, network_id: int) -> None:
        ...

    async def get_balance(self, network_id: int, token: Optional[str] = None) -> Money:
        ...

    async def send_transaction_with_confirmation(
        self, request: TransactionRequest, confirmations: int = 1
    ) -> Dict[str, Any]:
        ...


class AllowlistProvider(Protocol):
    async def get_merkle_entries(self, merkle_tree_id: int, wallet: str) -> List[MerkleEntry]:
        ...
