from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from mintkit.domain.errors import ContractReadError
from mintkit.domain.models import (
    ClaimState,
    MerkleEntry,
    Money,
    ProductFamily,
    ProductRef,
    TransactionRequest,
)
from mintkit.domain.models.money import ZERO_ADDRESS
from mintkit.services.product_service import ProductHandle

NETWORK_ID = 8453
CREATOR = "0x" + "11" * 20
EXTENSION = "0x" + "22" * 20
WALLET = "0x" + "33" * 20
USDC = "0x" + "44" * 20
RECEIVER = "0x" + "55" * 20
OTHER_WALLET = "0x" + "66" * 20

ZERO_ROOT = b"\x00" * 32
NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

ETH = 10 ** 18
MINT_FEE = 690_000_000_000_000          # 0.00069 ETH
MINT_FEE_MERKLE = 420_000_000_000_000   # 0.00042 ETH


def ts(dt: datetime) -> int:
    return int(dt.timestamp())


def edition_claim(
    total: int = 0,
    total_max: int = 0,
    wallet_max: int = 0,
    start: int = 0,
    end: int = 0,
    root: bytes = ZERO_ROOT,
    cost: int = 0,
    erc20: str = ZERO_ADDRESS,
    token_id: int = 7,
) -> tuple:
    """Raw ERC1155 edition ``getClaim`` tuple, in ABI order."""
    return (
        total, total_max, wallet_max, start, end, 1, root, "ipfs://claim",
        token_id, cost, RECEIVER, erc20, ZERO_ADDRESS,
    )


class FakeChainReader:
    """In-memory ChainReader keyed by (contract, function)."""

    def __init__(self):
        self.responses: Dict[Tuple[str, str], Any] = {}
        self.balances: Dict[Tuple[str, str], int] = {}
        self.gas_estimate = 100_000
        self.gas_error: Optional[Exception] = None
        self.native_balance_error: Optional[Exception] = None
        self.calls: List[Tuple[str, tuple]] = []

    def set(self, address: str, function_name: str, value: Any) -> None:
        self.responses[(address.lower(), function_name)] = value

    def set_balance(self, owner: str, amount: int, token: Optional[str] = None) -> None:
        self.balances[(owner.lower(), (token or "native").lower())] = amount

    def call_count(self, function_name: str) -> int:
        return sum(1 for name, _ in self.calls if name == function_name)

    async def get_chain_id(self, network_id: int) -> int:
        return network_id

    async def read_contract(self, network_id, address, abi, function_name, args=()):
        self.calls.append((function_name, tuple(args)))
        key = (address.lower(), function_name)
        if key not in self.responses:
            raise ContractReadError(f"no fake response for {function_name} on {address}")
        value = self.responses[key]
        if isinstance(value, Exception):
            raise value
        return value(*args) if callable(value) else value

    async def get_balance(self, network_id, address, token=None):
        self.calls.append(("balance", (address, token)))
        if token is None and self.native_balance_error is not None:
            raise self.native_balance_error
        return self.balances.get((address.lower(), (token or "native").lower()), 0)

    async def estimate_gas(self, network_id, request, sender):
        self.calls.append(("estimate_gas", (request.to,)))
        if self.gas_error is not None:
            raise self.gas_error
        return self.gas_estimate


class FakeAllowlistProvider:
    def __init__(self):
        self.entries: Dict[Tuple[int, str], List[MerkleEntry]] = {}
        self.requests = 0

    def add(self, tree_id: int, wallet: str, entries: List[MerkleEntry]) -> None:
        self.entries[(tree_id, wallet.lower())] = entries

    async def get_merkle_entries(self, merkle_tree_id: int, wallet: str) -> List[MerkleEntry]:
        self.requests += 1
        return list(self.entries.get((merkle_tree_id, wallet.lower()), []))


class FakeAccount:
    """
    Wallet double. ``outcomes`` maps the n-th send to an exception or the
    string ``"reverted"``; ``on_send`` lets a test mutate chain state.
    """

    def __init__(self, address: str = WALLET, network_id: int = NETWORK_ID):
        self.address = address
        self.network_id = network_id
        self.sent: List[TransactionRequest] = []
        self.confirmations: List[int] = []
        self.outcomes: Dict[int, Any] = {}
        self.switch_calls: List[int] = []
        self.ignore_switch = False
        self.on_send: Optional[Callable[[TransactionRequest], None]] = None
        self.native_balance = 0

    async def get_address(self) -> str:
        return self.address

    async def get_connected_network_id(self) -> int:
        return self.network_id

    async def switch_network(self, network_id: int) -> None:
        self.switch_calls.append(network_id)
        if not self.ignore_switch:
            self.network_id = network_id

    async def get_balance(self, network_id: int, token: Optional[str] = None) -> Money:
        return Money.native(self.native_balance, network_id)

    async def send_transaction_with_confirmation(self, request, confirmations=1):
        index = len(self.sent)
        self.sent.append(request)
        self.confirmations.append(confirmations)
        outcome = self.outcomes.get(index)
        if isinstance(outcome, Exception):
            raise outcome
        if self.on_send is not None:
            self.on_send(request)
        return {
            "hash": "0x" + f"{index + 1:064x}",
            "blockNumber": 100 + index,
            "gasUsed": 50_000,
            "status": 0 if outcome == "reverted" else 1,
        }


def edition_product(merkle_tree_id: Optional[int] = None) -> ProductRef:
    return ProductRef(
        family=ProductFamily.EDITION,
        network_id=NETWORK_ID,
        creator_contract=CREATOR,
        extension_address=EXTENSION,
        instance_id=42,
        merkle_tree_id=merkle_tree_id,
        name="Test Edition",
    )


def configure_edition(reader: FakeChainReader, claim: tuple) -> None:
    reader.set(EXTENSION, "getClaim", claim)
    reader.set(EXTENSION, "MINT_FEE", MINT_FEE)
    reader.set(EXTENSION, "MINT_FEE_MERKLE", MINT_FEE_MERKLE)
    reader.set(EXTENSION, "getTotalMints", 0)
    reader.set(EXTENSION, "checkMintIndices", lambda creator, instance, indices: [False] * len(indices))


def configure_usdc(reader: FakeChainReader, allowance: int = 0) -> None:
    reader.set(USDC, "decimals", 6)
    reader.set(USDC, "symbol", "USDC")
    reader.set(USDC, "allowance", allowance)


@pytest.fixture()
def reader() -> FakeChainReader:
    return FakeChainReader()


@pytest.fixture()
def allowlist() -> FakeAllowlistProvider:
    return FakeAllowlistProvider()


@pytest.fixture()
def account() -> FakeAccount:
    return FakeAccount()


@pytest.fixture()
def make_handle(reader, allowlist):
    def _make(product: Optional[ProductRef] = None, clock=lambda: NOW) -> ProductHandle:
        return ProductHandle(
            product or edition_product(),
            reader,
            allowlist=allowlist,
            clock=clock,
        )
    return _make


def claim_state(**overrides) -> ClaimState:
    """Native-priced active claim with no limits; override any field."""
    fields = dict(
        total_minted=0,
        total_max=None,
        wallet_max=0,
        start_date=None,
        end_date=None,
        allowlist_root=None,
        unit_cost=Money.native(50_000_000_000_000_000, NETWORK_ID),
        platform_fee_per_unit=Money.native(MINT_FEE, NETWORK_ID),
        payment_receiver=RECEIVER,
    )
    fields.update(overrides)
    return ClaimState(**fields)
