"""
Reader chain - try primary (wallet-backed) reader, then read-only fallbacks.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set, Tuple

from mintkit.config import settings
from mintkit.domain.errors import ContractReadError, ReadTimeoutError
from mintkit.domain.models.purchase import TransactionRequest
from mintkit.infrastructure.chain.types import ChainReader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamedReader:
    name: str
    reader: ChainReader


class TrackedChainReader:
    """Single reader that remembers it served each call."""

    def __init__(self, reader: ChainReader, name: str):
        self.reader = reader
        self.name = name
        self.last_sources: Dict[str, str] = {}

    def get_last_sources(self) -> Dict[str, str]:
        return dict(self.last_sources)

    async def get_chain_id(self, network_id: int) -> int:
        return await self.reader.get_chain_id(network_id)

    async def read_contract(
        self,
        network_id: int,
        address: str,
        abi: List[dict],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> Any:
        value = await self.reader.read_contract(network_id, address, abi, function_name, args)
        self.last_sources[function_name] = self.name
        return value

    async def get_balance(
        self, network_id: int, address: str, token: Optional[str] = None
    ) -> int:
        value = await self.reader.get_balance(network_id, address, token)
        self.last_sources["balance"] = self.name
        return value

    async def estimate_gas(
        self, network_id: int, request: TransactionRequest, sender: str
    ) -> int:
        value = await self.reader.estimate_gas(network_id, request, sender)
        self.last_sources["estimate_gas"] = self.name
        return value


class ChainedChainReader:
    """
    Each call runs against the readers in order, with a per-call timeout.

    A reader whose chain id does not match the requested network is skipped
    for that network. When every reader fails the last error is raised as
    ``ContractReadError`` (``ReadTimeoutError`` if the last failure was a
    timeout).
    """

    def __init__(self, readers: List[NamedReader], timeout: Optional[float] = None):
        if not readers:
            raise ValueError("At least one reader is required")
        self.readers = readers
        self.timeout = settings.READ_TIMEOUT_SECONDS if timeout is None else timeout
        self.last_sources: Dict[str, str] = {}
        self._network_match: Dict[Tuple[str, int], bool] = {}
        self._chain_id_failures: Set[Tuple[str, int]] = set()

    def get_last_sources(self) -> Dict[str, str]:
        return dict(self.last_sources)

    async def _serves(self, named: NamedReader, network_id: int) -> bool:
        key = (named.name, network_id)
        if key not in self._network_match:
            try:
                chain_id = await asyncio.wait_for(
                    named.reader.get_chain_id(network_id), timeout=self.timeout
                )
            except Exception as exc:
                # not cached: a wallet that reconnects gets asked again
                log = logger.debug if key in self._chain_id_failures else logger.warning
                log(
                    "Reader %s could not report chain id for network %s: %s",
                    named.name, network_id, exc,
                )
                self._chain_id_failures.add(key)
                return False
            self._network_match[key] = chain_id == network_id
            if chain_id != network_id:
                logger.info(
                    "Reader %s is on network %s, skipping it for %s",
                    named.name, chain_id, network_id,
                )
        return self._network_match[key]

    async def _call(
        self,
        network_id: int,
        label: str,
        call: Callable[[ChainReader], Awaitable[Any]],
    ) -> Any:
        last_error: Optional[Exception] = None
        for named in self.readers:
            if not await self._serves(named, network_id):
                continue
            try:
                value = await asyncio.wait_for(call(named.reader), timeout=self.timeout)
            except asyncio.TimeoutError as exc:
                last_error = exc
                logger.warning("%s timed out on reader %s", label, named.name)
                continue
            except Exception as exc:
                last_error = exc
                logger.warning("%s failed on reader %s: %s", label, named.name, exc)
                continue
            self.last_sources[label] = named.name
            return value

        details = {"network_id": network_id, "call": label}
        if last_error is None:
            raise ContractReadError(
                f"No reader available for network {network_id}", details=details
            )
        if isinstance(last_error, asyncio.TimeoutError):
            raise ReadTimeoutError(f"{label} timed out on every reader", details=details)
        raise ContractReadError(f"{label} failed: {last_error}", details=details) from last_error

    async def get_chain_id(self, network_id: int) -> int:
        for named in self.readers:
            if await self._serves(named, network_id):
                return network_id
        raise ContractReadError(
            f"No reader available for network {network_id}",
            details={"network_id": network_id},
        )

    async def read_contract(
        self,
        network_id: int,
        address: str,
        abi: List[dict],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> Any:
        return await self._call(
            network_id,
            function_name,
            lambda reader: reader.read_contract(network_id, address, abi, function_name, args),
        )

    async def get_balance(
        self, network_id: int, address: str, token: Optional[str] = None
    ) -> int:
        return await self._call(
            network_id,
            "balance",
            lambda reader: reader.get_balance(network_id, address, token),
        )

    async def estimate_gas(
        self, network_id: int, request: TransactionRequest, sender: str
    ) -> int:
        return await self._call(
            network_id,
            "estimate_gas",
            lambda reader: reader.estimate_gas(network_id, request, sender),
        )
