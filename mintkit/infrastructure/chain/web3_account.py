"""
Local private-key account.

Signs with eth-account and broadcasts through AsyncWeb3. Intended for
bots and scripts; browser wallets implement the ``Account`` protocol
themselves.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from eth_account import Account as EthAccount
from eth_utils import to_checksum_address

from mintkit.config import settings
from mintkit.domain.errors import TransactionFailedError, UnsupportedNetworkError
from mintkit.domain.models.money import Money
from mintkit.domain.models.purchase import TransactionRequest
from mintkit.infrastructure.chain.tokens import TokenMetadataResolver
from mintkit.infrastructure.chain.web3_reader import Web3ChainReader

logger = logging.getLogger(__name__)


class LocalKeyAccount:
    def __init__(
        self,
        private_key: str,
        reader: Web3ChainReader,
        network_id: int,
        receipt_timeout: Optional[float] = None,
        confirmation_poll_interval: float = 2.0,
    ):
        self._account = EthAccount.from_key(private_key)
        self.reader = reader
        self.tokens = TokenMetadataResolver(reader)
        self.network_id = network_id
        self.receipt_timeout = (
            settings.TX_RECEIPT_TIMEOUT_SECONDS if receipt_timeout is None else receipt_timeout
        )
        self.confirmation_poll_interval = confirmation_poll_interval

    def __repr__(self) -> str:
        return f"LocalKeyAccount({self._account.address})"

    @property
    def address(self) -> str:
        return self._account.address

    async def get_address(self) -> str:
        return self._account.address

    async def get_connected_network_id(self) -> int:
        return self.network_id

    async def switch_network(self, network_id: int) -> None:
        if not self.reader.serves(network_id):
            raise UnsupportedNetworkError(
                f"No RPC url configured for network {network_id}",
                details={"network_id": network_id},
            )
        self.network_id = network_id

    async def get_balance(self, network_id: int, token: Optional[str] = None) -> Money:
        raw = await self.reader.get_balance(network_id, self._account.address, token)
        return await self.tokens.money(network_id, token, raw)

    async def send_transaction_with_confirmation(
        self, request: TransactionRequest, confirmations: int = 1
    ) -> Dict[str, Any]:
        if request.network_id != self.network_id:
            raise TransactionFailedError(
                f"Account is on network {self.network_id}, request targets {request.network_id}"
            )
        w3 = self.reader.client(request.network_id)
        sender = self._account.address

        nonce, gas_price = await asyncio.gather(
            w3.eth.get_transaction_count(sender, "pending"),
            w3.eth.gas_price,
        )
        tx = {
            "from": sender,
            "to": to_checksum_address(request.to),
            "data": request.data,
            "value": request.value,
            "gasPrice": gas_price,
            "nonce": nonce,
            "chainId": request.network_id,
        }
        if request.gas_limit is not None:
            tx["gas"] = request.gas_limit
        else:
            tx["gas"] = await w3.eth.estimate_gas(tx)

        signed = self._account.sign_transaction(tx)
        tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
        logger.info("Sent tx %s on network %s", tx_hash.hex(), request.network_id)

        receipt = await w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        if confirmations > 1:
            target = receipt["blockNumber"] + confirmations - 1
            while await w3.eth.block_number < target:
                await asyncio.sleep(self.confirmation_poll_interval)

        return {
            "hash": bytes(tx_hash),
            "blockNumber": receipt["blockNumber"],
            "gasUsed": receipt["gasUsed"],
            "status": receipt["status"],
            "chainId": request.network_id,
        }
