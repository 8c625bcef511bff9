"""
Edition claims (ERC721 / ERC1155 lazy claim extensions).
"""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence

from mintkit.domain.families.base import DecodedClaim, ProductFamilyStrategy
from mintkit.domain.models.claim import MerkleEntry, normalize_root, timestamp_to_datetime
from mintkit.domain.models.product import ProductFamily, ProductRef, PurchasePayload, TokenSpec
from mintkit.domain.models.money import ZERO_ADDRESS
from mintkit.infrastructure.chain.abis import EDITION_721_ABI, EDITION_1155_ABI
from mintkit.infrastructure.chain.encoding import encode_mint_proxy
from mintkit.infrastructure.chain.types import ChainReader


class EditionStrategy(ProductFamilyStrategy):
    family = ProductFamily.EDITION
    fee_functions = ("MINT_FEE", "MINT_FEE_MERKLE")
    supports_allowlist = True
    supports_recipient = True

    def abi(self, product: ProductRef) -> List[dict]:
        return EDITION_721_ABI if product.spec == TokenSpec.ERC721 else EDITION_1155_ABI

    def decode_claim(self, product: ProductRef, raw: Sequence[Any]) -> DecodedClaim:
        if len(raw) != 13:
            raise ValueError(f"Unexpected edition claim shape ({len(raw)} fields)")
        if product.spec == TokenSpec.ERC721:
            (total, total_max, wallet_max, start, end, _storage, identical,
             root, location, cost, receiver, erc20, _signer) = raw
            extra = {"identical": identical, "location": location}
        else:
            (total, total_max, wallet_max, start, end, _storage,
             root, location, token_id, cost, receiver, erc20, _signer) = raw
            extra = {"token_id": int(token_id), "location": location}

        return DecodedClaim(
            total_minted=int(total),
            total_max=int(total_max) or None,
            wallet_max=int(wallet_max),
            start_date=timestamp_to_datetime(start),
            end_date=timestamp_to_datetime(end),
            allowlist_root=normalize_root(root),
            unit_cost=int(cost),
            payment_token=None if erc20.lower() == ZERO_ADDRESS else erc20,
            payment_receiver=receiver,
            extra=extra,
        )

    def select_fee(self, decoded: DecodedClaim, fees: Mapping[str, int]) -> int:
        if decoded.allowlist_root is not None:
            return int(fees["MINT_FEE_MERKLE"])
        return int(fees["MINT_FEE"])

    async def read_prior_mints(
        self, reader: ChainReader, product: ProductRef, wallet: str
    ) -> int:
        minted = await reader.read_contract(
            product.network_id,
            product.extension_address,
            self.abi(product),
            "getTotalMints",
            [wallet, product.creator_contract, product.instance_id],
        )
        return int(minted)

    async def check_used_indices(
        self, reader: ChainReader, product: ProductRef, indices: Sequence[int]
    ) -> List[bool]:
        if not indices:
            return []
        used = await reader.read_contract(
            product.network_id,
            product.extension_address,
            self.abi(product),
            "checkMintIndices",
            [product.creator_contract, product.instance_id, list(indices)],
        )
        return [bool(flag) for flag in used]

    def encode_mint(
        self,
        product: ProductRef,
        payload: PurchasePayload,
        recipient: str,
        proofs: Sequence[MerkleEntry] = (),
    ) -> str:
        selected = list(proofs)[: payload.quantity]
        return encode_mint_proxy(
            product.creator_contract,
            product.instance_id,
            payload.quantity,
            [entry.index for entry in selected],
            [list(entry.proof) for entry in selected],
            recipient,
        )
