"""
STEP BUILDER
Cost breakdown + wallet → ordered transaction steps

RESPONSIBILITIES:
- Check balances for every token the purchase spends
- Add one exact-amount approval per ERC-20 whose allowance is short
- Add exactly one mint step, always last
- Attach buffered gas limits

RULES:
- ERC-20 tokens ordered by address, native last
- Approvals go to the extension contract (the spender of the mint call)
- Steps are specifications; nothing is sent here
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from mintkit.domain.errors import GasEstimationError, InsufficientFundsError
from mintkit.domain.families import get_strategy
from mintkit.domain.models.allocation import AllocationResult
from mintkit.domain.models.money import NATIVE_TOKEN, Money
from mintkit.domain.models.product import ProductRef, PurchasePayload
from mintkit.domain.models.purchase import (
    CostBreakdown,
    GasBuffer,
    StepExecutorFn,
    StepKind,
    TransactionReceipt,
    TransactionRequest,
    TransactionStep,
)
from mintkit.domain.services.gas import (
    apply_gas_buffer,
    estimate_gas,
    estimate_gas_limit,
    fallback_gas,
)
from mintkit.infrastructure.chain.abis import ERC20_ABI
from mintkit.infrastructure.chain.encoding import encode_approve
from mintkit.infrastructure.chain.types import Account, ChainReader
from mintkit.utils.validation import normalize_address

logger = logging.getLogger(__name__)

MINT_STEP_ID = "mint"


def approve_step_id(token_address: str) -> str:
    return f"approve-{token_address.lower()}"


class StepBuilder:
    def __init__(self, reader: ChainReader):
        self.reader = reader

    async def build_steps(
        self,
        product: ProductRef,
        wallet: str,
        cost: CostBreakdown,
        payload: PurchasePayload,
        gas_buffer: Optional[GasBuffer] = None,
        allocation: Optional[AllocationResult] = None,
        recipient: Optional[str] = None,
        account: Optional[Account] = None,
    ) -> Tuple[TransactionStep, ...]:
        """
        ``wallet`` pays (balances, allowances, gas); ``recipient`` receives the
        tokens and defaults to ``wallet``. With an ``account`` the native
        balance is asked from the wallet itself.
        """
        wallet = normalize_address(wallet, "wallet")
        recipient = normalize_address(recipient, "recipient") if recipient else wallet
        strategy = get_strategy(product.family)
        strategy.check_payload(payload)

        erc20_costs = sorted(cost.erc20_totals, key=lambda m: m.token_id.lower())
        native_cost = cost.per_token.get(NATIVE_TOKEN)

        reads = [self._erc20_position(product, wallet, amount) for amount in erc20_costs]
        if native_cost is not None:
            reads.append(self._check_native_balance(product, wallet, native_cost, account))
        positions = (await asyncio.gather(*reads))[: len(erc20_costs)]

        steps: List[TransactionStep] = []
        for amount, (balance, allowance) in zip(erc20_costs, positions):
            if balance < amount.raw_value:
                raise InsufficientFundsError(
                    f"Insufficient {amount.symbol}: need {amount.formatted}, "
                    f"have {amount.with_value(balance).formatted}",
                    details={
                        "token": amount.token_id,
                        "required": amount.raw_value,
                        "available": balance,
                    },
                )
            if allowance >= amount.raw_value:
                logger.debug("Allowance for %s already covers %s", amount.symbol, amount.formatted)
                continue
            steps.append(await self._approve_step(product, wallet, amount, gas_buffer))

        proofs = allocation.proofs if allocation is not None else ()
        steps.append(
            await self._mint_step(
                product, wallet, recipient, cost, payload, gas_buffer, proofs,
                approvals_pending=bool(steps),
            )
        )
        logger.info(
            "Built %s step(s) for %s x%s: %s",
            len(steps), product.key, payload.quantity, [s.id for s in steps],
        )
        return tuple(steps)

    # ------------------------------------------------------------------
    # Balance reads
    # ------------------------------------------------------------------

    async def _erc20_position(
        self, product: ProductRef, wallet: str, amount: Money
    ) -> Tuple[int, int]:
        """(balance, allowance to the extension) for one ERC-20."""
        balance, allowance = await asyncio.gather(
            self.reader.get_balance(product.network_id, wallet, amount.token_id),
            self.reader.read_contract(
                product.network_id,
                amount.token_id,
                ERC20_ABI,
                "allowance",
                [wallet, product.extension_address],
            ),
        )
        return int(balance), int(allowance)

    async def _check_native_balance(
        self,
        product: ProductRef,
        wallet: str,
        amount: Money,
        account: Optional[Account] = None,
    ) -> None:
        try:
            if account is not None:
                balance = (await account.get_balance(product.network_id)).raw_value
            else:
                balance = await self.reader.get_balance(product.network_id, wallet)
        except Exception as exc:
            logger.warning(
                "Could not read %s balance of %s, skipping the check: %s",
                amount.symbol, wallet, exc,
            )
            return
        if amount.raw_value > balance:
            raise InsufficientFundsError(
                f"Insufficient {amount.symbol}: need {amount.formatted}, "
                f"have {amount.with_value(int(balance)).formatted}",
                details={"token": NATIVE_TOKEN, "required": amount.raw_value, "available": balance},
            )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _approve_step(
        self,
        product: ProductRef,
        wallet: str,
        amount: Money,
        gas_buffer: Optional[GasBuffer],
    ) -> TransactionStep:
        request = TransactionRequest(
            to=amount.token_id,
            data=encode_approve(product.extension_address, amount.raw_value),
            network_id=product.network_id,
        )
        gas_limit = await estimate_gas_limit(
            self.reader, request, wallet, StepKind.APPROVE, gas_buffer
        )
        request = replace(request, gas_limit=gas_limit)
        step_id = approve_step_id(amount.token_id)
        return TransactionStep(
            id=step_id,
            kind=StepKind.APPROVE,
            description=f"Approve {amount.formatted} {amount.symbol}",
            request=request,
            executor=self._executor(step_id, StepKind.APPROVE, request, gas_buffer),
            cost=amount,
        )

    async def _mint_step(
        self,
        product: ProductRef,
        wallet: str,
        recipient: str,
        cost: CostBreakdown,
        payload: PurchasePayload,
        gas_buffer: Optional[GasBuffer],
        proofs: Sequence,
        approvals_pending: bool,
    ) -> TransactionStep:
        strategy = get_strategy(product.family)
        request = TransactionRequest(
            to=product.extension_address,
            data=strategy.encode_mint(product, payload, recipient, proofs),
            network_id=product.network_id,
            value=cost.native_total,
        )
        if approvals_pending:
            # the mint cannot simulate until the allowance exists
            gas_limit = apply_gas_buffer(fallback_gas(StepKind.MINT), gas_buffer)
        else:
            gas_limit = await estimate_gas_limit(
                self.reader, request, wallet, StepKind.MINT, gas_buffer
            )
        request = replace(request, gas_limit=gas_limit)
        return TransactionStep(
            id=MINT_STEP_ID,
            kind=StepKind.MINT,
            description=f"Mint {payload.quantity} x {product.name or product.key}",
            request=request,
            executor=self._executor(MINT_STEP_ID, StepKind.MINT, request, gas_buffer),
            cost=cost.per_token.get(NATIVE_TOKEN),
        )

    def _executor(
        self,
        step_id: str,
        kind: StepKind,
        request: TransactionRequest,
        gas_buffer: Optional[GasBuffer],
    ) -> StepExecutorFn:
        reader = self.reader

        async def run(account: Account, confirmations: int) -> TransactionReceipt:
            sender = await account.get_address()
            try:
                gas_limit = apply_gas_buffer(
                    await estimate_gas(reader, request, sender), gas_buffer
                )
            except GasEstimationError as exc:
                gas_limit = request.gas_limit or apply_gas_buffer(fallback_gas(kind), gas_buffer)
                logger.warning(
                    "Re-estimating gas for %s failed, keeping %s: %s",
                    step_id, gas_limit, exc.__cause__,
                )
            tx = replace(request, gas_limit=gas_limit)
            raw = await account.send_transaction_with_confirmation(tx, confirmations)
            return TransactionReceipt.from_raw(raw, step_id, request.network_id)

        return run
