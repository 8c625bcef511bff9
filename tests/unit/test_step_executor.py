"""
Unit Tests for StepExecutor
"""

import pytest

from conftest import NETWORK_ID, WALLET, FakeAccount, claim_state, edition_product

from mintkit.domain.errors import (
    ErrorCode,
    InvalidInputError,
    PurchaseExecutionError,
    TransactionRejectedError,
    TransactionRevertedError,
    WrongNetworkError,
)
from mintkit.domain.models import (
    OrderStatus,
    PreparedPurchase,
    StepEventKind,
    StepKind,
    TransactionReceipt,
    TransactionRequest,
    TransactionStep,
)
from mintkit.domain.services.cost_engine import compute_cost
from mintkit.domain.services.step_executor import StepExecutor, ensure_connected_network


class UserRejected(Exception):
    code = 4001


def sending_step(step_id: str, kind: StepKind = StepKind.MINT) -> TransactionStep:
    request = TransactionRequest(to="0x" + "22" * 20, data="0x", network_id=NETWORK_ID)

    async def run(account, confirmations):
        raw = await account.send_transaction_with_confirmation(request, confirmations)
        return TransactionReceipt.from_raw(raw, step_id, NETWORK_ID)

    return TransactionStep(step_id, kind, step_id, request, run)


def prepared(*step_ids: str) -> PreparedPurchase:
    steps = [
        sending_step(step_id, StepKind.MINT if step_id == "mint" else StepKind.APPROVE)
        for step_id in step_ids
    ]
    return PreparedPurchase(
        product=edition_product(),
        buyer=WALLET,
        quantity=1,
        cost=compute_cost(claim_state(), 1),
        steps=tuple(steps),
    )


def fast_executor() -> StepExecutor:
    return StepExecutor(network_max_attempts=2, network_poll_interval=0)


@pytest.mark.asyncio
async def test_executes_steps_in_order(account):
    order = await fast_executor().execute(prepared("approve-a", "mint"), account)

    assert order.status == OrderStatus.COMPLETED
    assert [r.step_id for r in order.receipts] == ["approve-a", "mint"]
    assert order.mint_receipt.step_id == "mint"
    assert order.buyer_address == WALLET
    assert len(account.sent) == 2


@pytest.mark.asyncio
async def test_event_sequence(account):
    events = [e async for e in fast_executor().stream(prepared("approve-a", "mint"), account)]
    assert [(e.step_id, e.kind) for e in events] == [
        ("approve-a", StepEventKind.STARTED),
        ("approve-a", StepEventKind.CONFIRMING),
        ("approve-a", StepEventKind.COMPLETED),
        ("mint", StepEventKind.STARTED),
        ("mint", StepEventKind.CONFIRMING),
        ("mint", StepEventKind.COMPLETED),
    ]
    assert {e.total for e in events} == {2}
    assert events[-1].receipt.tx_hash == "0x" + f"{2:064x}"


@pytest.mark.asyncio
async def test_confirmations_passed_to_wallet(account):
    await fast_executor().execute(prepared("mint"), account, confirmations=3)
    assert account.confirmations == [3]


@pytest.mark.asyncio
async def test_zero_confirmations_rejected(account):
    with pytest.raises(InvalidInputError):
        await fast_executor().execute(prepared("mint"), account, confirmations=0)
    assert account.sent == []


@pytest.mark.asyncio
async def test_switches_network_before_sending():
    account = FakeAccount(network_id=1)
    await fast_executor().execute(prepared("mint"), account)
    assert account.switch_calls == [NETWORK_ID]
    assert len(account.sent) == 1


@pytest.mark.asyncio
async def test_wrong_network_fails_first_step():
    account = FakeAccount(network_id=1)
    account.ignore_switch = True

    with pytest.raises(PurchaseExecutionError) as exc:
        await fast_executor().execute(prepared("mint"), account)

    assert isinstance(exc.value.cause, WrongNetworkError)
    assert exc.value.order.status == OrderStatus.FAILED
    assert exc.value.receipts == ()
    assert account.sent == []


@pytest.mark.asyncio
async def test_ensure_connected_network_gives_up():
    account = FakeAccount(network_id=1)
    account.ignore_switch = True
    with pytest.raises(WrongNetworkError) as exc:
        await ensure_connected_network(account, NETWORK_ID, max_attempts=3, poll_interval=0)
    assert exc.value.details == {"expected": NETWORK_ID, "actual": 1}


@pytest.mark.asyncio
async def test_revert_after_approval_is_partial(account):
    account.outcomes[1] = "reverted"

    with pytest.raises(PurchaseExecutionError) as exc:
        await fast_executor().execute(prepared("approve-a", "mint"), account)

    error = exc.value
    assert error.step_id == "mint"
    assert [r.step_id for r in error.receipts] == ["approve-a"]
    assert error.order.status == OrderStatus.PARTIAL
    assert error.order.failed_step_id == "mint"
    assert error.order.mint_receipt is None
    assert isinstance(error.cause, TransactionRevertedError)
    assert error.code == ErrorCode.TRANSACTION_REVERTED


@pytest.mark.asyncio
async def test_user_rejection_mapped(account):
    account.outcomes[0] = UserRejected("MetaMask Tx Signature: User denied transaction signature.")

    with pytest.raises(PurchaseExecutionError) as exc:
        await fast_executor().execute(prepared("mint"), account)

    assert isinstance(exc.value.cause, TransactionRejectedError)
    assert exc.value.code == ErrorCode.TRANSACTION_REJECTED
    assert isinstance(exc.value.__cause__, UserRejected)


@pytest.mark.asyncio
async def test_failed_event_emitted_before_raise(account):
    account.outcomes[0] = RuntimeError("nonce too low")
    events = []

    with pytest.raises(PurchaseExecutionError) as exc:
        async for event in fast_executor().stream(prepared("approve-a", "mint"), account):
            events.append(event)

    assert [e.kind for e in events] == [
        StepEventKind.STARTED, StepEventKind.CONFIRMING, StepEventKind.FAILED,
    ]
    assert events[-1].error is exc.value.cause
    assert exc.value.code == ErrorCode.TRANSACTION_FAILED
    # no later step was attempted
    assert len(account.sent) == 1


@pytest.mark.asyncio
async def test_account_must_match_buyer():
    stranger = FakeAccount(address="0x" + "99" * 20)
    with pytest.raises(InvalidInputError):
        await fast_executor().execute(prepared("mint"), stranger)
    assert stranger.sent == []


@pytest.mark.asyncio
async def test_stopping_iteration_sends_nothing_more(account):
    stream = fast_executor().stream(prepared("approve-a", "mint"), account)
    async for event in stream:
        if event.kind == StepEventKind.COMPLETED:
            break
    await stream.aclose()
    assert len(account.sent) == 1
