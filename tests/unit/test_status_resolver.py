from datetime import timedelta

from conftest import NOW, claim_state

from mintkit.domain.models import ProductStatus
from mintkit.domain.services.status_resolver import resolve_status


def test_active_without_bounds():
    assert resolve_status(claim_state(), NOW) == ProductStatus.ACTIVE


def test_upcoming_before_start():
    state = claim_state(start_date=NOW + timedelta(hours=1))
    assert resolve_status(state, NOW) == ProductStatus.UPCOMING


def test_start_boundary_is_active():
    state = claim_state(start_date=NOW)
    assert resolve_status(state, NOW) == ProductStatus.ACTIVE


def test_ended_at_end_date():
    state = claim_state(end_date=NOW)
    assert resolve_status(state, NOW) == ProductStatus.ENDED


def test_sold_out_within_window():
    state = claim_state(
        total_minted=100,
        total_max=100,
        start_date=NOW - timedelta(days=1),
        end_date=NOW + timedelta(days=1),
    )
    assert resolve_status(state, NOW) == ProductStatus.SOLD_OUT


def test_sold_out_wins_over_ended():
    state = claim_state(total_minted=10, total_max=10, end_date=NOW - timedelta(days=1))
    assert resolve_status(state, NOW) == ProductStatus.SOLD_OUT


def test_upcoming_wins_over_sold_out():
    state = claim_state(total_minted=10, total_max=10, start_date=NOW + timedelta(days=1))
    assert resolve_status(state, NOW) == ProductStatus.UPCOMING


def test_unbounded_supply_never_sold_out():
    state = claim_state(total_minted=10 ** 9, total_max=None)
    assert resolve_status(state, NOW) == ProductStatus.ACTIVE


def test_pure_function():
    state = claim_state(total_minted=3, total_max=5, end_date=NOW + timedelta(minutes=5))
    results = {resolve_status(state, NOW) for _ in range(5)}
    assert results == {ProductStatus.ACTIVE}
