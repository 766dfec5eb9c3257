"""Withdrawal sizing: pull back exactly the shortfall.

Tests:
- Worked example: 50 idle, 300 required withdraws 250
- No withdrawal when idle holdings already cover the requirement
- A lending service that cannot pay fails the whole operation
"""

import pytest

from liquid_hook.core.errors import InsufficientExternalLiquidity
from liquid_hook.core.events import AssetWithdrawn
from tests.fixtures.market_fixtures import fund_router, snapshot_market


def drain_to_idle(deployment, asset: str, idle: int) -> None:
    """Move router holdings out until exactly `idle` remain un-deposited."""
    router = deployment.router
    excess = router.idle_balance(asset) - idle
    deployment.ledger.transfer(asset, router.address, "elsewhere", excess)


class TestWithdrawalSizing:
    """Core withdrawal arithmetic."""

    def test_withdraws_shortfall(self, market):
        router = market.router
        fund_router(market, "Y", 1000)
        router.stake_available("Y")
        drain_to_idle(market, "Y", 50)

        withdrawn = router.ensure_liquidity("Y", 300)

        assert withdrawn == 250
        assert router.idle_balance("Y") == 300
        assert router.deposited_balance("Y") == 550

    def test_withdrawal_emits_shortfall_event(self, market):
        router = market.router
        fund_router(market, "Y", 1000)
        router.stake_available("Y")
        drain_to_idle(market, "Y", 50)
        router.ensure_liquidity("Y", 300)

        event = router.events.last()
        assert isinstance(event, AssetWithdrawn)
        assert (event.asset, event.amount) == ("Y", 250)

    def test_enough_idle_is_noop(self, market):
        router = market.router
        fund_router(market, "Y", 1000)
        router.stake_available("Y")
        n_events = len(router.events)

        assert router.ensure_liquidity("Y", 200) == 0
        assert router.ensure_liquidity("Y", 0) == 0
        assert router.idle_balance("Y") == 200
        assert len(router.events) == n_events

    def test_negative_requirement_rejected(self, market):
        with pytest.raises(ValueError):
            market.router.ensure_liquidity("Y", -1)

    @pytest.mark.parametrize("required", [201, 500, 999, 1000])
    def test_idle_covers_requirement_afterwards(self, market, required):
        router = market.router
        fund_router(market, "Y", 1000)
        router.stake_available("Y")
        router.ensure_liquidity("Y", required)

        assert router.idle_balance("Y") == required
        assert router.calculate_withdrawable_amount("Y") == 1000


class TestInsufficientExternalLiquidity:
    """The lending service's failure is propagated and undoes everything."""

    def test_requirement_above_position_fails_edge_case(self, market):
        router = market.router
        fund_router(market, "Y", 1000)
        router.stake_available("Y")
        before = snapshot_market(market)

        with pytest.raises(InsufficientExternalLiquidity) as exc_info:
            router.ensure_liquidity("Y", 1001)

        assert exc_info.value.requested == 801
        assert exc_info.value.available == 800
        assert snapshot_market(market) == before

    def test_lent_out_liquidity_is_unavailable(self, market):
        """Funds borrowed from the lending service cannot be withdrawn."""
        router = market.router
        fund_router(market, "Y", 1000)
        router.stake_available("Y")
        market.lending.utilize("Y", 700, "borrower")
        before = snapshot_market(market)

        with pytest.raises(InsufficientExternalLiquidity):
            router.ensure_liquidity("Y", 500)

        assert snapshot_market(market) == before
        assert router.ensure_liquidity("Y", 300) == 100

    def test_router_usable_after_failure(self, market):
        router = market.router
        fund_router(market, "Y", 1000)
        router.stake_available("Y")

        with pytest.raises(InsufficientExternalLiquidity):
            router.ensure_liquidity("Y", 5000)

        assert router.ensure_liquidity("Y", 400) == 200
