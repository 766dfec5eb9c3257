"""Deposit sizing: everything above the reserve goes to the lending service.

Tests:
- Worked example: 1000 held at 20% reserve deposits 800, keeps 200
- Repeated deposits with no balance change do nothing
- Boundary reserve ratios
- Minimum deposit threshold
- Rounding keeps the reserve floor
"""

import pytest

from liquid_hook.core.events import AssetStaked
from tests.fixtures.market_fixtures import create_market, fund_router


class TestDepositSizing:
    """Core deposit arithmetic."""

    def test_deposits_excess_over_reserve(self, market):
        router = market.router
        fund_router(market, "X", 1000)

        deposited = router.stake_available("X")

        assert deposited == 800
        assert router.idle_balance("X") == 200
        assert router.deposited_balance("X") == 800
        assert market.lending.available_liquidity("X") == 800

    def test_deposit_emits_event(self, market):
        fund_router(market, "X", 1000)
        market.router.stake_available("X")

        event = market.router.events.last()
        assert isinstance(event, AssetStaked)
        assert (event.asset, event.amount) == ("X", 800)

    def test_second_deposit_without_balance_change_is_noop(self, market):
        """Depositing again right after a deposit moves nothing.

        The reserve is a share of idle plus deposited holdings, which a
        deposit does not change.
        """
        router = market.router
        fund_router(market, "X", 1000)
        router.stake_available("X")
        n_events = len(router.events)

        assert router.stake_available("X") == 0
        assert router.idle_balance("X") == 200
        assert len(router.events) == n_events

    def test_reserve_measured_on_whole_position(self, market):
        """New funds top up idle holdings to the reserve of the whole position."""
        router = market.router
        fund_router(market, "X", 1000)
        router.stake_available("X")
        fund_router(market, "X", 500)

        # Position 1500, reserve 300, idle 700
        assert router.stake_available("X") == 400
        assert router.idle_balance("X") == 300
        assert router.deposited_balance("X") == 1200

    def test_idle_below_reserve_is_not_topped_up(self, market):
        """Deposit sizing never withdraws to restore the reserve."""
        router = market.router
        fund_router(market, "X", 1000)
        router.stake_available("X")
        market.ledger.transfer("X", router.address, "elsewhere", 150)

        assert router.stake_available("X") == 0
        assert router.idle_balance("X") == 50
        assert router.deposited_balance("X") == 800

    def test_nothing_to_deposit(self, market):
        router = market.router
        n_events = len(router.events)

        assert router.stake_available("X") == 0
        assert len(router.events) == n_events

    def test_deposit_leaves_other_currency_alone(self, market):
        fund_router(market, "X", 1000)
        fund_router(market, "Y", 500)
        market.router.stake_available("X")

        assert market.router.idle_balance("Y") == 500
        assert market.router.deposited_balance("Y") == 0


class TestReserveRatioBoundaries:
    """Reserve ratios at the ends of the allowed range."""

    def test_full_reserve_deposits_nothing_edge_case(self):
        deployment = create_market(reserve_ratio_bps=10_000)
        fund_router(deployment, "X", 1000)

        assert deployment.router.stake_available("X") == 0
        assert deployment.router.idle_balance("X") == 1000

    def test_zero_reserve_deposits_everything_edge_case(self):
        deployment = create_market(reserve_ratio_bps=0)
        fund_router(deployment, "X", 1000)

        assert deployment.router.stake_available("X") == 1000
        assert deployment.router.idle_balance("X") == 0

    def test_ratio_change_applies_to_next_deposit(self, market):
        router = market.router
        fund_router(market, "X", 1000)
        router.set_reserve_ratio(5000, caller=market.owner)

        assert router.stake_available("X") == 500


class TestMinimumDeposit:
    """Deposits below the configured minimum are skipped."""

    def test_excess_below_minimum_skipped(self):
        deployment = create_market(min_deposit=1000)
        fund_router(deployment, "X", 1000)
        n_events = len(deployment.router.events)

        assert deployment.router.stake_available("X") == 0
        assert deployment.router.idle_balance("X") == 1000
        assert len(deployment.router.events) == n_events

    def test_excess_at_minimum_deposited(self):
        deployment = create_market(min_deposit=800)
        fund_router(deployment, "X", 1000)

        assert deployment.router.stake_available("X") == 800


class TestRoundingProperties:
    """The reserve is rounded down, so idle never falls below it."""

    @pytest.mark.parametrize("balance", [1, 3, 7, 999, 1001, 12_345])
    def test_idle_after_deposit_equals_floor_reserve(self, market, balance):
        market.ledger.mint("X", market.router.address, balance)
        deposited = market.router.stake_available("X")

        reserve = balance * 2000 // 10_000
        assert market.router.idle_balance("X") == reserve
        assert deposited == balance - reserve

    def test_withdrawable_is_conserved_by_deposit(self, market):
        fund_router(market, "X", 1234)
        before = market.router.calculate_withdrawable_amount("X")
        market.router.stake_available("X")

        assert market.router.calculate_withdrawable_amount("X") == before == 1234
