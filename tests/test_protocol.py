"""Token ledger, lending pool and pool manager stand-ins."""

import pytest

from liquid_hook.core.errors import (
    InsufficientAllowance,
    InsufficientBalance,
    InsufficientExternalLiquidity,
)
from liquid_hook.core.types import MAX_UINT256, ModifyLiquidityParams, PoolKey, SwapParams
from liquid_hook.protocol.chain import Chain
from liquid_hook.protocol.ledger import TokenInfo, TokenLedger
from liquid_hook.protocol.lending import SimulatedLendingPool
from liquid_hook.protocol.pool_manager import PoolManager, get_amount_in, get_amount_out


@pytest.fixture
def chain() -> Chain:
    return Chain()


@pytest.fixture
def ledger(chain) -> TokenLedger:
    ledger = chain.ledger
    ledger.create_token("X", decimals=0)
    ledger.create_token("aX", decimals=0)
    ledger.mint("X", "alice", 1000)
    return ledger


@pytest.fixture
def lending(chain, ledger) -> SimulatedLendingPool:
    pool = SimulatedLendingPool(chain)
    pool.set_receipt_asset("X", "aX")
    ledger.approve("X", "alice", pool.address, MAX_UINT256)
    return pool


class TestTokenLedger:

    def test_token_units(self):
        assert TokenInfo("USDC", "USD Coin", 6).units(1000) == 1_000_000_000
        assert TokenInfo("DAI", "Dai", 18).units("0.5") == 5 * 10**17

    def test_transfer_moves_balance(self, ledger):
        ledger.transfer("X", "alice", "bob", 300)

        assert ledger.balance_of("X", "alice") == 700
        assert ledger.balance_of("X", "bob") == 300
        assert ledger.total_supply["X"] == 1000

    def test_transfer_above_balance_rejected(self, ledger):
        with pytest.raises(InsufficientBalance):
            ledger.transfer("X", "alice", "bob", 1001)

    def test_transfer_from_consumes_allowance(self, ledger):
        ledger.approve("X", "alice", "spender", 500)
        ledger.transfer_from("X", "spender", "alice", "bob", 200)

        assert ledger.allowance("X", "alice", "spender") == 300
        with pytest.raises(InsufficientAllowance):
            ledger.transfer_from("X", "spender", "alice", "bob", 301)

    def test_unlimited_allowance_not_consumed(self, ledger):
        ledger.approve("X", "alice", "spender", MAX_UINT256)
        ledger.transfer_from("X", "spender", "alice", "bob", 200)

        assert ledger.allowance("X", "alice", "spender") == MAX_UINT256

    def test_unknown_token_rejected(self, ledger):
        with pytest.raises(KeyError):
            ledger.mint("Z", "alice", 1)

    def test_duplicate_token_rejected(self, ledger):
        with pytest.raises(ValueError):
            ledger.create_token("X")


class TestSimulatedLendingPool:

    def test_deposit_mints_receipt(self, ledger, lending):
        lending.deposit("X", 400, "alice", 0, caller="alice")

        assert ledger.balance_of("aX", "alice") == 400
        assert ledger.balance_of("X", "alice") == 600
        assert lending.available_liquidity("X") == 400

    def test_deposit_without_allowance_rejected(self, ledger, lending):
        ledger.mint("X", "bob", 100)

        with pytest.raises(InsufficientAllowance):
            lending.deposit("X", 100, "bob", 0, caller="bob")

    def test_withdraw_burns_receipt(self, ledger, lending):
        lending.deposit("X", 400, "alice", 0, caller="alice")

        assert lending.withdraw("X", 150, "alice", caller="alice") == 150
        assert ledger.balance_of("aX", "alice") == 250
        assert ledger.balance_of("X", "alice") == 750

    def test_withdraw_max_takes_whole_position(self, ledger, lending):
        lending.deposit("X", 400, "alice", 0, caller="alice")

        assert lending.withdraw("X", MAX_UINT256, "alice", caller="alice") == 400
        assert ledger.balance_of("aX", "alice") == 0

    def test_withdraw_above_position_rejected(self, lending):
        lending.deposit("X", 400, "alice", 0, caller="alice")

        with pytest.raises(InsufficientExternalLiquidity) as exc_info:
            lending.withdraw("X", 401, "alice", caller="alice")
        assert exc_info.value.available == 400

    def test_utilization(self, lending):
        lending.deposit("X", 400, "alice", 0, caller="alice")
        lending.utilize("X", 100, "borrower")

        assert lending.utilization_bps("X") == 2500
        with pytest.raises(InsufficientExternalLiquidity):
            lending.withdraw("X", 301, "alice", caller="alice")

        lending.repay("X", 100, "borrower")
        assert lending.utilization_bps("X") == 0

    def test_interest_accrues_to_holders(self, ledger, lending):
        lending.deposit("X", 1000, "alice", 0, caller="alice")

        assert lending.accrue_interest("X", 50) == 5
        assert ledger.balance_of("aX", "alice") == 1005
        assert lending.withdraw("X", MAX_UINT256, "alice", caller="alice") == 1005

    def test_rewards_need_a_position(self, ledger, lending):
        lending.rewards.set_rewards("aX", 10)

        assert lending.claim_rewards(["aX"], MAX_UINT256, "bob", "aX", caller="bob") == 0
        assert lending.rewards.rewards_of("aX") == 10

    def test_rewards_capped_at_amount(self, ledger, lending):
        lending.deposit("X", 100, "alice", 0, caller="alice")
        lending.rewards.set_rewards("aX", 10)

        assert lending.claim_rewards(["aX"], 4, "alice", "aX", caller="alice") == 4
        assert lending.rewards.rewards_of("aX") == 6
        assert ledger.balance_of("aX", "alice") == 104

    def test_pool_state_reverted_with_unit_of_work(self, chain, lending):
        assert lending in chain.participants
        assert lending.rewards in chain.participants
        lending.deposit("X", 400, "alice", 0, caller="alice")
        lending.rewards.set_rewards("aX", 10)

        with pytest.raises(RuntimeError):
            with chain.atomic():
                lending.utilize("X", 100, "borrower")
                lending.claim_rewards(["aX"], 4, "alice", "aX", caller="alice")
                raise RuntimeError("revert")

        assert lending.borrowed == {}
        assert lending.utilization_bps("X") == 0
        assert lending.rewards.rewards_of("aX") == 10
        assert chain.ledger.balance_of("aX", "alice") == 400


class TestPoolMath:
    """Constant product with fee on input."""

    def test_amount_out_rounds_down(self):
        assert get_amount_out(600, 5000, 5000, 3000) == 534

    def test_amount_in_rounds_up(self):
        assert get_amount_in(500, 5000, 5000, 3000) == 558

    def test_round_trip_favours_pool(self):
        amount_in = get_amount_in(500, 5000, 5000, 3000)
        assert get_amount_out(amount_in, 5000, 5000, 3000) >= 500

    def test_cannot_drain_reserve(self):
        with pytest.raises(ValueError):
            get_amount_in(5000, 5000, 5000, 3000)

    def test_empty_pool_rejected(self):
        with pytest.raises(ValueError):
            get_amount_out(100, 0, 5000, 3000)


class TestPoolManagerWithoutHooks:
    """A plain pool behaves like a constant product AMM."""

    @pytest.fixture
    def manager(self):
        chain = Chain()
        for symbol in ("X", "Y"):
            chain.ledger.create_token(symbol, decimals=0)
            chain.ledger.mint(symbol, "lp", 10_000)
            chain.ledger.mint(symbol, "trader", 1000)
        manager = PoolManager(chain)
        key = PoolKey("X", "Y", fee=3000)
        manager.initialize(key, sender="lp")
        manager.modify_liquidity(key, ModifyLiquidityParams(5000, 5000), sender="lp")
        return manager, key

    def test_swap_updates_reserves_and_fees(self, manager):
        manager, key = manager
        result = manager.swap(key, SwapParams(zero_for_one=True, amount_specified=-600), sender="trader")
        state = manager.pool(key)

        assert result.amount_out == 534
        assert result.fee_amount == 1
        assert state.reserve0 == 5000 + 600 - 1
        assert state.reserve1 == 5000 - 534
        assert state.fees0 == 1
        assert result.delta.amount0 == 600
        assert result.delta.amount1 == -534

    def test_tokens_held_by_pool_manager(self, manager):
        manager, key = manager

        assert manager.ledger.balance_of("X", manager.address) == 5000

    def test_duplicate_initialize_rejected(self, manager):
        manager, key = manager

        with pytest.raises(ValueError):
            manager.initialize(key, sender="lp")

    def test_remove_more_than_position_rejected(self, manager):
        manager, key = manager

        with pytest.raises(ValueError):
            manager.modify_liquidity(key, ModifyLiquidityParams(-5001, 0), sender="lp")
        assert manager.pool(key).reserve0 == 5000

    def test_uninitialized_pool(self, manager):
        manager, _ = manager

        with pytest.raises(KeyError):
            manager.pool(PoolKey("X", "Y", fee=500))
