"""Pool, trade and event data classes."""

import pytest

from liquid_hook.core.events import AssetStaked, AssetWithdrawn, EventLog
from liquid_hook.core.types import ModifyLiquidityParams, PoolKey, SwapParams


class TestPoolKey:

    def test_currencies_and_id(self):
        key = PoolKey("DAI", "USDC", fee=3000)

        assert key.currencies == ("DAI", "USDC")
        assert key.pool_id == "DAI/USDC/3000"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"currency0": "X", "currency1": "X", "fee": 3000},
            {"currency0": "", "currency1": "Y", "fee": 3000},
            {"currency0": "X", "currency1": "Y", "fee": 1_000_000},
            {"currency0": "X", "currency1": "Y", "fee": 3000, "tick_spacing": 0},
        ],
    )
    def test_invalid_keys_rejected(self, kwargs):
        with pytest.raises(ValueError):
            PoolKey(**kwargs)


class TestSwapParams:

    def test_direction(self):
        key = PoolKey("X", "Y", fee=3000)
        params = SwapParams(zero_for_one=True, amount_specified=-10)

        assert params.exact_input
        assert params.input_currency(key) == "X"
        assert params.output_currency(key) == "Y"

    def test_exact_output(self):
        key = PoolKey("X", "Y", fee=3000)
        params = SwapParams(zero_for_one=False, amount_specified=10)

        assert not params.exact_input
        assert params.output_currency(key) == "X"

    def test_zero_amount_rejected(self):
        with pytest.raises(ValueError):
            SwapParams(zero_for_one=True, amount_specified=0)


class TestModifyLiquidityParams:

    def test_add_and_remove(self):
        assert ModifyLiquidityParams(10, 0).is_add
        assert not ModifyLiquidityParams(-10, -5).is_add

    @pytest.mark.parametrize("amounts", [(0, 0), (10, -10)])
    def test_invalid_changes_rejected(self, amounts):
        with pytest.raises(ValueError):
            ModifyLiquidityParams(*amounts)


class TestEventLog:

    def test_sequence_and_queries(self):
        log = EventLog()
        log.emit(AssetStaked, asset="X", amount=800)
        log.emit(AssetWithdrawn, asset="X", amount=250)
        log.emit(AssetStaked, asset="Y", amount=10)

        assert [e.sequence for e in log] == [0, 1, 2]
        assert len(log.of_type(AssetStaked)) == 2
        assert log.last(AssetWithdrawn).amount == 250
        assert log.last().asset == "Y"
        assert [e.sequence for e in log.since(1)] == [1, 2]

    def test_to_dict(self):
        event = EventLog().emit(AssetStaked, asset="X", amount=800)

        assert event.to_dict() == {"sequence": 0, "asset": "X", "amount": 800, "event": "AssetStaked"}

    def test_empty_log(self):
        log = EventLog()

        assert log.last() is None
        assert len(log) == 0
