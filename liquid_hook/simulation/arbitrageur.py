"""Arbitrage trades that pull the pool price back to the fair price."""

import math
from typing import Optional

from liquid_hook.core.types import FEE_DENOMINATOR, SwapParams
from liquid_hook.protocol.pool_manager import PoolState


class Arbitrageur:
    """Sizes the profit-maximizing trade against a constant product pool.

    For reserves (x, y), k = xy, fee f (fee-on-input), γ = 1 - f and fair
    price p (token1 per token0, base units):
    - Buy token0 from the pool: Δx_out = x - sqrt(k / (γ·p))
    - Sell token0 to the pool: Δx_in = (sqrt(k·γ / p) - x) / γ
    Both are zero or negative while the pool price sits inside the fee band.
    """

    def __init__(self, decimals0: int, decimals1: int, max_reserve_share: float = 0.99):
        self.scale = 10 ** decimals1 / 10 ** decimals0
        self.max_reserve_share = max_reserve_share

    def find_trade(self, pool: PoolState, fair_price: float) -> Optional[SwapParams]:
        x = float(pool.reserve0)
        y = float(pool.reserve1)
        if x <= 0 or y <= 0 or fair_price <= 0:
            return None

        p = fair_price * self.scale
        k = x * y
        gamma = 1.0 - pool.key.fee / FEE_DENOMINATOR
        spot = y / x

        if spot < p:
            amount_out = x - math.sqrt(k / (gamma * p))
            amount_out = min(amount_out, x * self.max_reserve_share)
            if amount_out < 1:
                return None
            return SwapParams(zero_for_one=False, amount_specified=int(amount_out))

        if spot > p:
            amount_in = (math.sqrt(k * gamma / p) - x) / gamma
            if amount_in < 1:
                return None
            return SwapParams(zero_for_one=True, amount_specified=-int(amount_in))

        return None
