"""Constant product pool manager that drives lifecycle hooks."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from liquid_hook.core.errors import InvalidHookResponse
from liquid_hook.core.interfaces import LifecycleHooks, SwapQuoter
from liquid_hook.core.types import (
    FEE_DENOMINATOR,
    BalanceDelta,
    HookAck,
    ModifyLiquidityParams,
    PoolKey,
    SwapParams,
)
from liquid_hook.protocol.chain import Chain
from liquid_hook.protocol.state import Stateful

logger = logging.getLogger(__name__)


@dataclass
class PoolState:
    """Reserves of one pool and the account holding its tokens.

    Uses the fee-on-input model: only the fee-adjusted input is added to
    reserves, the fee portion accrues separately, so k stays constant
    across trades.
    """
    key: PoolKey
    custodian: str
    reserve0: int = 0
    reserve1: int = 0
    fees0: int = 0
    fees1: int = 0
    # Contributed amounts per (owner, salt)
    positions: dict[tuple[str, str], tuple[int, int]] = field(default_factory=dict)

    @property
    def k(self) -> int:
        """The constant product invariant."""
        return self.reserve0 * self.reserve1

    def reserves(self, zero_for_one: bool) -> tuple[int, int]:
        """(reserve_in, reserve_out) for a trade direction."""
        if zero_for_one:
            return self.reserve0, self.reserve1
        return self.reserve1, self.reserve0


@dataclass(frozen=True)
class SwapResult:
    """Settled trade."""
    amount_in: int
    amount_out: int
    fee_amount: int
    delta: BalanceDelta


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int, fee: int) -> int:
    """Output of an exact-input trade: (r_in + γ·Δin)(r_out - Δout) = k with γ = 1 - fee."""
    if amount_in <= 0:
        raise ValueError(f"amount_in must be > 0, got {amount_in}")
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError("Pool has no liquidity")
    amount_in_with_fee = amount_in * (FEE_DENOMINATOR - fee)
    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * FEE_DENOMINATOR + amount_in_with_fee
    return numerator // denominator


def get_amount_in(amount_out: int, reserve_in: int, reserve_out: int, fee: int) -> int:
    """Input needed for an exact-output trade, rounded up in the pool's favour."""
    if amount_out <= 0:
        raise ValueError(f"amount_out must be > 0, got {amount_out}")
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError("Pool has no liquidity")
    if amount_out >= reserve_out:
        raise ValueError(f"Cannot take {amount_out} out of a reserve of {reserve_out}")
    numerator = reserve_in * amount_out * FEE_DENOMINATOR
    denominator = (reserve_out - amount_out) * (FEE_DENOMINATOR - fee)
    return numerator // denominator + 1


class PoolManager(Stateful, SwapQuoter):
    """Runs pools and fires the pool's lifecycle hooks around every change.

    Each initialize, swap and liquidity change is one unit of work on the
    chain: a failing hook, a failed transfer or a wrong acknowledgment
    undoes everything the operation did, hook side effects included.
    Pool tokens are held by the pool's custodian account, which is the
    hook's own account when a hook manages the pool's idle liquidity.
    """

    STATE_FIELDS = ("pools",)

    def __init__(self, chain: Chain, address: str = "pool-manager"):
        self.chain = chain
        self.ledger = chain.ledger
        self.address = address
        self.pools: dict[str, PoolState] = {}
        self._hooks: dict[str, LifecycleHooks] = {}
        chain.register(self)

    def pool(self, key: PoolKey) -> PoolState:
        try:
            return self.pools[key.pool_id]
        except KeyError:
            raise KeyError(f"Pool not initialized: {key.pool_id}") from None

    def _call_hook(self, key: PoolKey, callback: str, expected: HookAck, *args) -> None:
        hooks = self._hooks.get(key.pool_id)
        if hooks is None:
            return
        ack = getattr(hooks, callback)(*args)
        if ack is not expected:
            raise InvalidHookResponse(
                f"{callback} returned {ack!r}, expected {expected!r}"
            )

    def initialize(
        self,
        key: PoolKey,
        *,
        sender: str,
        hooks: Optional[LifecycleHooks] = None,
        custodian: Optional[str] = None,
    ) -> PoolState:
        """Create an empty pool for `key`."""
        if key.pool_id in self.pools:
            raise ValueError(f"Pool already initialized: {key.pool_id}")
        if hooks is not None:
            self._hooks[key.pool_id] = hooks

        try:
            with self.chain.atomic():
                self._call_hook(key, "before_initialize", HookAck.BEFORE_INITIALIZE, sender, key)
                state = PoolState(key=key, custodian=custodian or self.address)
                self.pools[key.pool_id] = state
                self._call_hook(key, "after_initialize", HookAck.AFTER_INITIALIZE, sender, key)
        except Exception:
            self._hooks.pop(key.pool_id, None)
            raise

        logger.info("Initialized pool %s (custodian %s)", key.pool_id, state.custodian)
        return state

    def quote(self, key: PoolKey, params: SwapParams) -> tuple[int, int]:
        state = self.pool(key)
        reserve_in, reserve_out = state.reserves(params.zero_for_one)
        if params.exact_input:
            amount_in = -params.amount_specified
            return amount_in, get_amount_out(amount_in, reserve_in, reserve_out, key.fee)
        amount_out = params.amount_specified
        return get_amount_in(amount_out, reserve_in, reserve_out, key.fee), amount_out

    def swap(
        self, key: PoolKey, params: SwapParams, *, sender: str, hook_data: bytes = b""
    ) -> SwapResult:
        """Execute a trade between `sender` and the pool.

        The pre-trade hook runs before any amount is computed or settled;
        the post-trade hook sees the settled balances.
        """
        with self.chain.atomic():
            self.pool(key)
            self._call_hook(key, "before_swap", HookAck.BEFORE_SWAP, sender, key, params, hook_data)

            state = self.pool(key)
            amount_in, amount_out = self.quote(key, params)
            if amount_out <= 0:
                raise ValueError("Trade too small to produce any output")
            fee_amount = amount_in * key.fee // FEE_DENOMINATOR
            currency_in = params.input_currency(key)
            currency_out = params.output_currency(key)

            self.ledger.transfer(currency_in, sender, state.custodian, amount_in)
            self.ledger.transfer(currency_out, state.custodian, sender, amount_out)

            net_in = amount_in - fee_amount
            if params.zero_for_one:
                state.reserve0 += net_in
                state.reserve1 -= amount_out
                state.fees0 += fee_amount
                delta = BalanceDelta(amount_in, -amount_out)
            else:
                state.reserve1 += net_in
                state.reserve0 -= amount_out
                state.fees1 += fee_amount
                delta = BalanceDelta(-amount_out, amount_in)

            self._call_hook(
                key, "after_swap", HookAck.AFTER_SWAP, sender, key, params, delta, hook_data
            )

        logger.debug(
            "Swap on %s: %d %s in, %d %s out",
            key.pool_id, amount_in, currency_in, amount_out, currency_out,
        )
        return SwapResult(
            amount_in=amount_in, amount_out=amount_out, fee_amount=fee_amount, delta=delta
        )

    def modify_liquidity(
        self,
        key: PoolKey,
        params: ModifyLiquidityParams,
        *,
        sender: str,
        hook_data: bytes = b"",
    ) -> BalanceDelta:
        """Add (positive amounts) or remove (negative amounts) liquidity."""
        with self.chain.atomic():
            state = self.pool(key)
            if params.is_add:
                before, after = "before_add_liquidity", "after_add_liquidity"
                before_ack, after_ack = HookAck.BEFORE_ADD_LIQUIDITY, HookAck.AFTER_ADD_LIQUIDITY
            else:
                before, after = "before_remove_liquidity", "after_remove_liquidity"
                before_ack, after_ack = HookAck.BEFORE_REMOVE_LIQUIDITY, HookAck.AFTER_REMOVE_LIQUIDITY

            self._call_hook(key, before, before_ack, sender, key, params, hook_data)

            position_key = (sender, params.salt)
            held0, held1 = state.positions.get(position_key, (0, 0))
            new0, new1 = held0 + params.amount0, held1 + params.amount1
            if new0 < 0 or new1 < 0:
                raise ValueError(
                    f"{sender} cannot remove more than its position ({held0}, {held1})"
                )

            for currency, amount in zip(key.currencies, (params.amount0, params.amount1)):
                if amount > 0:
                    self.ledger.transfer(currency, sender, state.custodian, amount)
                elif amount < 0:
                    self.ledger.transfer(currency, state.custodian, sender, -amount)

            state.reserve0 += params.amount0
            state.reserve1 += params.amount1
            if state.reserve0 < 0 or state.reserve1 < 0:
                raise ValueError("Liquidity change would leave negative reserves")
            state.positions[position_key] = (new0, new1)
            delta = BalanceDelta(params.amount0, params.amount1)

            self._call_hook(key, after, after_ack, sender, key, params, delta, hook_data)

        logger.debug("Liquidity change on %s by %s: %s", key.pool_id, sender, delta)
        return delta
