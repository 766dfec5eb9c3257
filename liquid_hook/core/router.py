"""Yield router hook: parks idle pool liquidity in a lending service.

On every trade or liquidity change the router keeps a configurable share of
each supported asset liquid and deposits the rest. Before a trade it pulls
back from the lending service whatever its liquid holdings cannot cover,
so the trade can pay out.
"""

import functools
import logging
from typing import Optional

from liquid_hook.core.errors import InvalidConfiguration, ReentrantCall, Unauthorized
from liquid_hook.core.events import (
    AssetRegistered,
    AssetStaked,
    AssetUnregistered,
    AssetWithdrawn,
    EventLog,
    ReserveRatioUpdated,
    YieldHarvested,
)
from liquid_hook.core.interfaces import LendingService, LifecycleHooks, SwapQuoter
from liquid_hook.core.registry import AssetRegistration, AssetRegistry, RouterConfig
from liquid_hook.core.types import (
    MAX_UINT256,
    BalanceDelta,
    HookAck,
    ModifyLiquidityParams,
    OutputEstimate,
    PoolKey,
    SwapParams,
)
from liquid_hook.protocol.chain import Chain
from liquid_hook.protocol.state import Stateful

logger = logging.getLogger(__name__)


def non_reentrant(method):
    """Run `method` as one unit of work and refuse re-entry while it runs."""

    @functools.wraps(method)
    def wrapper(self: "YieldRouter", *args, **kwargs):
        if self._busy:
            raise ReentrantCall(f"{method.__name__} called while the router is busy")
        self._busy = True
        try:
            with self.chain.atomic():
                return method(self, *args, **kwargs)
        finally:
            self._busy = False

    return wrapper


class YieldRouter(Stateful, LifecycleHooks):
    """Lifecycle hook that routes a pool's idle liquidity into a lending service.

    The router's own token balance is the pool's spendable liquidity; its
    receipt-token balance is what it has deposited.
    """

    STATE_FIELDS = ("registry", "config", "owner", "events")

    REFERRAL_CODE = 0

    def __init__(
        self,
        chain: Chain,
        pool_manager: SwapQuoter,
        lending: LendingService,
        owner: str,
        *,
        address: str = "liquid-hook",
        config: Optional[RouterConfig] = None,
        reward_asset: Optional[str] = None,
    ):
        """
        Args:
            chain: Execution environment holding the token ledger
            pool_manager: Pool manager firing the callbacks, used for trade quotes
            lending: Lending service idle liquidity is deposited into
            owner: Account allowed to change registrations and configuration
            address: The router's own account
            config: Initial configuration (20% reserve by default)
            reward_asset: Token rewards are claimed in; the asset's receipt
                token when omitted
        """
        self.chain = chain
        self.ledger = chain.ledger
        self.pool_manager = pool_manager
        self.lending = lending
        self.owner = owner
        self.address = address
        self.reward_asset = reward_asset
        self.config = config if config is not None else RouterConfig()
        self.registry = AssetRegistry()
        self.events = EventLog()
        self._busy = False
        chain.register(self)

    def _require_owner(self, caller: str) -> None:
        if caller != self.owner:
            logger.warning("Rejected administrative call from %s", caller)
            raise Unauthorized(caller)

    def _require_issued_receipt(self, asset: str, receipt_asset: str) -> None:
        try:
            issued = self.lending.receipt_asset_of(asset)
        except KeyError:
            raise InvalidConfiguration(f"Lending service does not accept {asset}") from None
        if receipt_asset != issued:
            raise InvalidConfiguration(
                f"Lending service issues {issued} for {asset}, not {receipt_asset}"
            )

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    @non_reentrant
    def register_asset(self, asset: str, receipt_asset: str, *, caller: str) -> AssetRegistration:
        """Start routing `asset`, deposited as `receipt_asset`.

        Grants the lending service an unlimited allowance over the router's
        holdings of `asset`.
        """
        self._require_owner(caller)
        self._require_issued_receipt(asset, receipt_asset)
        entry = self.registry.register(asset, receipt_asset)
        self.ledger.approve(asset, self.address, self.lending.address, MAX_UINT256)
        self.events.emit(AssetRegistered, asset=asset, receipt_asset=receipt_asset)
        logger.info("Registered %s (receipt %s)", asset, receipt_asset)
        return entry

    @non_reentrant
    def unregister_asset(self, asset: str, *, caller: str) -> AssetRegistration:
        """Stop routing `asset` and revoke the lending service's allowance.

        The receipt asset stays recorded.
        """
        self._require_owner(caller)
        entry = self.registry.unregister(asset)
        self.ledger.approve(asset, self.address, self.lending.address, 0)
        self.events.emit(AssetUnregistered, asset=asset)
        logger.info("Unregistered %s", asset)
        return entry

    @non_reentrant
    def set_reserve_ratio(self, bps: int, *, caller: str) -> None:
        self._require_owner(caller)
        old = self.config.reserve_ratio_bps
        self.config = self.config.with_reserve_ratio(bps)
        self.events.emit(ReserveRatioUpdated, old_ratio_bps=old, new_ratio_bps=bps)
        logger.info("Reserve ratio %d -> %d bps", old, bps)

    @non_reentrant
    def transfer_ownership(self, new_owner: str, *, caller: str) -> None:
        self._require_owner(caller)
        if not new_owner:
            raise ValueError("new_owner must be non-empty")
        logger.info("Ownership %s -> %s", self.owner, new_owner)
        self.owner = new_owner

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def reserve_ratio_bps(self) -> int:
        return self.config.reserve_ratio_bps

    def is_supported(self, asset: str) -> bool:
        return self.registry.is_supported(asset)

    def registration(self, asset: str) -> Optional[AssetRegistration]:
        return self.registry.get(asset)

    def receipt_asset_of(self, asset: str) -> Optional[str]:
        return self.registry.receipt_asset_of(asset)

    def supported_assets(self) -> list[str]:
        return self.registry.supported_assets()

    def idle_balance(self, asset: str) -> int:
        """Router holdings of `asset` that are not deposited."""
        return self.ledger.balance_of(asset, self.address)

    def deposited_balance(self, asset: str) -> int:
        """Router holdings of the receipt token for `asset` (0 if none recorded)."""
        receipt = self.registry.receipt_asset_of(asset)
        if receipt is None:
            return 0
        return self.ledger.balance_of(receipt, self.address)

    def calculate_withdrawable_amount(self, asset: str) -> int:
        """Idle plus deposited holdings: roughly what the router could recover."""
        return self.idle_balance(asset) + self.deposited_balance(asset)

    # ------------------------------------------------------------------
    # Deposit and withdrawal sizing
    # ------------------------------------------------------------------

    @non_reentrant
    def stake_available(self, asset: str) -> int:
        """Deposit everything above the reserve. Returns the amount deposited.

        The reserve is `reserve_ratio_bps` of the whole position, idle plus
        deposited, rounded down. With nothing deposited yet that equals the
        idle balance times the ratio. Once a deposit exists the reserve is
        larger than `idle * ratio`, so a second call with no balance change
        deposits nothing. A reserve drained below its target is not
        refilled here; `ensure_liquidity` withdraws on demand.
        """
        return self._stake_available(asset)

    @non_reentrant
    def ensure_liquidity(self, asset: str, required_amount: int) -> int:
        """Withdraw enough to hold `required_amount` idle. Returns the amount withdrawn."""
        return self._ensure_liquidity(asset, required_amount)

    def _stake_available(self, asset: str) -> int:
        self.registry.require_supported(asset)
        balance = self.idle_balance(asset)
        # Reserve is a share of the whole position so a repeat call finds no excess
        reserve = self.config.reserve_for(balance + self.deposited_balance(asset))
        excess = balance - reserve if balance > reserve else 0

        if excess == 0:
            return 0
        if excess < self.config.min_deposit:
            logger.debug("Skip deposit of %d %s below minimum %d", excess, asset, self.config.min_deposit)
            return 0

        logger.debug("Deposit %d %s (balance %d, reserve %d)", excess, asset, balance, reserve)
        self.lending.deposit(asset, excess, self.address, self.REFERRAL_CODE, caller=self.address)
        self.events.emit(AssetStaked, asset=asset, amount=excess)
        return excess

    def _ensure_liquidity(self, asset: str, required_amount: int) -> int:
        self.registry.require_supported(asset)
        if required_amount < 0:
            raise ValueError(f"required_amount must be >= 0, got {required_amount}")
        balance = self.idle_balance(asset)
        if balance >= required_amount:
            return 0

        shortfall = required_amount - balance
        logger.debug("Withdraw %d %s (balance %d, required %d)", shortfall, asset, balance, required_amount)
        withdrawn = self.lending.withdraw(asset, shortfall, self.address, caller=self.address)
        self.events.emit(AssetWithdrawn, asset=asset, amount=shortfall)
        return withdrawn

    def _stake_pool_currencies(self, key: PoolKey) -> None:
        for currency in key.currencies:
            if self.registry.is_supported(currency):
                self._stake_available(currency)

    def _expected_output(self, key: PoolKey, params: SwapParams) -> int:
        if self.config.output_estimate is OutputEstimate.SPECIFIED_AMOUNT:
            return abs(params.amount_specified)
        if not params.exact_input:
            return params.amount_specified
        _, amount_out = self.pool_manager.quote(key, params)
        return amount_out

    # ------------------------------------------------------------------
    # Rewards
    # ------------------------------------------------------------------

    @non_reentrant
    def harvest_yield(self, asset: str) -> int:
        """Claim lending rewards on `asset`'s receipt token.

        Returns the router's receipt-token balance after the claim. That is
        a balance snapshot, principal included, not realized profit.
        """
        entry = self.registry.require_supported(asset)
        reward = self.reward_asset or entry.receipt_asset
        claimed = self.lending.claim_rewards(
            [entry.receipt_asset], MAX_UINT256, self.address, reward, caller=self.address
        )
        balance = self.ledger.balance_of(entry.receipt_asset, self.address)
        self.events.emit(YieldHarvested, asset=asset, amount=balance)
        logger.info("Harvested %s: claimed %d %s, receipt balance %d", asset, claimed, reward, balance)
        return balance

    # ------------------------------------------------------------------
    # Lifecycle callbacks
    # ------------------------------------------------------------------

    def before_initialize(self, sender: str, key: PoolKey) -> HookAck:
        return HookAck.BEFORE_INITIALIZE

    def after_initialize(self, sender: str, key: PoolKey) -> HookAck:
        return HookAck.AFTER_INITIALIZE

    def before_add_liquidity(
        self, sender: str, key: PoolKey, params: ModifyLiquidityParams, hook_data: bytes
    ) -> HookAck:
        return HookAck.BEFORE_ADD_LIQUIDITY

    def before_remove_liquidity(
        self, sender: str, key: PoolKey, params: ModifyLiquidityParams, hook_data: bytes
    ) -> HookAck:
        return HookAck.BEFORE_REMOVE_LIQUIDITY

    @non_reentrant
    def after_add_liquidity(
        self,
        sender: str,
        key: PoolKey,
        params: ModifyLiquidityParams,
        delta: BalanceDelta,
        hook_data: bytes,
    ) -> HookAck:
        self._stake_pool_currencies(key)
        return HookAck.AFTER_ADD_LIQUIDITY

    @non_reentrant
    def after_remove_liquidity(
        self,
        sender: str,
        key: PoolKey,
        params: ModifyLiquidityParams,
        delta: BalanceDelta,
        hook_data: bytes,
    ) -> HookAck:
        self._stake_pool_currencies(key)
        return HookAck.AFTER_REMOVE_LIQUIDITY

    @non_reentrant
    def before_swap(
        self, sender: str, key: PoolKey, params: SwapParams, hook_data: bytes
    ) -> HookAck:
        currency_out = params.output_currency(key)
        if self.registry.is_supported(currency_out):
            self._ensure_liquidity(currency_out, self._expected_output(key, params))
        return HookAck.BEFORE_SWAP

    @non_reentrant
    def after_swap(
        self,
        sender: str,
        key: PoolKey,
        params: SwapParams,
        delta: BalanceDelta,
        hook_data: bytes,
    ) -> HookAck:
        self._stake_pool_currencies(key)
        return HookAck.AFTER_SWAP
