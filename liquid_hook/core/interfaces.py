"""Interfaces between the yield router and the systems around it."""

from abc import ABC, abstractmethod

from liquid_hook.core.types import (
    BalanceDelta,
    HookAck,
    ModifyLiquidityParams,
    PoolKey,
    SwapParams,
)


class LifecycleHooks(ABC):
    """Callbacks a pool manager fires around pool lifecycle events.

    Every callback runs synchronously inside the pool manager's unit of
    work and must return its matching HookAck; anything else aborts the
    operation. Raising from a callback aborts the operation as well,
    including the trade or liquidity change that triggered it.
    """

    @abstractmethod
    def before_initialize(self, sender: str, key: PoolKey) -> HookAck:
        pass

    @abstractmethod
    def after_initialize(self, sender: str, key: PoolKey) -> HookAck:
        pass

    @abstractmethod
    def before_add_liquidity(
        self, sender: str, key: PoolKey, params: ModifyLiquidityParams, hook_data: bytes
    ) -> HookAck:
        pass

    @abstractmethod
    def after_add_liquidity(
        self,
        sender: str,
        key: PoolKey,
        params: ModifyLiquidityParams,
        delta: BalanceDelta,
        hook_data: bytes,
    ) -> HookAck:
        pass

    @abstractmethod
    def before_remove_liquidity(
        self, sender: str, key: PoolKey, params: ModifyLiquidityParams, hook_data: bytes
    ) -> HookAck:
        pass

    @abstractmethod
    def after_remove_liquidity(
        self,
        sender: str,
        key: PoolKey,
        params: ModifyLiquidityParams,
        delta: BalanceDelta,
        hook_data: bytes,
    ) -> HookAck:
        pass

    @abstractmethod
    def before_swap(
        self, sender: str, key: PoolKey, params: SwapParams, hook_data: bytes
    ) -> HookAck:
        """Called before the pool manager executes a trade.

        Args:
            sender: Account initiating the trade
            key: Pool being traded against
            params: Direction and size of the trade
            hook_data: Opaque caller data

        Returns:
            HookAck.BEFORE_SWAP
        """
        pass

    @abstractmethod
    def after_swap(
        self,
        sender: str,
        key: PoolKey,
        params: SwapParams,
        delta: BalanceDelta,
        hook_data: bytes,
    ) -> HookAck:
        """Called after the trade has been settled.

        Args:
            sender: Account that traded
            key: Pool that was traded against
            params: Direction and size of the trade
            delta: Settled pool balance change
            hook_data: Opaque caller data

        Returns:
            HookAck.AFTER_SWAP
        """
        pass


class SwapQuoter(ABC):
    """Read-only trade pricing offered by the pool manager."""

    @abstractmethod
    def quote(self, key: PoolKey, params: SwapParams) -> tuple[int, int]:
        """Return (amount_in, amount_out) the trade would settle at."""
        pass


class LendingService(ABC):
    """Deposit, withdraw and reward-claim capability of a lending protocol.

    `caller` identifies the account invoking the operation; deposits pull
    funds from it and withdrawals burn its receipt tokens. `address` is the
    account deposits are pulled into, so depositors approve it.
    """

    address: str

    @abstractmethod
    def deposit(
        self, asset: str, amount: int, on_behalf_of: str, referral_code: int, *, caller: str
    ) -> None:
        """Pull `amount` of `asset` from `caller` and credit receipt tokens to `on_behalf_of`."""
        pass

    @abstractmethod
    def withdraw(self, asset: str, amount: int, to: str, *, caller: str) -> int:
        """Burn `caller`'s receipt tokens and send `amount` of `asset` to `to`.

        Raises:
            InsufficientExternalLiquidity: If the amount cannot be paid out
        """
        pass

    @abstractmethod
    def claim_rewards(
        self, assets: list[str], amount: int, to: str, reward: str, *, caller: str
    ) -> int:
        """Claim up to `amount` of accrued `reward` for `caller`'s positions in `assets`."""
        pass

    @abstractmethod
    def receipt_asset_of(self, asset: str) -> str:
        """Receipt token issued for deposits of `asset`.

        Raises:
            KeyError: If the service does not accept `asset`
        """
        pass
