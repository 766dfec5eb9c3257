"""Pool, trade and liquidity data classes shared by the hook and the pool manager."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Basis points denominator for reserve ratios
BPS_DENOMINATOR = 10_000

# Pool fees are in hundredths of a bip (3000 = 0.30%)
FEE_DENOMINATOR = 1_000_000

MAX_UINT256 = 2**256 - 1


class HookAck(Enum):
    """Acknowledgment a lifecycle callback hands back to the pool manager."""
    BEFORE_INITIALIZE = "beforeInitialize"
    AFTER_INITIALIZE = "afterInitialize"
    BEFORE_ADD_LIQUIDITY = "beforeAddLiquidity"
    AFTER_ADD_LIQUIDITY = "afterAddLiquidity"
    BEFORE_REMOVE_LIQUIDITY = "beforeRemoveLiquidity"
    AFTER_REMOVE_LIQUIDITY = "afterRemoveLiquidity"
    BEFORE_SWAP = "beforeSwap"
    AFTER_SWAP = "afterSwap"


class OutputEstimate(Enum):
    """How the pre-trade callback sizes the amount a trade will pay out."""
    QUOTE = "quote"                        # exact-output amount, or a pool quote for exact-input
    SPECIFIED_AMOUNT = "specified_amount"  # |amount_specified| regardless of trade mode


@dataclass(frozen=True)
class PoolKey:
    """Identity of a pool: an ordered currency pair at a fee tier.

    Example: PoolKey("DAI", "USDC", fee=3000) is the 30 bps DAI/USDC pool.
    """
    currency0: str
    currency1: str
    fee: int               # In pips (1/1_000_000)
    tick_spacing: int = 60
    hooks: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.currency0 or not self.currency1:
            raise ValueError("Pool currencies must be non-empty")
        if self.currency0 == self.currency1:
            raise ValueError(f"Pool currencies must differ, got {self.currency0} twice")
        if not 0 <= self.fee < FEE_DENOMINATOR:
            raise ValueError(f"fee must be in [0, {FEE_DENOMINATOR}), got {self.fee}")
        if self.tick_spacing <= 0:
            raise ValueError(f"tick_spacing must be > 0, got {self.tick_spacing}")

    @property
    def currencies(self) -> tuple[str, str]:
        return (self.currency0, self.currency1)

    @property
    def pool_id(self) -> str:
        return f"{self.currency0}/{self.currency1}/{self.fee}"


@dataclass(frozen=True)
class SwapParams:
    """Trade request handed to the pool manager and to the hook.

    amount_specified < 0 is an exact-input trade of |amount_specified|;
    amount_specified > 0 is an exact-output trade.
    """
    zero_for_one: bool
    amount_specified: int

    def __post_init__(self) -> None:
        if self.amount_specified == 0:
            raise ValueError("amount_specified must be non-zero")

    @property
    def exact_input(self) -> bool:
        return self.amount_specified < 0

    def output_currency(self, key: PoolKey) -> str:
        """The currency this trade pays out of the pool."""
        return key.currency1 if self.zero_for_one else key.currency0

    def input_currency(self, key: PoolKey) -> str:
        """The currency this trade pays into the pool."""
        return key.currency0 if self.zero_for_one else key.currency1


@dataclass(frozen=True)
class ModifyLiquidityParams:
    """Liquidity change request.

    Positive amounts add liquidity, negative amounts remove it.
    """
    amount0: int
    amount1: int
    salt: str = ""

    def __post_init__(self) -> None:
        if self.amount0 == 0 and self.amount1 == 0:
            raise ValueError("Liquidity change must move at least one currency")
        if (self.amount0 > 0 and self.amount1 < 0) or (self.amount0 < 0 and self.amount1 > 0):
            raise ValueError("Liquidity change cannot add one currency and remove the other")

    @property
    def is_add(self) -> bool:
        return self.amount0 > 0 or self.amount1 > 0


@dataclass(frozen=True)
class BalanceDelta:
    """Settled balance change of a pool, from the pool's perspective.

    Positive values flowed into the pool, negative values flowed out.
    """
    amount0: int
    amount1: int
