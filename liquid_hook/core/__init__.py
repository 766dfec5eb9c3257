"""Core yield routing components."""

from liquid_hook.core.types import (
    BalanceDelta,
    HookAck,
    ModifyLiquidityParams,
    OutputEstimate,
    PoolKey,
    SwapParams,
)
from liquid_hook.core.errors import (
    InsufficientExternalLiquidity,
    InvalidConfiguration,
    InvalidHookResponse,
    LiquidHookError,
    ReentrantCall,
    Unauthorized,
    UnsupportedAsset,
)
from liquid_hook.core.interfaces import LendingService, LifecycleHooks, SwapQuoter
from liquid_hook.core.registry import AssetRegistration, AssetRegistry, RouterConfig
from liquid_hook.core.router import YieldRouter

__all__ = [
    "AssetRegistration",
    "AssetRegistry",
    "BalanceDelta",
    "HookAck",
    "InsufficientExternalLiquidity",
    "InvalidConfiguration",
    "InvalidHookResponse",
    "LendingService",
    "LifecycleHooks",
    "LiquidHookError",
    "ModifyLiquidityParams",
    "OutputEstimate",
    "PoolKey",
    "ReentrantCall",
    "RouterConfig",
    "SwapParams",
    "SwapQuoter",
    "Unauthorized",
    "UnsupportedAsset",
    "YieldRouter",
]
