"""Yield router hook that parks idle pool liquidity in a lending service."""

from liquid_hook.core.errors import (
    InsufficientExternalLiquidity,
    InvalidConfiguration,
    LiquidHookError,
    Unauthorized,
    UnsupportedAsset,
)
from liquid_hook.core.registry import RouterConfig
from liquid_hook.core.router import YieldRouter
from liquid_hook.core.types import ModifyLiquidityParams, PoolKey, SwapParams

__all__ = [
    "InsufficientExternalLiquidity",
    "InvalidConfiguration",
    "LiquidHookError",
    "ModifyLiquidityParams",
    "PoolKey",
    "RouterConfig",
    "SwapParams",
    "Unauthorized",
    "UnsupportedAsset",
    "YieldRouter",
]
