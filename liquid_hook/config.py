"""Shared configuration for the router and for simulations."""

from dataclasses import dataclass, fields, replace
import os

from liquid_hook.core.registry import DEFAULT_RESERVE_RATIO_BPS, RouterConfig
from liquid_hook.core.types import OutputEstimate


@dataclass(frozen=True)
class SimulationSettings:
    n_steps: int
    initial_price: float          # token1 per token0
    initial_liquidity0: int       # whole tokens
    pool_fee: int                 # pips
    gbm_mu: float
    gbm_sigma: float
    gbm_dt: float
    retail_arrival_rate: float
    retail_mean_size: float       # whole token1
    retail_size_sigma: float
    retail_buy_prob: float
    supply_rate_bps_per_step: int
    utilization_bps: int
    harvest_interval: int
    rewards_per_harvest: int      # whole receipt tokens
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.n_steps <= 0:
            raise ValueError(f"n_steps must be > 0, got {self.n_steps}")
        if self.initial_price <= 0:
            raise ValueError(f"initial_price must be > 0, got {self.initial_price}")
        if self.initial_liquidity0 <= 0:
            raise ValueError(f"initial_liquidity0 must be > 0, got {self.initial_liquidity0}")
        if not 0 <= self.retail_buy_prob <= 1:
            raise ValueError(f"retail_buy_prob must be in [0, 1], got {self.retail_buy_prob}")
        if not 0 <= self.utilization_bps <= 10_000:
            raise ValueError(f"utilization_bps must be in [0, 10000], got {self.utilization_bps}")
        if self.harvest_interval < 0:
            raise ValueError(f"harvest_interval must be >= 0, got {self.harvest_interval}")


BASELINE_SETTINGS = SimulationSettings(
    n_steps=1000,
    initial_price=1.0,
    initial_liquidity0=100_000,
    pool_fee=3000,
    gbm_mu=0.0,
    gbm_sigma=0.001,
    gbm_dt=1.0,
    retail_arrival_rate=0.8,
    retail_mean_size=500.0,
    retail_size_sigma=1.2,
    retail_buy_prob=0.5,
    supply_rate_bps_per_step=1,
    utilization_bps=5000,
    harvest_interval=100,
    rewards_per_harvest=10,
    seed=None,
)


DEFAULT_ROUTER_CONFIG = RouterConfig(
    reserve_ratio_bps=DEFAULT_RESERVE_RATIO_BPS,
    min_deposit=0,
    output_estimate=OutputEstimate.QUOTE,
)


def build_simulation_settings(**overrides) -> SimulationSettings:
    """Baseline settings with explicit overrides; None values are ignored."""
    known = {f.name for f in fields(SimulationSettings)}
    unknown = set(overrides) - known
    if unknown:
        raise TypeError(f"Unknown simulation settings: {', '.join(sorted(unknown))}")
    return replace(BASELINE_SETTINGS, **{k: v for k, v in overrides.items() if v is not None})


def build_router_config(
    *,
    reserve_ratio_bps: int | None = None,
    min_deposit: int | None = None,
    output_estimate: OutputEstimate | str | None = None,
) -> RouterConfig:
    """Router configuration from explicit values, the environment, then defaults."""
    if reserve_ratio_bps is None:
        reserve_ratio_bps = int(
            os.environ.get("LIQUID_HOOK_RESERVE_RATIO_BPS", str(DEFAULT_ROUTER_CONFIG.reserve_ratio_bps))
        )
    if min_deposit is None:
        min_deposit = int(os.environ.get("LIQUID_HOOK_MIN_DEPOSIT", str(DEFAULT_ROUTER_CONFIG.min_deposit)))
    if output_estimate is None:
        output_estimate = os.environ.get(
            "LIQUID_HOOK_OUTPUT_ESTIMATE", DEFAULT_ROUTER_CONFIG.output_estimate.value
        )
    return RouterConfig(
        reserve_ratio_bps=reserve_ratio_bps,
        min_deposit=min_deposit,
        output_estimate=OutputEstimate(output_estimate),
    )


def resolve_db_path() -> str:
    """Resolve the monitoring database path from the environment."""
    return os.environ.get("LIQUID_HOOK_DB", "data/liquid_hook.db")


def resolve_log_level() -> str:
    return os.environ.get("LIQUID_HOOK_LOG_LEVEL", "WARNING").upper()
