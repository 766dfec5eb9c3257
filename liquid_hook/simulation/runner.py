"""Runs a pool with the yield router through simulated market activity."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Sequence

from liquid_hook.config import BASELINE_SETTINGS, SimulationSettings
from liquid_hook.core.errors import LiquidHookError
from liquid_hook.core.registry import RouterConfig
from liquid_hook.core.types import ModifyLiquidityParams, SwapParams
from liquid_hook.deploy import Deployment, bootstrap_market
from liquid_hook.simulation.arbitrageur import Arbitrageur
from liquid_hook.simulation.price_process import GBMPriceProcess
from liquid_hook.simulation.retail import RetailOrder, RetailTrader

logger = logging.getLogger(__name__)


@dataclass
class StepSnapshot:
    """Router position at the end of one step."""
    step: int
    fair_price: float
    spot_price: float
    idle: dict[str, int]
    deposited: dict[str, int]
    utilization_bps: dict[str, int]
    trades: int
    failed_trades: int

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "fair_price": self.fair_price,
            "spot_price": self.spot_price,
            "idle": dict(self.idle),
            "deposited": dict(self.deposited),
            "utilization_bps": dict(self.utilization_bps),
            "trades": self.trades,
            "failed_trades": self.failed_trades,
        }


@dataclass
class SimulationResult:
    """Outcome of one simulation run."""
    seed: Optional[int]
    settings: SimulationSettings
    router_config: RouterConfig
    currencies: tuple[str, str]
    steps: list[StepSnapshot] = field(default_factory=list)
    events: list[dict] = field(default_factory=list)
    trades: int = 0
    failed_trades: int = 0
    failure_reasons: dict[str, int] = field(default_factory=dict)
    harvested: dict[str, int] = field(default_factory=dict)
    final_withdrawable: dict[str, int] = field(default_factory=dict)

    @property
    def failure_rate(self) -> float:
        attempted = self.trades + self.failed_trades
        return self.failed_trades / attempted if attempted else 0.0

    def event_counts(self) -> dict[str, int]:
        return dict(Counter(e["event"] for e in self.events))

    def total_amount(self, event: str, asset: str) -> int:
        return sum(
            e["amount"] for e in self.events
            if e["event"] == event and e.get("asset") == asset
        )

    def summarize(self) -> dict:
        """Headline numbers for display and storage."""
        summary = {
            "seed": self.seed,
            "n_steps": len(self.steps),
            "reserve_ratio_bps": self.router_config.reserve_ratio_bps,
            "trades": self.trades,
            "failed_trades": self.failed_trades,
            "failure_rate": self.failure_rate,
            "events": self.event_counts(),
            "assets": {},
        }
        last = self.steps[-1] if self.steps else None
        for asset in self.currencies:
            summary["assets"][asset] = {
                "staked": self.total_amount("AssetStaked", asset),
                "withdrawn": self.total_amount("AssetWithdrawn", asset),
                "idle": last.idle[asset] if last else 0,
                "deposited": last.deposited[asset] if last else 0,
                "withdrawable": self.final_withdrawable.get(asset, 0),
                "last_harvest": self.harvested.get(asset, 0),
            }
        return summary


class SimulationRunner:
    """Drives arbitrage and retail trades through a hooked pool.

    Every step: move the fair price, rebalance lending utilization to its
    target, let the arbitrageur trade, route retail orders, accrue lending
    interest and, every `harvest_interval` steps, harvest rewards. Trades the
    router cannot fund fail and are counted; they leave no trace on the
    pool, the router or the lending service.
    """

    LIQUIDITY_PROVIDER = "lp"
    TRADER = "trader"
    ARBITRAGEUR = "arbitrageur"
    BORROWER = "borrower"

    # Whole tokens minted to each trading account per currency
    TRADER_FUNDING = 10**12

    def __init__(
        self,
        settings: SimulationSettings = BASELINE_SETTINGS,
        router_config: Optional[RouterConfig] = None,
        tokens: Sequence[tuple[str, int]] = (("DAI", 18), ("USDC", 6)),
    ):
        self.settings = settings
        self.router_config = router_config if router_config is not None else RouterConfig()
        self.tokens = tuple(sorted(tokens))

    def setup(self) -> Deployment:
        """Deploy the market and seed the pool with liquidity."""
        s = self.settings
        deployment = bootstrap_market(
            tokens=self.tokens,
            fee=s.pool_fee,
            config=self.router_config,
            owner_balance=0,
            hook_balance=0,
            rewards=0,
        )
        ledger = deployment.ledger
        currency0, currency1 = deployment.key.currencies

        amount0 = deployment.units(currency0, s.initial_liquidity0)
        amount1 = deployment.units(currency1, s.initial_liquidity0 * s.initial_price)
        ledger.mint(currency0, self.LIQUIDITY_PROVIDER, amount0)
        ledger.mint(currency1, self.LIQUIDITY_PROVIDER, amount1)
        for account in (self.TRADER, self.ARBITRAGEUR):
            for currency in (currency0, currency1):
                ledger.mint(currency, account, deployment.units(currency, self.TRADER_FUNDING))

        deployment.pool_manager.modify_liquidity(
            deployment.key,
            ModifyLiquidityParams(amount0=amount0, amount1=amount1),
            sender=self.LIQUIDITY_PROVIDER,
        )
        return deployment

    def run(self) -> SimulationResult:
        s = self.settings
        deployment = self.setup()
        key = deployment.key
        currency0, currency1 = key.currencies
        decimals0 = deployment.ledger.tokens[currency0].decimals
        decimals1 = deployment.ledger.tokens[currency1].decimals

        price_process = GBMPriceProcess(
            initial_price=s.initial_price, mu=s.gbm_mu, sigma=s.gbm_sigma, dt=s.gbm_dt, seed=s.seed
        )
        retail = RetailTrader(
            arrival_rate=s.retail_arrival_rate,
            mean_size=s.retail_mean_size,
            size_sigma=s.retail_size_sigma,
            buy_prob=s.retail_buy_prob,
            seed=None if s.seed is None else s.seed + 1,
        )
        arbitrageur = Arbitrageur(decimals0, decimals1)

        result = SimulationResult(
            seed=s.seed,
            settings=s,
            router_config=self.router_config,
            currencies=(currency0, currency1),
        )
        failures: Counter = Counter()

        for step in range(s.n_steps):
            fair_price = price_process.current_price if step == 0 else price_process.step()
            self._rebalance_utilization(deployment)
            ok = failed = 0

            arb_params = arbitrageur.find_trade(deployment.pool_manager.pool(key), fair_price)
            if arb_params is not None:
                if self._try_swap(deployment, arb_params, self.ARBITRAGEUR, failures):
                    ok += 1
                else:
                    failed += 1

            for order in retail.generate_orders():
                params = self._order_params(deployment, order, fair_price)
                if params is None:
                    continue
                if self._try_swap(deployment, params, self.TRADER, failures):
                    ok += 1
                else:
                    failed += 1

            for currency in key.currencies:
                deployment.lending.accrue_interest(currency, s.supply_rate_bps_per_step)

            if s.harvest_interval and (step + 1) % s.harvest_interval == 0:
                self._harvest(deployment, result)

            result.trades += ok
            result.failed_trades += failed
            result.steps.append(self._snapshot(deployment, step, fair_price, ok, failed))

        router = deployment.router
        result.events = [e.to_dict() for e in router.events]
        result.failure_reasons = dict(failures)
        result.final_withdrawable = {
            c: router.calculate_withdrawable_amount(c) for c in key.currencies
        }
        logger.info(
            "Simulation finished: %d trades, %d failed, %d router events",
            result.trades, result.failed_trades, len(result.events),
        )
        return result

    def _order_params(
        self, deployment: Deployment, order: RetailOrder, fair_price: float
    ) -> Optional[SwapParams]:
        currency0, currency1 = deployment.key.currencies
        size1 = order.size
        size0 = order.size / fair_price
        if order.side == "buy":
            # Pay token1, receive token0
            amount = (
                deployment.units(currency0, size0) if order.exact_output
                else -deployment.units(currency1, size1)
            )
        else:
            # Pay token0, receive token1
            amount = (
                deployment.units(currency1, size1) if order.exact_output
                else -deployment.units(currency0, size0)
            )
        if amount == 0:
            return None
        return SwapParams(zero_for_one=order.zero_for_one, amount_specified=amount)

    def _try_swap(
        self, deployment: Deployment, params: SwapParams, sender: str, failures: Counter
    ) -> bool:
        try:
            deployment.pool_manager.swap(deployment.key, params, sender=sender)
            return True
        except (LiquidHookError, ValueError) as e:
            failures[type(e).__name__] += 1
            logger.debug("Trade by %s failed: %s", sender, e)
            return False

    def _rebalance_utilization(self, deployment: Deployment) -> None:
        lending = deployment.lending
        for currency in deployment.key.currencies:
            lent = lending.borrowed.get((currency, self.BORROWER), 0)
            supplied = lent + lending.available_liquidity(currency)
            target = supplied * self.settings.utilization_bps // 10_000
            if target > lent:
                lending.utilize(currency, target - lent, self.BORROWER)
            elif target < lent:
                lending.repay(currency, lent - target, self.BORROWER)

    def _harvest(self, deployment: Deployment, result: SimulationResult) -> None:
        router = deployment.router
        for currency in deployment.key.currencies:
            receipt = router.receipt_asset_of(currency)
            deployment.lending.rewards.set_rewards(
                receipt, deployment.units(receipt, self.settings.rewards_per_harvest)
            )
            result.harvested[currency] = router.harvest_yield(currency)

    def _snapshot(
        self, deployment: Deployment, step: int, fair_price: float, ok: int, failed: int
    ) -> StepSnapshot:
        router = deployment.router
        lending = deployment.lending
        pool = deployment.pool_manager.pool(deployment.key)
        currency0, currency1 = deployment.key.currencies
        scale = 10 ** deployment.ledger.tokens[currency1].decimals / 10 ** deployment.ledger.tokens[currency0].decimals
        spot = (pool.reserve1 / pool.reserve0) / scale if pool.reserve0 else 0.0
        currencies = deployment.key.currencies
        return StepSnapshot(
            step=step,
            fair_price=fair_price,
            spot_price=spot,
            idle={c: router.idle_balance(c) for c in currencies},
            deposited={c: router.deposited_balance(c) for c in currencies},
            utilization_bps={c: lending.utilization_bps(c) for c in currencies},
            trades=ok,
            failed_trades=failed,
        )
