"""Command-line interface for running yield router simulations."""

import argparse
import json
import logging
import sys

from liquid_hook.config import (
    BASELINE_SETTINGS,
    build_router_config,
    build_simulation_settings,
    resolve_log_level,
)
from liquid_hook.core.errors import LiquidHookError
from liquid_hook.core.types import ModifyLiquidityParams, OutputEstimate, SwapParams
from liquid_hook.deploy import bootstrap_market
from liquid_hook.simulation.runner import SimulationRunner


def run_command(args: argparse.Namespace) -> int:
    """Simulate market activity against a hooked pool and print a summary."""
    try:
        router_config = build_router_config(
            reserve_ratio_bps=args.reserve_ratio,
            min_deposit=args.min_deposit,
            output_estimate=args.output_estimate,
        )
        settings = build_simulation_settings(
            n_steps=args.steps,
            seed=args.seed,
            gbm_sigma=args.volatility,
            retail_arrival_rate=args.retail_rate,
            retail_mean_size=args.retail_size,
            utilization_bps=args.utilization,
            harvest_interval=args.harvest_interval,
        )
    except (LiquidHookError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Running {settings.n_steps} steps at {router_config.reserve_ratio_bps} bps reserve...")
    result = SimulationRunner(settings, router_config).run()
    summary = result.summarize()

    if args.json:
        print(json.dumps(summary, indent=2, sort_keys=True))
        return 0

    print(f"\nTrades: {summary['trades']} ok, {summary['failed_trades']} failed "
          f"({summary['failure_rate']:.2%})")
    for name, count in sorted(summary["events"].items()):
        print(f"  {name}: {count}")
    for asset, numbers in summary["assets"].items():
        print(f"\n{asset}")
        print(f"  staked:       {numbers['staked']}")
        print(f"  withdrawn:    {numbers['withdrawn']}")
        print(f"  idle:         {numbers['idle']}")
        print(f"  deposited:    {numbers['deposited']}")
        print(f"  withdrawable: {numbers['withdrawable']}")
    return 0


def scenario_command(args: argparse.Namespace) -> int:
    """Walk through the router's sizing rules on a small market."""
    try:
        deployment = bootstrap_market(
            tokens=(("X", 0), ("Y", 0)),
            owner_balance=10_000,
            hook_balance=0,
            config=build_router_config(reserve_ratio_bps=args.reserve_ratio),
        )
    except LiquidHookError as e:
        print(f"Error: {e}")
        return 1

    router = deployment.router
    ledger = deployment.ledger
    owner = deployment.owner

    print(f"Reserve ratio: {router.reserve_ratio_bps} bps")

    ledger.transfer("X", owner, router.address, 1000)
    staked = router.stake_available("X")
    print(f"\nRouter holds 1000 X -> deposited {staked}, idle {router.idle_balance('X')}")
    again = router.stake_available("X")
    print(f"Depositing again with no balance change -> deposited {again}")

    ledger.transfer("Y", owner, router.address, 1000)
    router.stake_available("Y")
    idle_y = router.idle_balance("Y")
    required = idle_y + 250
    withdrawn = router.ensure_liquidity("Y", required)
    print(f"\nRouter holds {idle_y} idle Y, needs {required} -> withdrew {withdrawn}, "
          f"idle {router.idle_balance('Y')}")

    print(f"\nWithdrawable X: {router.calculate_withdrawable_amount('X')}")
    print(f"Harvest X -> receipt balance {router.harvest_yield('X')}")

    key = deployment.key
    ledger.mint("X", "lp", 5000)
    ledger.mint("Y", "lp", 5000)
    deployment.pool_manager.modify_liquidity(
        key, ModifyLiquidityParams(amount0=5000, amount1=5000), sender="lp"
    )
    ledger.mint("X", "trader", 10_000)
    idle_before = router.idle_balance("Y")
    result = deployment.pool_manager.swap(
        key, SwapParams(zero_for_one=True, amount_specified=idle_before + 400), sender="trader"
    )
    print(f"\nTrade for {result.amount_out} Y with {idle_before} Y idle -> "
          f"paid {result.amount_in} X, router idle Y now {router.idle_balance('Y')}")

    print(f"\n{len(router.events)} events:")
    for event in router.events:
        print(f"  {event.to_dict()}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Liquid hook - route idle pool liquidity into a lending service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  liquid-hook run --steps 500 --seed 7
  liquid-hook run --reserve-ratio 3000 --utilization 9000 --json
  liquid-hook scenario
        """,
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (defaults to LIQUID_HOOK_LOG_LEVEL or WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Simulate trading against a hooked pool")
    run_parser.add_argument(
        "--steps", type=int, default=None,
        help=f"Steps per simulation (default {BASELINE_SETTINGS.n_steps})",
    )
    run_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    run_parser.add_argument(
        "--reserve-ratio", type=int, default=None,
        help="Share of holdings kept idle, in bps (default 2000)",
    )
    run_parser.add_argument(
        "--min-deposit", type=int, default=None,
        help="Smallest deposit in base units (default 0)",
    )
    run_parser.add_argument(
        "--output-estimate",
        choices=[e.value for e in OutputEstimate],
        default=None,
        help="How pre-trade withdrawals size the trade output",
    )
    run_parser.add_argument("--volatility", type=float, default=None, help="Per-step GBM sigma")
    run_parser.add_argument("--retail-rate", type=float, default=None, help="Retail orders per step")
    run_parser.add_argument("--retail-size", type=float, default=None, help="Mean retail size in token1")
    run_parser.add_argument(
        "--utilization", type=int, default=None,
        help="Target lending utilization in bps",
    )
    run_parser.add_argument(
        "--harvest-interval", type=int, default=None,
        help="Steps between reward harvests (0 disables)",
    )
    run_parser.add_argument("--json", action="store_true", help="Print the summary as JSON")
    run_parser.set_defaults(func=run_command)

    scenario_parser = subparsers.add_parser(
        "scenario", help="Walk through deposit and withdrawal sizing step by step"
    )
    scenario_parser.add_argument(
        "--reserve-ratio", type=int, default=None,
        help="Share of holdings kept idle, in bps (default 2000)",
    )
    scenario_parser.set_defaults(func=scenario_command)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or resolve_log_level()).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
