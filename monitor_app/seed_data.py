"""Seed the monitor database with a sweep of reserve ratios."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from monitor_app.database import Database
from liquid_hook.config import build_router_config, build_simulation_settings, resolve_db_path
from liquid_hook.simulation.runner import SimulationRunner

# Sample sweep
SAMPLE_RUNS = [
    {"label": "all-in", "reserve_ratio_bps": 0},
    {"label": "lean", "reserve_ratio_bps": 1000},
    {"label": "default", "reserve_ratio_bps": 2000},
    {"label": "cautious", "reserve_ratio_bps": 5000},
    {"label": "stressed-lending", "reserve_ratio_bps": 2000, "utilization_bps": 9500},
    {"label": "no-lending", "reserve_ratio_bps": 10_000},
]


def seed_database(db_path: str = None, n_steps: int = 500, seed: int = 42) -> list[int]:
    """Run every sample configuration and store the results."""
    db = Database(db_path or resolve_db_path())
    run_ids = []

    print("🌱 Seeding database with sample runs...")

    for sample in SAMPLE_RUNS:
        print(f"\n▶️  {sample['label']} ({sample['reserve_ratio_bps']} bps)")

        router_config = build_router_config(reserve_ratio_bps=sample["reserve_ratio_bps"])
        settings = build_simulation_settings(
            n_steps=n_steps,
            seed=seed,
            utilization_bps=sample.get("utilization_bps"),
        )
        result = SimulationRunner(settings, router_config).run()
        run_id = db.add_run(result, label=sample["label"])
        run_ids.append(run_id)

        print(f"   ✅ Stored run {run_id}: {result.trades} trades, {result.failed_trades} failed")

    print("\n✨ Seeding complete!")
    print("\n📊 Current runs:")
    for run in db.list_runs():
        print(f"   - #{run['id']} {run['label']} ({run['reserve_ratio_bps']} bps)")

    return run_ids


if __name__ == "__main__":
    seed_database()
