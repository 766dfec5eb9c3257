"""Statistics calculator for recorded simulation runs."""

from collections import defaultdict
from typing import Dict, List


class StatsCalculator:
    """Calculate statistics for runs stored in the monitor database."""

    def __init__(self, db):
        self.db = db

    def get_run_stats(self, run_id: int) -> Dict:
        """Calculate the headline numbers for one run."""
        run = self.db.get_run(run_id)
        if run is None:
            return {}

        steps = self.db.get_run_steps(run_id)
        summary = run['summary']
        attempted = run['trades'] + run['failed_trades']

        stats = {
            'run_id': run_id,
            'label': run['label'],
            'reserve_ratio_bps': run['reserve_ratio_bps'],
            'n_steps': run['n_steps'],
            'trades': run['trades'],
            'failed_trades': run['failed_trades'],
            'failure_rate': run['failed_trades'] / attempted if attempted > 0 else 0.0,
            'events': summary.get('events', {}),
            'assets': {},
        }

        for asset, numbers in summary.get('assets', {}).items():
            stats['assets'][asset] = {
                'staked': numbers['staked'],
                'withdrawn': numbers['withdrawn'],
                'avg_deployed_share': self._avg_deployed_share(steps, asset),
                'withdrawal_steps': self._withdrawal_steps(run_id, asset),
                'avg_utilization_bps': (
                    sum(s['utilization_bps'].get(asset, 0) for s in steps) / len(steps)
                    if steps else 0.0
                ),
            }

        return stats

    @staticmethod
    def _avg_deployed_share(steps: List[Dict], asset: str) -> float:
        """Mean share of the router's holdings sitting in the lending service."""
        shares = []
        for step in steps:
            idle = step['idle'].get(asset, 0)
            deposited = step['deposited'].get(asset, 0)
            total = idle + deposited
            if total > 0:
                shares.append(deposited / total)
        return sum(shares) / len(shares) if shares else 0.0

    def _withdrawal_steps(self, run_id: int, asset: str) -> int:
        return len([
            e for e in self.db.get_run_events(run_id, event='AssetWithdrawn')
            if e['asset'] == asset
        ])

    def compare_reserve_ratios(self, run_ids: List[int] = None) -> List[Dict]:
        """Average outcomes grouped by reserve ratio, lowest ratio first."""
        runs = self.db.list_runs()
        if run_ids is not None:
            wanted = set(run_ids)
            runs = [r for r in runs if r['id'] in wanted]

        grouped = defaultdict(list)
        for run in runs:
            grouped[run['reserve_ratio_bps']].append(run)

        comparison = []
        for ratio, group in sorted(grouped.items()):
            trades = sum(r['trades'] for r in group)
            failed = sum(r['failed_trades'] for r in group)
            withdrawals = sum(r['summary']['events'].get('AssetWithdrawn', 0) for r in group)
            stakes = sum(r['summary']['events'].get('AssetStaked', 0) for r in group)
            comparison.append({
                'reserve_ratio_bps': ratio,
                'runs': len(group),
                'trades': trades,
                'failed_trades': failed,
                'failure_rate': failed / (trades + failed) if trades + failed > 0 else 0.0,
                'avg_withdrawals': withdrawals / len(group),
                'avg_stakes': stakes / len(group),
            })

        return comparison

    def get_overview(self) -> Dict:
        """Totals across every stored run."""
        runs = self.db.list_runs()
        if not runs:
            return {
                'total_runs': 0,
                'total_trades': 0,
                'total_failed_trades': 0,
                'failure_rate': 0.0,
                'most_tested_ratio': None,
            }

        ratio_counts = defaultdict(int)
        for run in runs:
            ratio_counts[run['reserve_ratio_bps']] += 1

        trades = sum(r['trades'] for r in runs)
        failed = sum(r['failed_trades'] for r in runs)
        return {
            'total_runs': len(runs),
            'total_trades': trades,
            'total_failed_trades': failed,
            'failure_rate': failed / (trades + failed) if trades + failed > 0 else 0.0,
            'most_tested_ratio': max(ratio_counts.items(), key=lambda x: (x[1], -x[0]))[0],
        }
