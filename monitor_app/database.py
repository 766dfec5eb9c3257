"""Database operations for the yield router monitor."""

import json
import logging
import sqlite3
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional

from liquid_hook.simulation.runner import SimulationResult

logger = logging.getLogger(__name__)


class Database:
    """Manages the SQLite store of simulation runs, their steps and router events."""

    def __init__(self, db_path: str = "data/liquid_hook.db"):
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def init_db(self):
        """Create tables if they don't exist."""
        conn = self._connect()
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS runs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                label TEXT NOT NULL DEFAULT '',
                seed INTEGER,
                n_steps INTEGER NOT NULL,
                reserve_ratio_bps INTEGER NOT NULL CHECK(reserve_ratio_bps BETWEEN 0 AND 10000),
                min_deposit INTEGER NOT NULL,
                output_estimate TEXT NOT NULL,
                trades INTEGER NOT NULL,
                failed_trades INTEGER NOT NULL,
                settings_json TEXT NOT NULL,
                summary_json TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS run_steps (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                run_id INTEGER NOT NULL,
                step INTEGER NOT NULL,
                fair_price REAL NOT NULL,
                spot_price REAL NOT NULL,
                trades INTEGER NOT NULL,
                failed_trades INTEGER NOT NULL,
                idle_json TEXT NOT NULL,
                deposited_json TEXT NOT NULL,
                utilization_json TEXT NOT NULL,
                FOREIGN KEY (run_id) REFERENCES runs(id) ON DELETE CASCADE
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS router_events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                run_id INTEGER NOT NULL,
                sequence INTEGER NOT NULL,
                event TEXT NOT NULL,
                asset TEXT,
                amount TEXT,
                payload_json TEXT NOT NULL,
                FOREIGN KEY (run_id) REFERENCES runs(id) ON DELETE CASCADE
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_run_steps_run_id
            ON run_steps(run_id)
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_router_events_run_id
            ON router_events(run_id, event)
        """)

        conn.commit()
        conn.close()

    def add_run(self, result: SimulationResult, label: str = "") -> int:
        """Store a simulation run with its steps and events."""
        config = result.router_config
        settings = asdict(result.settings)
        summary = result.summarize()

        conn = self._connect()
        cursor = conn.cursor()
        try:
            cursor.execute("""
                INSERT INTO runs (
                    label, seed, n_steps, reserve_ratio_bps, min_deposit, output_estimate,
                    trades, failed_trades, settings_json, summary_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                label, result.seed, len(result.steps), config.reserve_ratio_bps,
                config.min_deposit, config.output_estimate.value,
                result.trades, result.failed_trades,
                json.dumps(settings), json.dumps(summary, default=str),
            ))
            run_id = cursor.lastrowid

            cursor.executemany("""
                INSERT INTO run_steps (
                    run_id, step, fair_price, spot_price, trades, failed_trades,
                    idle_json, deposited_json, utilization_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, [
                (
                    run_id, s.step, s.fair_price, s.spot_price, s.trades, s.failed_trades,
                    json.dumps({k: str(v) for k, v in s.idle.items()}),
                    json.dumps({k: str(v) for k, v in s.deposited.items()}),
                    json.dumps(s.utilization_bps),
                )
                for s in result.steps
            ])

            # Token amounts can exceed SQLite's 64-bit integers, store them as text
            cursor.executemany("""
                INSERT INTO router_events (run_id, sequence, event, asset, amount, payload_json)
                VALUES (?, ?, ?, ?, ?, ?)
            """, [
                (
                    run_id, e["sequence"], e["event"], e.get("asset"),
                    str(e["amount"]) if "amount" in e else None,
                    json.dumps(e, default=str),
                )
                for e in result.events
            ])

            conn.commit()
        finally:
            conn.close()

        logger.info("Stored run %d (%d steps, %d events)", run_id, len(result.steps), len(result.events))
        return run_id

    def get_run(self, run_id: int) -> Optional[Dict]:
        """Get a run by ID."""
        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM runs WHERE id = ?", (run_id,))
        row = cursor.fetchone()
        conn.close()

        if row:
            return self._parse_run(row)
        return None

    @staticmethod
    def _parse_run(row: sqlite3.Row) -> Dict:
        run = dict(row)
        run["settings"] = json.loads(run.pop("settings_json"))
        run["summary"] = json.loads(run.pop("summary_json"))
        return run

    def list_runs(self, search: str = None) -> List[Dict]:
        """List all runs, newest first, optionally filtered by label."""
        conn = self._connect()
        cursor = conn.cursor()

        if search:
            cursor.execute("""
                SELECT * FROM runs
                WHERE label LIKE ?
                ORDER BY created_at DESC, id DESC
            """, (f"%{search}%",))
        else:
            cursor.execute("SELECT * FROM runs ORDER BY created_at DESC, id DESC")

        rows = cursor.fetchall()
        conn.close()

        return [self._parse_run(row) for row in rows]

    def get_recent_runs(self, limit: int = 10) -> List[Dict]:
        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute("""
            SELECT * FROM runs
            ORDER BY created_at DESC, id DESC
            LIMIT ?
        """, (limit,))
        rows = cursor.fetchall()
        conn.close()
        return [self._parse_run(row) for row in rows]

    def get_run_steps(self, run_id: int) -> List[Dict]:
        """Get the per-step snapshots of a run, in step order."""
        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute("""
            SELECT * FROM run_steps
            WHERE run_id = ?
            ORDER BY step
        """, (run_id,))
        rows = cursor.fetchall()
        conn.close()

        steps = []
        for row in rows:
            step = dict(row)
            step["idle"] = {k: int(v) for k, v in json.loads(step.pop("idle_json")).items()}
            step["deposited"] = {k: int(v) for k, v in json.loads(step.pop("deposited_json")).items()}
            step["utilization_bps"] = json.loads(step.pop("utilization_json"))
            steps.append(step)
        return steps

    def get_run_events(self, run_id: int, event: str = None) -> List[Dict]:
        """Get router events of a run in emission order, optionally of one type."""
        conn = self._connect()
        cursor = conn.cursor()

        if event:
            cursor.execute("""
                SELECT * FROM router_events
                WHERE run_id = ? AND event = ?
                ORDER BY sequence
            """, (run_id, event))
        else:
            cursor.execute("""
                SELECT * FROM router_events
                WHERE run_id = ?
                ORDER BY sequence
            """, (run_id,))

        rows = cursor.fetchall()
        conn.close()

        events = []
        for row in rows:
            record = dict(row)
            record["amount"] = int(record["amount"]) if record["amount"] is not None else None
            record["payload"] = json.loads(record.pop("payload_json"))
            events.append(record)
        return events

    def delete_run(self, run_id: int) -> bool:
        """Delete a run and everything recorded for it."""
        conn = self._connect()
        cursor = conn.cursor()
        cursor.execute("DELETE FROM runs WHERE id = ?", (run_id,))
        deleted = cursor.rowcount > 0
        conn.commit()
        conn.close()
        return deleted
