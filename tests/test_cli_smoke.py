import json
import os
import subprocess
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text

pytest.importorskip("typer")

PYTHONPATH = str(Path(__file__).resolve().parents[1] / "src")


def _seed_orders(dsn: str) -> None:
    engine = create_engine(dsn)
    noon = datetime.now(timezone.utc).replace(hour=12, minute=0, second=0, microsecond=0)
    rows = [
        {
            "id": f"o{day}",
            "created_at": (noon - timedelta(days=day)).strftime("%Y-%m-%d %H:%M:%S"),
            "total": 100.0 + day,
            "status": "completed",
        }
        for day in range(1, 21)
    ]
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TABLE orders (id TEXT PRIMARY KEY, created_at TEXT, total REAL, "
                "status TEXT, branch_id TEXT, package_usages TEXT, customer_id TEXT)"
            )
        )
        conn.execute(
            text(
                "INSERT INTO orders (id, created_at, total, status) "
                "VALUES (:id, :created_at, :total, :status)"
            ),
            rows,
        )
    engine.dispose()


def _cli(env, *args):
    result = subprocess.run(
        [sys.executable, "-m", "forecast_engine.cli.main", *args],
        capture_output=True,
        text=True,
        env=env,
    )
    assert result.returncode == 0, result.stderr
    return json.loads(result.stdout)


def test_cli_smoke(tmp_path) -> None:
    dsn = f"sqlite:///{tmp_path / 'cli.db'}"
    _seed_orders(dsn)
    env = {**os.environ, "DB_DSN": dsn, "PYTHONPATH": PYTHONPATH, "FE_LOG_LEVEL": "WARNING"}

    run = _cli(env, "run", "--metric", "orders", "--horizon-days", "5")
    assert run["count"] == 5
    assert all(f["value"] > 0 for f in run["forecasts"])

    shown = _cli(env, "show", "--metric", "orders")
    assert shown["count"] == 5

    cohorts = _cli(env, "cohorts")
    assert [c["id"] for c in cohorts["cohorts"]] == ["all", "highValue", "recurring", "newCustomers"]

    graded = _cli(env, "accuracy", "--metric", "orders")
    assert graded["sample_size"] == 0


def test_cli_reports_invalid_dates(tmp_path) -> None:
    env = {**os.environ, "DB_DSN": f"sqlite:///{tmp_path / 'cli.db'}", "PYTHONPATH": PYTHONPATH}
    result = subprocess.run(
        [
            sys.executable, "-m", "forecast_engine.cli.main",
            "history", "--metric", "revenue", "--start", "yesterday", "--end", "2024-01-01",
        ],
        capture_output=True,
        text=True,
        env=env,
    )
    assert result.returncode == 1
    assert "Error" in result.stderr
