"""Repository for regional summary runs."""

import json
import sqlite3
from dataclasses import asdict

from surfcast.models.summary import AggregationReport


def save_report(
    conn: sqlite3.Connection, report: AggregationReport, config_hash: str = ""
) -> int:
    """Persist a regional summary run. Returns the row id."""
    cursor = conn.execute(
        "INSERT INTO summary_runs "
        "(run_id, region, config_hash, stage, beaches_requested, beaches_succeeded, "
        "failed_json, cards_json, duration_seconds) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
        (
            report.run_id,
            report.region,
            config_hash,
            report.stage.value,
            len(report.requested),
            len(report.succeeded),
            json.dumps([list(k) for k in report.failed]),
            json.dumps([asdict(c) for c in report.cards]),
            report.duration_seconds,
        ),
    )
    conn.commit()
    assert cursor.lastrowid is not None
    return cursor.lastrowid


def get_latest_report(conn: sqlite3.Connection, region: str | None = None) -> dict | None:
    """Most recent summary run, optionally for one region, with JSON columns decoded."""
    if region is None:
        row = conn.execute(
            "SELECT * FROM summary_runs ORDER BY id DESC LIMIT 1"
        ).fetchone()
    else:
        row = conn.execute(
            "SELECT * FROM summary_runs WHERE region = ? ORDER BY id DESC LIMIT 1",
            (region,),
        ).fetchone()
    if row is None:
        return None
    result = dict(row)
    result["failed"] = json.loads(result.pop("failed_json"))
    result["cards"] = json.loads(result.pop("cards_json"))
    return result
