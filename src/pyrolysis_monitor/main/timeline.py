from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd
import requests

from pyrolysis_monitor.core.config import load_analysis_tags, load_phase_table
from pyrolysis_monitor.core.phases.classifier import AnalysisEventClassifier
from pyrolysis_monitor.core.phases.definitions import DEFAULT_PHASE_TABLE
from pyrolysis_monitor.core.phases.detector import PhaseDetector
from pyrolysis_monitor.core.phases.display import (
    format_duration,
    ordered_counts,
    style_for,
    summarize_timeline,
)
from pyrolysis_monitor.core.phases.models import EventType, Phase, ProcessEvent, Reading


def api_get(db_api: str, path: str, params: dict | None = None) -> Any:
    """Send a GET to the dashboard API and return the decoded JSON body."""
    r = requests.get(f"{db_api}{path}", params=params, timeout=30)
    r.raise_for_status()
    return r.json()


def fetch_events(db_api: str, batch_id: str) -> list[ProcessEvent]:
    """Fetch one batch's process events (the API orders them by timestamp)."""
    records = api_get(db_api, f"/api/batches/{batch_id}/events")
    return [ProcessEvent.from_record(r) for r in records]


def fetch_readings(db_api: str, batch_id: str) -> list[Reading]:
    """Fetch one batch's temperature readings (ascending by timestamp)."""
    records = api_get(db_api, f"/api/batches/{batch_id}/readings")
    return [Reading.from_record(r) for r in records]


def load_json_records(path: Path) -> list[dict]:
    """Read a JSON array of records; a non-list document is rejected."""
    doc = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(doc, list):
        raise ValueError(f"expected a JSON array in {path}")
    return doc


def load_events_json(path: Path) -> list[ProcessEvent]:
    """Load events from a JSON export, keeping file order."""
    return [ProcessEvent.from_record(r) for r in load_json_records(path)]


def load_readings_json(path: Path) -> list[Reading]:
    """Load readings from a JSON export and sort them by timestamp."""
    readings = [Reading.from_record(r) for r in load_json_records(path)]
    return sorted(readings, key=lambda r: r.ts)


def build_detector(phases_config: Path | None) -> PhaseDetector:
    """Build a detector from an optional YAML phase table (default table otherwise)."""
    if phases_config is None:
        return PhaseDetector(DEFAULT_PHASE_TABLE)
    table = load_phase_table(phases_config)
    classifier = AnalysisEventClassifier(load_analysis_tags(phases_config))
    return PhaseDetector(table, classifier)


def phases_to_frame(phases: list[Phase]) -> pd.DataFrame:
    """Flatten phases into one row each, with a count column per known event type."""
    count_cols = [f"n_{t.value}" for t in EventType]
    rows: list[dict] = []
    for p in phases:
        row = {
            "phase_id": p.id,
            "key": p.key,
            "occurrence": p.occurrence,
            "name": p.name,
            "start_ts": p.start_time,
            "end_ts": p.end_time,
            "duration_minutes": p.duration_minutes,
            "n_events": len(p.events),
            "has_incidents": p.has_incidents,
            "temp_min": None if p.temp_range is None else p.temp_range.min,
            "temp_max": None if p.temp_range is None else p.temp_range.max,
        }
        for t in EventType:
            row[f"n_{t.value}"] = int(p.counts.get(t.value, 0))
        rows.append(row)
    columns = [
        "phase_id",
        "key",
        "occurrence",
        "name",
        "start_ts",
        "end_ts",
        "duration_minutes",
        "n_events",
        "has_incidents",
        "temp_min",
        "temp_max",
        *count_cols,
    ]
    return pd.DataFrame(rows, columns=columns)


def save_phases_csv(df: pd.DataFrame, out_path: Path) -> str:
    """Write the phase table as CSV and return the written path."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out_path.as_posix(), index=False)
    return out_path.as_posix()


def describe_phase(p: Phase) -> str:
    """One console line per phase."""
    badges = " ".join(f"{style_for(t).icon}{n}" for t, n in ordered_counts(p.counts))
    temp = "-" if p.temp_range is None else f"{p.temp_range.min:g}-{p.temp_range.max:g}C"
    return (
        f"PHASE: id={p.id} name={p.name!r} occurrence={p.occurrence} "
        f"start={p.start_time.isoformat()} end={p.end_time.isoformat()} "
        f"duration={format_duration(p.duration_minutes)} events={len(p.events)} "
        f"incidents={p.has_incidents} temp={temp} [{badges}]"
    )


def main():
    """Load one batch, detect its phases and print / export them."""
    ap = argparse.ArgumentParser()
    ap.add_argument("--batch-id", help="fetch events/readings of this batch from the API")
    ap.add_argument("--db-api", default="http://localhost:3000")
    ap.add_argument("--events", help="events JSON export (instead of --batch-id)")
    ap.add_argument("--readings", help="readings JSON export (instead of --batch-id)")
    ap.add_argument("--phases-config", default=None, help="YAML phase table")
    ap.add_argument("--csv-out", default=None)
    ap.add_argument("--json", action="store_true", help="dump phases as JSON instead")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()

    if args.batch_id is None and (args.events is None or args.readings is None):
        ap.error("either --batch-id or both --events and --readings are required")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.batch_id is not None:
        events = fetch_events(args.db_api, args.batch_id)
        readings = fetch_readings(args.db_api, args.batch_id)
    else:
        events = load_events_json(Path(args.events))
        readings = load_readings_json(Path(args.readings))

    if not events:
        print(f"SKIP: no events (readings={len(readings)})")
        return

    detector = build_detector(Path(args.phases_config) if args.phases_config else None)
    phases = detector.detect(events, readings)

    if args.json:
        print(json.dumps([p.to_dict() for p in phases], ensure_ascii=False, indent=2))
    else:
        for p in phases:
            print(describe_phase(p))
        summary = summarize_timeline(events)
        print(f"OK: phases={len(phases)} {summary.label}")

    if args.csv_out:
        path = save_phases_csv(phases_to_frame(phases), Path(args.csv_out))
        print(f"OK: wrote {len(phases)} phases -> {path}")


if __name__ == "__main__":
    main()
