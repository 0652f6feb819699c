from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from pyrolysis_monitor.core.phases.detector import detect_phases
from pyrolysis_monitor.main import timeline
from pyrolysis_monitor.tools.sim_data_generator import generate_batch as gb

pytestmark = pytest.mark.integration


def _run(tmp_path: Path, **kwargs) -> tuple[list, list]:
    events_path, readings_path = gb.write_batch_json(
        out_dir=tmp_path,
        start_ts=datetime.fromisoformat("2026-02-19T08:00:00"),
        hours=8,
        seed=42,
        **kwargs,
    )
    events = timeline.load_events_json(events_path)
    readings = timeline.load_readings_json(readings_path)
    return events, readings


def test_generated_batch_walks_through_all_buckets(tmp_path: Path) -> None:
    events, readings = _run(tmp_path)

    phases = detect_phases(events, readings)

    assert [p.key for p in phases] == [
        "arranque",
        "calentamiento",
        "calentamiento_plus",
        "produccion",
        "analisis",
    ]
    assert sum(len(p.events) for p in phases) == len(events)
    assert [e.id for p in phases[:-1] for e in p.events] == [
        e.id for e in events if not e.detail.startswith("[")
    ]
    assert phases[-1].temp_range is None
    assert phases[3].temp_range is not None
    assert phases[3].temp_range.max >= 400


def test_generated_dip_reopens_earlier_bucket(tmp_path: Path) -> None:
    events, readings = _run(tmp_path, dip_at=0.8, dip_depth=300.0)

    phases = detect_phases(events, readings)

    assert [(p.key, p.occurrence) for p in phases] == [
        ("arranque", 1),
        ("calentamiento", 1),
        ("calentamiento_plus", 1),
        ("produccion", 1),
        ("calentamiento_plus", 2),
        ("produccion", 2),
        ("analisis", 1),
    ]


def test_generated_incident_is_flagged(tmp_path: Path) -> None:
    events, readings = _run(tmp_path, incident_at=2)

    phases = detect_phases(events, readings)

    flagged = [p for p in phases if p.has_incidents]
    assert len(flagged) == 1
    assert any(e.type == "INCIDENT" for e in flagged[0].events)
