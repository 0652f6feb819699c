from __future__ import annotations

import argparse
import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path

import numpy as np


@dataclass(frozen=True)
class HeatProfile:
    start_temp: float = 20.0
    peak_temp: float = 430.0
    ramp_fraction: float = 0.6  # share of the run spent ramping up to peak
    dip_at: float | None = None  # position in [0, 1] of a temporary cool-down
    dip_depth: float = 0.0
    dip_width: float = 0.08
    noise_sigma: float = 1.5


def build_temperature_profile(n_points: int, profile: HeatProfile, seed: int) -> np.ndarray:
    """
    Ramp from start_temp to peak_temp, then hold.
    A dip subtracts a triangular notch centred on dip_at.
    """
    if n_points <= 0:
        return np.zeros(0, dtype=float)
    rng = np.random.default_rng(seed)
    x = np.linspace(0.0, 1.0, num=n_points)

    ramp = np.clip(x / profile.ramp_fraction, 0.0, 1.0)
    temp = profile.start_temp + (profile.peak_temp - profile.start_temp) * ramp

    if profile.dip_at is not None and profile.dip_depth > 0:
        notch = np.clip(1.0 - np.abs(x - profile.dip_at) / profile.dip_width, 0.0, 1.0)
        temp = temp - profile.dip_depth * notch

    temp = temp + rng.normal(0.0, profile.noise_sigma, size=temp.shape)
    return np.round(temp, 1)


def generate_readings(
    start_ts: datetime,
    hours: float,
    profile: HeatProfile,
    seed: int,
    cadence_min: int = 5,
) -> list[dict]:
    if start_ts.tzinfo is not None:
        raise ValueError("start_ts must be a naive datetime (no timezone info)")
    n = int(hours * 60 // cadence_min) + 1
    control = build_temperature_profile(n, profile, seed)
    rng = np.random.default_rng(seed + 1)
    # reactor runs hotter than the control thermocouple; steel/chain lag behind
    reactor = control + 15.0 + rng.normal(0.0, 2.0, size=n)
    steel = control * 0.8
    chain = control * 0.6

    out: list[dict] = []
    for i in range(n):
        out.append(
            {
                "timestamp": (start_ts + timedelta(minutes=i * cadence_min)).isoformat(),
                "reactorTemp": float(round(reactor[i], 1)),
                "controlTemp": float(control[i]),
                "steelTemp": float(round(steel[i], 1)),
                "chainTemp": float(round(chain[i], 1)),
            }
        )
    return out


OPERATIONAL_ROTATION = [
    ("VALVE_CHANGE", "Válvula de gas abierta"),
    ("FUEL_ADD", "Carga de combustible"),
    ("OBSERVATION", "Temp estable"),
    ("EQUIPMENT_TOGGLE", "Condensador encendido"),
]

ANALYSIS_NOTES = [
    "[HALLAZGO] Rendimiento de aceite por encima del lote anterior",
    "[CONCLUSIÓN] Mantener rampa de calentamiento",
]


def generate_events(
    readings: list[dict],
    every_min: int = 20,
    incident_at: int | None = None,
    with_analysis: bool = True,
) -> list[dict]:
    """
    One PHASE_CHANGE at start, then operational events every `every_min` minutes.
    incident_at: index (in emitted events) replaced by an INCIDENT.
    Analysis notes are stamped after the last reading.
    """
    if not readings:
        return []
    start = datetime.fromisoformat(readings[0]["timestamp"])
    end = datetime.fromisoformat(readings[-1]["timestamp"])

    events: list[dict] = [_event(0, start, "PHASE_CHANGE", "Inicio de lote")]
    t = start + timedelta(minutes=every_min)
    k = 0
    while t <= end:
        etype, detail = OPERATIONAL_ROTATION[k % len(OPERATIONAL_ROTATION)]
        if incident_at is not None and len(events) == incident_at:
            etype, detail = "INCIDENT", "Fuga en sello del reactor"
        events.append(_event(len(events), t, etype, detail))
        t += timedelta(minutes=every_min)
        k += 1

    if with_analysis:
        for j, note in enumerate(ANALYSIS_NOTES, start=1):
            events.append(_event(len(events), end + timedelta(hours=j), "OBSERVATION", note))
    return events


def _event(i: int, ts: datetime, etype: str, detail: str) -> dict:
    return {
        "id": f"evt-{i:04d}",
        "timestamp": ts.isoformat(),
        "type": etype,
        "detail": detail,
        "notes": None,
    }


def write_batch_json(
    out_dir: Path,
    start_ts: datetime,
    hours: float,
    seed: int,
    dip_at: float | None = None,
    dip_depth: float = 0.0,
    incident_at: int | None = None,
) -> tuple[Path, Path]:
    profile = HeatProfile(dip_at=dip_at, dip_depth=dip_depth)
    readings = generate_readings(start_ts, hours, profile, seed)
    events = generate_events(readings, incident_at=incident_at)

    out_dir.mkdir(parents=True, exist_ok=True)
    events_path = out_dir / "events.json"
    readings_path = out_dir / "readings.json"
    events_path.write_text(json.dumps(events, ensure_ascii=False, indent=2), encoding="utf-8")
    readings_path.write_text(json.dumps(readings, ensure_ascii=False, indent=2), encoding="utf-8")
    print(
        f"OK: wrote {len(events)} events, {len(readings)} readings -> {out_dir.as_posix()}"
    )
    return events_path, readings_path


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--out-dir", default="data/batch_sim")
    ap.add_argument("--start", default="2026-02-19T08:00:00")
    ap.add_argument("--hours", type=float, default=8.0)
    ap.add_argument("--seed", type=int, default=42)
    ap.add_argument("--dip-at", type=float, default=None)
    ap.add_argument("--dip-depth", type=float, default=0.0)
    ap.add_argument("--incident-at", type=int, default=None)
    args = ap.parse_args()
    write_batch_json(
        Path(args.out_dir),
        datetime.fromisoformat(args.start),
        args.hours,
        args.seed,
        args.dip_at,
        args.dip_depth,
        args.incident_at,
    )


if __name__ == "__main__":
    main()
