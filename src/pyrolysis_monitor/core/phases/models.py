from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

import pandas as pd


class EventType(str, Enum):
    PHASE_CHANGE = "PHASE_CHANGE"
    INCIDENT = "INCIDENT"
    VALVE_CHANGE = "VALVE_CHANGE"
    EQUIPMENT_TOGGLE = "EQUIPMENT_TOGGLE"
    FUEL_ADD = "FUEL_ADD"
    OBSERVATION = "OBSERVATION"

    @classmethod
    def lookup(cls, value: str) -> EventType | None:
        """Return the member for value, or None for types this build does not know."""
        try:
            return cls(value)
        except ValueError:
            return None


def to_ts(value: str | datetime | pd.Timestamp) -> pd.Timestamp:
    # bad input raises; never coerced to NaT
    return pd.Timestamp(value)


def _opt_float(v: Any) -> float | None:
    return None if v is None else float(v)


@dataclass(frozen=True)
class ProcessEvent:
    id: str
    timestamp: str | datetime
    type: str  # raw value, unknown types allowed
    detail: str
    notes: str | None = None

    @property
    def ts(self) -> pd.Timestamp:
        return to_ts(self.timestamp)

    @staticmethod
    def from_record(r: dict[str, Any]) -> ProcessEvent:
        return ProcessEvent(
            id=str(r["id"]),
            timestamp=r["timestamp"],
            type=str(r["type"]),
            detail=str(r.get("detail") or ""),
            notes=r.get("notes"),
        )

    def to_record(self) -> dict[str, Any]:
        ts = self.timestamp
        return {
            "id": self.id,
            "timestamp": ts if isinstance(ts, str) else ts.isoformat(),
            "type": self.type,
            "detail": self.detail,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class Reading:
    timestamp: str | datetime
    reactor_temp: float | None = None
    control_temp: float | None = None
    steel_temp: float | None = None
    chain_temp: float | None = None

    @property
    def ts(self) -> pd.Timestamp:
        return to_ts(self.timestamp)

    @staticmethod
    def from_record(r: dict[str, Any]) -> Reading:
        return Reading(
            timestamp=r["timestamp"],
            reactor_temp=_opt_float(r.get("reactorTemp")),
            control_temp=_opt_float(r.get("controlTemp")),
            steel_temp=_opt_float(r.get("steelTemp")),
            chain_temp=_opt_float(r.get("chainTemp")),
        )


@dataclass(frozen=True)
class TempRange:
    min: float
    max: float


@dataclass(frozen=True)
class Phase:
    id: str
    key: str
    occurrence: int  # 1 for the first run through a bucket, 2 for the next one, ...

    name: str
    icon: str
    color: str
    bg: str

    start_time: pd.Timestamp
    end_time: pd.Timestamp
    duration_minutes: int

    events: tuple[ProcessEvent, ...]
    counts: dict[str, int]
    has_incidents: bool
    temp_range: TempRange | None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping in the shape the dashboard timeline consumes."""
        return {
            "id": self.id,
            "key": self.key,
            "occurrence": self.occurrence,
            "name": self.name,
            "icon": self.icon,
            "color": self.color,
            "bg": self.bg,
            "startTime": _epoch_ms(self.start_time),
            "endTime": _epoch_ms(self.end_time),
            "durationMinutes": self.duration_minutes,
            "events": [e.to_record() for e in self.events],
            "counts": dict(self.counts),
            "hasIncidents": self.has_incidents,
            "tempRange": (
                None
                if self.temp_range is None
                else {"min": self.temp_range.min, "max": self.temp_range.max}
            ),
        }


def _epoch_ms(t: pd.Timestamp) -> int:
    # naive timestamps are read as UTC, same as the API's ISO strings
    return int(t.value // 1_000_000)


def minutes_between(start_ts: pd.Timestamp, end_ts: pd.Timestamp) -> int:
    """Whole minutes from start_ts to end_ts, .5 rounded upward."""
    minutes = (end_ts - start_ts).total_seconds() / 60.0
    return int((minutes + 0.5) // 1)
