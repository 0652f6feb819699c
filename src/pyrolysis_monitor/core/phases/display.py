from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd

from .models import EventType, ProcessEvent, minutes_between


@dataclass(frozen=True)
class EventTypeStyle:
    label: str
    color: str
    bg: str
    icon: str


EVENT_TYPE_STYLES: dict[EventType, EventTypeStyle] = {
    EventType.PHASE_CHANGE: EventTypeStyle(
        "Cambio de Fase", "#3d7a0a", "rgba(181,233,81,0.15)", "▶"
    ),
    EventType.INCIDENT: EventTypeStyle("Incidente", "#DC2626", "rgba(220,38,38,0.08)", "⚠"),
    EventType.VALVE_CHANGE: EventTypeStyle("Valvula", "#E8700A", "rgba(232,112,10,0.1)", "◈"),
    EventType.EQUIPMENT_TOGGLE: EventTypeStyle(
        "Equipo", "#2D8CF0", "rgba(45,140,240,0.1)", "⚙"
    ),
    EventType.FUEL_ADD: EventTypeStyle("Combustible", "#7C5CFC", "rgba(124,92,252,0.1)", "+"),
    EventType.OBSERVATION: EventTypeStyle(
        "Observacion", "rgba(39,57,73,0.5)", "rgba(39,57,73,0.06)", "○"
    ),
}

OTHER_STYLE = EventTypeStyle("Otro", "rgba(39,57,73,0.5)", "rgba(39,57,73,0.06)", "·")

# badge order on phase cards: incidents first
BADGE_ORDER: tuple[EventType, ...] = (
    EventType.INCIDENT,
    EventType.PHASE_CHANGE,
    EventType.EQUIPMENT_TOGGLE,
    EventType.FUEL_ADD,
    EventType.VALVE_CHANGE,
    EventType.OBSERVATION,
)


def style_for(event_type: str) -> EventTypeStyle:
    t = EventType.lookup(event_type)
    if t is None:
        return OTHER_STYLE
    return EVENT_TYPE_STYLES[t]


def ordered_counts(counts: dict[str, int]) -> list[tuple[str, int]]:
    """Non-zero counts in badge order; unknown types go last, in their original order."""
    rank = {t.value: i for i, t in enumerate(BADGE_ORDER)}
    items = [(k, n) for k, n in counts.items() if n > 0]
    # sorted() is stable, so unknowns keep their relative order
    return sorted(items, key=lambda kv: rank.get(kv[0], len(rank)))


def format_duration(minutes: int) -> str:
    if minutes < 1:
        return "<1m"
    h, m = divmod(int(minutes), 60)
    return f"{h}h {m}m" if h > 0 else f"{m}m"


def format_elapsed(start_ts: pd.Timestamp, ts: pd.Timestamp) -> str:
    elapsed_min = minutes_between(start_ts, ts)
    if elapsed_min >= 60:
        return f"+{elapsed_min // 60}h {elapsed_min % 60}m"
    return f"+{elapsed_min}m"


@dataclass(frozen=True)
class TimelineSummary:
    n_events: int
    total_minutes: int

    @property
    def label(self) -> str:
        h, m = divmod(self.total_minutes, 60)
        return f"{self.n_events} eventos registrados, duración total {h}h {m}m"


def summarize_timeline(events: Sequence[ProcessEvent]) -> TimelineSummary:
    if len(events) < 2:
        return TimelineSummary(n_events=len(events), total_minutes=0)
    total = minutes_between(events[0].ts, events[-1].ts)
    return TimelineSummary(n_events=len(events), total_minutes=total)
