from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from .classifier import AnalysisEventClassifier
from .definitions import DEFAULT_PHASE_TABLE, PhaseDef, PhaseTable
from .models import EventType, Phase, ProcessEvent, Reading, minutes_between
from .temperature import control_temp_at, temp_range

logger = logging.getLogger(__name__)


@dataclass
class _Group:
    phase_def: PhaseDef
    occurrence: int
    events: list[ProcessEvent] = field(default_factory=list)


class PhaseDetector:
    """
    Group a batch's events into operational phases.
      - Analysis observations are pulled out first and end up in one trailing phase.
      - Remaining events are bucketed by the control temperature nearest to them.
      - A new phase starts whenever the bucket differs from the previous event's,
        so a bucket revisited later (cool down then reheat) becomes its own phase.
    """

    def __init__(
        self,
        table: PhaseTable = DEFAULT_PHASE_TABLE,
        classifier: AnalysisEventClassifier | None = None,
    ):
        self.table = table
        self.classifier = classifier or AnalysisEventClassifier()

    def detect(self, events: Sequence[ProcessEvent], readings: Sequence[Reading]) -> list[Phase]:
        if not events:
            return []

        analysis, operational = self.classifier.partition(events)
        groups = self._group_by_bucket(operational, readings)

        phases: list[Phase] = []
        for g in groups:
            phases.append(self._build_phase(len(phases), g, readings, with_temp=True))

        if analysis:
            g = _Group(phase_def=self.table.analysis, occurrence=1, events=analysis)
            phases.append(self._build_phase(len(phases), g, readings, with_temp=False))

        logger.debug(
            "detected %d phases from %d events (%d analysis), %d readings",
            len(phases),
            len(events),
            len(analysis),
            len(readings),
        )
        return phases

    def _group_by_bucket(
        self, events: list[ProcessEvent], readings: Sequence[Reading]
    ) -> list[_Group]:
        groups: list[_Group] = []
        seen: Counter[str] = Counter()
        streak_key: str | None = None

        for e in events:
            d = self.table.bucket_for(control_temp_at(e.ts, readings))
            if d.key != streak_key:
                seen[d.key] += 1
                groups.append(_Group(phase_def=d, occurrence=seen[d.key]))
                streak_key = d.key
            groups[-1].events.append(e)
        return groups

    @staticmethod
    def _build_phase(
        idx: int, g: _Group, readings: Sequence[Reading], with_temp: bool
    ) -> Phase:
        d = g.phase_def
        start_ts = g.events[0].ts
        end_ts = g.events[-1].ts
        return Phase(
            id=f"phase-{idx}",
            key=d.key,
            occurrence=g.occurrence,
            name=d.name,
            icon=d.icon,
            color=d.color,
            bg=d.bg,
            start_time=start_ts,
            end_time=end_ts,
            duration_minutes=minutes_between(start_ts, end_ts),
            events=tuple(g.events),
            counts=dict(Counter(e.type for e in g.events)),
            has_incidents=any(e.type == EventType.INCIDENT for e in g.events),
            temp_range=temp_range(start_ts, end_ts, readings) if with_temp else None,
        )


def detect_phases(
    events: Sequence[ProcessEvent],
    readings: Sequence[Reading],
    table: PhaseTable | None = None,
) -> list[Phase]:
    return PhaseDetector(table or DEFAULT_PHASE_TABLE).detect(events, readings)
