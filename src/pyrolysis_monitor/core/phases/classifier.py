from __future__ import annotations

from collections.abc import Iterable

from .models import EventType, ProcessEvent

ANALYSIS_TAGS: tuple[str, ...] = (
    "[HALLAZGO",
    "[DESCUBRIMIENTO",
    "[PROTOCOLO",
    "[COMPARACIÓN",
    "[CONCLUSIÓN",
    "[CRÍTICO",
    "[ALTO",
    "[MEDIO",
)


class AnalysisEventClassifier:
    """
    Minimal rule:
      - Only OBSERVATION events can be analysis events.
      - The detail must start with one of the bracketed tags (case-sensitive).
    """

    def __init__(self, tags: Iterable[str] = ANALYSIS_TAGS):
        self.tags = tuple(tags)

    def is_analysis(self, event: ProcessEvent) -> bool:
        if event.type != EventType.OBSERVATION:
            return False
        return event.detail.startswith(self.tags)

    def partition(
        self, events: Iterable[ProcessEvent]
    ) -> tuple[list[ProcessEvent], list[ProcessEvent]]:
        """Split into (analysis, operational), each keeping input order."""
        analysis: list[ProcessEvent] = []
        operational: list[ProcessEvent] = []
        for e in events:
            (analysis if self.is_analysis(e) else operational).append(e)
        return analysis, operational


_DEFAULT = AnalysisEventClassifier()


def is_analysis_event(event: ProcessEvent) -> bool:
    return _DEFAULT.is_analysis(event)
