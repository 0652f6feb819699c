from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PhaseDef:
    key: str
    name: str
    max_temp: float | None  # exclusive upper bound on control temp; None for analysis
    icon: str
    color: str
    bg: str


@dataclass(frozen=True)
class PhaseTable:
    """
    Ordered temperature buckets plus the analysis descriptor.
      - A temperature falls into the first bucket whose max_temp it is below.
      - Unknown temperature (None) falls into the first bucket.
      - Anything at or above the last threshold stays in the last bucket.
    """

    buckets: tuple[PhaseDef, ...]
    analysis: PhaseDef

    def bucket_for(self, temp: float | None) -> PhaseDef:
        if temp is None:
            return self.buckets[0]
        for d in self.buckets:
            if d.max_temp is not None and temp < d.max_temp:
                return d
        return self.buckets[-1]

    def get(self, key: str) -> PhaseDef:
        if key == self.analysis.key:
            return self.analysis
        for d in self.buckets:
            if d.key == key:
                return d
        raise KeyError(key)

    @staticmethod
    def from_dict(doc: dict[str, Any]) -> PhaseTable:
        """
        doc format: loaded yaml dict (configs/phase_defs.yaml)
          buckets: [{key, name, max_temp, icon, color, bg}, ...]
          analysis: {key, name, icon, color, bg}
        Missing analysis section keeps the default descriptor.
        """
        raw = doc.get("buckets") or []
        if not raw:
            raise ValueError("phase table needs at least one bucket")
        buckets = tuple(_phase_def(b, need_threshold=True) for b in raw)

        limits = [float(b.max_temp) for b in buckets if b.max_temp is not None]
        if any(hi <= lo for lo, hi in zip(limits, limits[1:])):
            raise ValueError(f"bucket thresholds must be ascending: {limits}")

        analysis_doc = doc.get("analysis")
        analysis = (
            ANALYSIS_PHASE
            if analysis_doc is None
            else _phase_def(analysis_doc, need_threshold=False)
        )
        return PhaseTable(buckets=buckets, analysis=analysis)


def _phase_def(d: dict[str, Any], need_threshold: bool) -> PhaseDef:
    missing = [k for k in ("key", "name") if not d.get(k)]
    if missing:
        raise ValueError(f"phase definition missing {missing}: {d}")
    max_temp = d.get("max_temp")
    if need_threshold and max_temp is None:
        raise ValueError(f"bucket {d['key']} has no max_temp")
    return PhaseDef(
        key=str(d["key"]),
        name=str(d["name"]),
        max_temp=None if max_temp is None else float(max_temp),
        icon=str(d.get("icon", "")),
        color=str(d.get("color", "")),
        bg=str(d.get("bg", "")),
    )


PHASE_DEFS: tuple[PhaseDef, ...] = (
    PhaseDef("arranque", "Arranque", 50.0, "🔥", "#E8700A", "rgba(232,112,10,0.08)"),
    PhaseDef("calentamiento", "Calentamiento", 100.0, "📈", "#f59e0b", "rgba(245,158,11,0.08)"),
    PhaseDef(
        "calentamiento_plus",
        "Calentamiento Activo",
        200.0,
        "⚡",
        "#2D8CF0",
        "rgba(45,140,240,0.08)",
    ),
    PhaseDef("produccion", "Producción", 400.0, "✦", "#3d7a0a", "rgba(61,122,10,0.08)"),
)

ANALYSIS_PHASE = PhaseDef(
    "analisis",
    "Análisis & Aprendizajes",
    None,
    "📋",
    "rgba(39,57,73,0.6)",
    "rgba(39,57,73,0.05)",
)

DEFAULT_PHASE_TABLE = PhaseTable(buckets=PHASE_DEFS, analysis=ANALYSIS_PHASE)
