from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from pyrolysis_monitor.core.phases.classifier import ANALYSIS_TAGS
from pyrolysis_monitor.core.phases.definitions import PhaseTable

PHASE_DEFS_YAML_PATH = Path(__file__).resolve().parents[1] / "configs" / "phase_defs.yaml"


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_phase_table(path: str | Path = PHASE_DEFS_YAML_PATH) -> PhaseTable:
    return PhaseTable.from_dict(load_yaml(path))


def load_analysis_tags(path: str | Path = PHASE_DEFS_YAML_PATH) -> tuple[str, ...]:
    tags = load_yaml(path).get("analysis_tags")
    if tags is None:
        return ANALYSIS_TAGS
    return tuple(str(t) for t in tags)
