from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pandas as pd

from .models import Reading, TempRange


def control_temp_at(target: pd.Timestamp, readings: Sequence[Reading]) -> float | None:
    """
    Temperature of the reading nearest to target (no interpolation).
    Uses control_temp, falls back to reactor_temp of that same reading.
    Equal distances resolve to the earlier reading in input order.
    """
    if len(readings) == 0:
        return None

    stamps = np.array([r.ts.value for r in readings], dtype=np.int64)
    dist = np.abs(stamps - target.value)
    # argmin returns the first index on ties
    nearest = readings[int(np.argmin(dist))]

    if nearest.control_temp is not None:
        return nearest.control_temp
    return nearest.reactor_temp


def temp_range(
    start_ts: pd.Timestamp, end_ts: pd.Timestamp, readings: Sequence[Reading]
) -> TempRange | None:
    """min/max control_temp over readings in [start_ts, end_ts], None if nothing qualifies."""
    vals = [
        r.control_temp
        for r in readings
        if r.control_temp is not None and start_ts <= r.ts <= end_ts
    ]
    if not vals:
        return None
    arr = np.array(vals, dtype=float)
    return TempRange(min=float(arr.min()), max=float(arr.max()))
