"""Collapse high-frequency samples into one representative sample per clock hour."""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from macro_indicators.core.models import HourlyAggregate, PairAggregate

HOUR_MS = 60 * 60 * 1000
TIMESTAMP_FIELD = "timestamp"


def hour_bucket(timestamp: int) -> int:
    """Truncate a millisecond timestamp to the start of its clock hour."""
    return int(timestamp) // HOUR_MS * HOUR_MS


def aggregate_to_hourly(
    samples: Iterable[Mapping[str, Any]] | None, value_field: str = "price"
) -> List[HourlyAggregate]:
    """Keep the latest sample of every hour for a single-value indicator.

    Samples without a timestamp or without ``value_field`` are dropped.
    Among samples sharing the winning timestamp the last one in input order wins.
    """
    records: List[Tuple[int, float]] = []
    rows: List[Tuple[int, int]] = []
    for sample in samples or ():
        if not isinstance(sample, Mapping):
            continue
        timestamp = _coerce_timestamp(sample.get(TIMESTAMP_FIELD))
        value = coerce_number(sample.get(value_field))
        if timestamp is None or value is None:
            continue
        rows.append((len(records), timestamp))
        records.append((timestamp, value))

    return [
        HourlyAggregate(
            hour_timestamp=hour,
            value=records[position][1],
            original_timestamp=records[position][0],
        )
        for position, hour in _latest_per_hour(rows)
    ]


def aggregate_pairs_to_hourly(
    samples: Iterable[Mapping[str, Any]] | None,
) -> List[PairAggregate]:
    """Keep the latest multi-pair sample of every hour.

    Every key of the winning sample except the timestamp is carried into
    ``fields``; the key set may differ from one hour to the next.
    """
    records: List[Tuple[int, Mapping[str, Any]]] = []
    rows: List[Tuple[int, int]] = []
    for sample in samples or ():
        if not isinstance(sample, Mapping):
            continue
        timestamp = _coerce_timestamp(sample.get(TIMESTAMP_FIELD))
        if timestamp is None:
            continue
        rows.append((len(records), timestamp))
        records.append((timestamp, sample))

    out: List[PairAggregate] = []
    for position, hour in _latest_per_hour(rows):
        timestamp, sample = records[position]
        fields = {key: value for key, value in sample.items() if key != TIMESTAMP_FIELD}
        out.append(PairAggregate(hour_timestamp=hour, fields=fields, original_timestamp=timestamp))
    return out


def _latest_per_hour(rows: Sequence[Tuple[int, int]]) -> List[Tuple[int, int]]:
    """Return ``(position, hour)`` of the winning row per hour, ascending by hour."""
    if not rows:
        return []
    frame = pd.DataFrame(rows, columns=["position", "timestamp"])
    frame["hour"] = frame["timestamp"] // HOUR_MS * HOUR_MS
    # position as secondary key makes equal timestamps resolve to input order
    frame = frame.sort_values(["timestamp", "position"], kind="mergesort")
    latest = frame.drop_duplicates(subset="hour", keep="last").sort_values("hour")
    return [(int(row.position), int(row.hour)) for row in latest.itertuples(index=False)]


def _coerce_timestamp(raw: Any) -> Optional[int]:
    number = coerce_number(raw)
    if number is None:
        return None
    return int(number)


def coerce_number(raw: Any) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        number = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number
