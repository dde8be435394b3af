"""Extract the current fear & greed reading from the shapes the data service returns.

The service has answered with a list of readings, a flat object, and an object
nested under ``data``. Each shape is a predicate plus an extractor; the first
predicate that matches decides the result, even when its extractor finds nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence

from macro_indicators.core.models import SentimentSnapshot
from macro_indicators.data.aggregation import coerce_number

READING_KEY = "crypto_fear_greed"


@dataclass(frozen=True)
class SnapshotShape:
    name: str
    matches: Callable[[Mapping[str, Any]], bool]
    extract: Callable[[Mapping[str, Any]], Optional[SentimentSnapshot]]


def _reading_from(entry: Any) -> Optional[SentimentSnapshot]:
    if not isinstance(entry, Mapping):
        return None
    reading = entry.get(READING_KEY)
    if not reading or not isinstance(reading, Mapping):
        return None
    return SentimentSnapshot(
        value=coerce_number(reading.get("value")),
        classification=reading.get("classification"),
        timestamp=entry.get("timestamp") or entry.get("collected_at"),
    )


def _is_reading_list(body: Mapping[str, Any]) -> bool:
    data = body.get("data")
    return isinstance(data, list) and len(data) > 0


def _latest_in_list(body: Mapping[str, Any]) -> Optional[SentimentSnapshot]:
    return _reading_from(body["data"][-1])


def _is_flat(body: Mapping[str, Any]) -> bool:
    return bool(body.get(READING_KEY))


def _is_nested(body: Mapping[str, Any]) -> bool:
    data = body.get("data")
    return isinstance(data, Mapping) and bool(data.get(READING_KEY))


SNAPSHOT_SHAPES: Sequence[SnapshotShape] = (
    SnapshotShape("list", _is_reading_list, _latest_in_list),
    SnapshotShape("flat", _is_flat, _reading_from),
    SnapshotShape("nested", _is_nested, lambda body: _reading_from(body["data"])),
)


def extract_snapshot(
    body: Any, shapes: Sequence[SnapshotShape] = SNAPSHOT_SHAPES
) -> Optional[SentimentSnapshot]:
    if not isinstance(body, Mapping):
        return None
    for shape in shapes:
        if shape.matches(body):
            return shape.extract(body)
    return None
