from __future__ import annotations

from collections import Counter
from typing import Any


def format_size(num_bytes: int | None) -> str:
    if num_bytes is None:
        return "-"
    if num_bytes < 1024:
        return f"{num_bytes}B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f}KiB"
    return f"{num_bytes / (1024 * 1024):.1f}MiB"


def format_coord(value: Any) -> str:
    if value is None:
        return "-"
    try:
        return f"{float(value):.5f}"
    except (TypeError, ValueError):
        return str(value)


def count_features_by(collection: dict[str, Any], prop: str) -> dict[str, int]:
    """Count features of a FeatureCollection by one property, missing values as "-"."""
    counts: Counter[str] = Counter()
    for feature in collection.get("features") or []:
        if not isinstance(feature, dict):
            continue
        props = feature.get("properties") or {}
        value = props.get(prop) if isinstance(props, dict) else None
        counts[str(value) if value not in (None, "") else "-"] += 1
    return dict(sorted(counts.items()))
