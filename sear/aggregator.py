"""
Aggregator / ranker
===================

Turns a list of CanonicalRecord objects into per-category totals and answers
"which event types are the most harmful?" questions:

- `aggregate`          -> {event_type: CategorySummary}
- `top_n`              -> the N categories with the largest value of one metric
- `compliance_impact`  -> share of each metric lost to non-compliant labels

Top-N uses a heap (`heapq.nsmallest` on a (-value, label) key), so ties are
broken by ascending label and the output is reproducible.
"""

from __future__ import annotations
from collections import Counter
from typing import Callable, Dict, Iterable, List, Mapping, Tuple
import heapq

from .errors import InvalidArgument
from .models import CanonicalRecord, CategorySummary, ComplianceImpact

METRICS = ("fatalities", "injuries", "property_damage", "crop_damage", "economic_damage")

_METRIC_ALIASES = {
    "fatalities": "fatalities",
    "deaths": "fatalities",
    "injuries": "injuries",
    "property_damage": "property_damage",
    "propertydamage": "property_damage",
    "crop_damage": "crop_damage",
    "cropdamage": "crop_damage",
    "economic_damage": "economic_damage",
    "economicdamage": "economic_damage",
    "damage": "economic_damage",
}


def metric_name(metric: str) -> str:
    """Resolve a metric name or alias (e.g. "propertyDamage") to its canonical name."""
    key = str(metric).strip().lower()
    if key not in _METRIC_ALIASES:
        raise InvalidArgument(f"Unknown metric {metric!r}. Use one of: {', '.join(METRICS)}")
    return _METRIC_ALIASES[key]


def _metric_key(metric: str) -> Callable[[CategorySummary], float]:
    name = metric_name(metric)
    return lambda s: getattr(s, name)


def aggregate(records: Iterable[CanonicalRecord]) -> Dict[str, CategorySummary]:
    """Group records by event type and sum the metrics."""
    acc: Dict[str, List[float]] = {}
    for r in records:
        a = acc.setdefault(r.event_type, [0, 0, 0.0, 0.0, 0])
        a[0] += r.fatalities
        a[1] += r.injuries
        a[2] += r.property_damage
        a[3] += r.crop_damage
        a[4] += 1
    return {
        k: CategorySummary(
            event_type=k,
            fatalities=int(a[0]),
            injuries=int(a[1]),
            property_damage=float(a[2]),
            crop_damage=float(a[3]),
            events=int(a[4]),
        )
        for k, a in acc.items()
    }


def top_n(summaries: Mapping[str, CategorySummary], metric: str, n: int) -> List[Tuple[str, float]]:
    """Return the `n` categories with the largest `metric`, as (label, value) pairs.

    Sorted descending by value, ties broken by label ascending.
    If fewer than `n` categories exist, all of them are returned.
    """
    if n < 1:
        raise InvalidArgument(f"n must be >= 1, got {n}")
    if not summaries:
        raise InvalidArgument("Cannot rank an empty summary set")
    key = _metric_key(metric)
    pairs = [(label, key(s)) for label, s in summaries.items()]
    return heapq.nsmallest(n, pairs, key=lambda p: (-p[1], p[0]))


def _totals(summaries: Mapping[str, CategorySummary]) -> Dict[str, float]:
    return {m: sum(getattr(s, m) for s in summaries.values()) for m in METRICS}


def compliance_impact(
    full: Mapping[str, CategorySummary],
    compliant: Mapping[str, CategorySummary],
) -> List[ComplianceImpact]:
    """Per metric, how much of the full total comes from non-compliant labels.

    `full` aggregates every normalized record, `compliant` only the compliant
    ones. The excluded share is `ComplianceImpact.excluded_pct`.
    """
    ft = _totals(full)
    ct = _totals(compliant)
    return [ComplianceImpact(metric=m, full_total=ft[m], compliant_total=ct[m]) for m in METRICS]


def top_rejected_labels(records: Iterable[CanonicalRecord], n: int) -> List[Tuple[str, int]]:
    """Most frequent non-compliant labels with their record counts."""
    if n < 1:
        raise InvalidArgument(f"n must be >= 1, got {n}")
    c = Counter(r.event_type for r in records if not r.compliant)
    return heapq.nsmallest(n, c.items(), key=lambda p: (-p[1], p[0]))
