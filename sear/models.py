"""
Data model (RawRecord -> CanonicalRecord -> CategorySummary)
============================================================

Each row of the Storm Events CSV becomes a `RawRecord`. The normalizer derives
one `CanonicalRecord` per surviving row, and the aggregator folds those into
one `CategorySummary` per event type.

All three are immutable (`frozen=True`): every stage builds new objects and
never edits the previous stage's output, so the pipeline can be re-run on the
same input and give the same answer.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class RawRecord:
    """One row of the input file, as read (only the columns SEAR uses)."""
    record_id: int
    begin_date: datetime
    event_type: str
    fatalities: int
    injuries: int
    prop_dmg: float
    prop_dmg_exp: Optional[str]
    crop_dmg: float
    crop_dmg_exp: Optional[str]


@dataclass(frozen=True)
class CanonicalRecord:
    """A cleaned record: canonical event type + damages in US$."""
    record_id: int
    begin_date: datetime
    event_type: str
    compliant: bool
    fatalities: int
    injuries: int
    # stored in US$ (scale code already applied)
    property_damage: float
    crop_damage: float

    @property
    def economic_damage(self) -> float:
        return self.property_damage + self.crop_damage


@dataclass(frozen=True)
class CategorySummary:
    """Summed impact of all records sharing one canonical event type."""
    event_type: str
    fatalities: int = 0
    injuries: int = 0
    property_damage: float = 0.0
    crop_damage: float = 0.0
    events: int = 0

    @property
    def economic_damage(self) -> float:
        return self.property_damage + self.crop_damage


@dataclass(frozen=True)
class ComplianceImpact:
    """How much of one metric's total comes from non-compliant labels."""
    metric: str
    full_total: float
    compliant_total: float

    @property
    def excluded_total(self) -> float:
        return self.full_total - self.compliant_total

    @property
    def excluded_pct(self) -> float:
        if self.full_total == 0:
            return 0.0
        return 100.0 * self.excluded_total / self.full_total
