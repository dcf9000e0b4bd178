"""
Core engine (SEAR)
==================

SEAR runs one linear pipeline over an in-memory dataset:

1) Load dataset -> list of RawRecord (immutable)
2) Normalize    -> CanonicalRecord list (filtered, cleaned, tagged)
3) Aggregate    -> one CategorySummary per compliant event type
4) Rank         -> top-N tables per metric (fatalities, injuries, damage)
5) Report       -> exports / DOCX report from the stored results

`StormAnalysis` keeps every intermediate product of the run so that the CLI
and the report can query them without recomputing anything.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import csv
import json
import logging

from .aggregator import METRICS, aggregate, compliance_impact, top_n, top_rejected_labels
from .config import PipelineConfig
from .loader import load_storm_csv
from .models import CanonicalRecord, CategorySummary, ComplianceImpact, RawRecord
from .normalizer import normalize, split_compliance

logger = logging.getLogger(__name__)

_EXPORT_FIELDS = ["event_type", "events", "fatalities", "injuries",
                  "property_damage", "crop_damage", "economic_damage"]


@dataclass
class StormAnalysis:
    """One run of the Storm Events Analytical Report.

    The engine stores:
    - raw: all RawRecord rows read from the file
    - records: normalized records (compliant and non-compliant)
    - summaries: per-category totals over compliant records only
    - full_summaries: per-category totals over all normalized records
    """
    raw: List[RawRecord]
    config: PipelineConfig = field(default_factory=PipelineConfig)
    dataset_path: Optional[str] = None

    records: List[CanonicalRecord] = field(default_factory=list, init=False)
    compliant: List[CanonicalRecord] = field(default_factory=list, init=False)
    rejected: List[CanonicalRecord] = field(default_factory=list, init=False)
    summaries: Dict[str, CategorySummary] = field(default_factory=dict, init=False)
    full_summaries: Dict[str, CategorySummary] = field(default_factory=dict, init=False)

    @classmethod
    def from_csv(cls, path: str, config: Optional[PipelineConfig] = None) -> "StormAnalysis":
        """Load `path` and run the pipeline."""
        config = config or PipelineConfig()
        raw = load_storm_csv(path, date_format=config.date_format, on_parse_error=config.on_parse_error)
        return cls(raw=raw, config=config, dataset_path=path).run()

    def run(self) -> "StormAnalysis":
        self.records = normalize(self.raw, self.config.event_types, cutoff_year=self.config.cutoff_year)
        self.compliant, self.rejected = split_compliance(self.records)
        self.summaries = aggregate(self.compliant)
        self.full_summaries = aggregate(self.records)
        logger.info("Aggregated %d compliant event types (%d labels overall)",
                    len(self.summaries), len(self.full_summaries))
        if not self.summaries:
            logger.warning("No compliant records left after normalization")
        return self

    # ---------------- Queries ----------------
    def top(self, metric: str, n: Optional[int] = None) -> List[Tuple[str, float]]:
        """Top-N compliant event types by `metric` (default N from config)."""
        return top_n(self.summaries, metric, n if n is not None else self.config.top_n)

    def impact(self) -> List[ComplianceImpact]:
        return compliance_impact(self.full_summaries, self.summaries)

    def rejected_labels(self, n: Optional[int] = None) -> List[Tuple[str, int]]:
        return top_rejected_labels(self.rejected, n if n is not None else self.config.top_n)

    def stage_counts(self) -> Dict[str, int]:
        return {
            "loaded": len(self.raw),
            "normalized": len(self.records),
            "compliant": len(self.compliant),
            "non_compliant": len(self.rejected),
            "event_types": len(self.summaries),
        }

    # ---------------- Output operations ----------------
    def _summary_rows(self) -> List[CategorySummary]:
        # largest economic impact first, same ordering rule as top_n
        return sorted(self.summaries.values(), key=lambda s: (-s.economic_damage, s.event_type))

    def export_csv(self, path: str) -> None:
        """Export per-category summaries to a CSV file."""
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(_EXPORT_FIELDS)
            for s in self._summary_rows():
                w.writerow([s.event_type, s.events, s.fatalities, s.injuries,
                            s.property_damage, s.crop_damage, s.economic_damage])

    def export_json(self, path: str) -> None:
        """Export summaries, rankings and the compliance impact to JSON.

        CSV is great for spreadsheets; JSON keeps the rankings next to the data.
        """
        payload = {
            "config": {
                "cutoff_year": self.config.cutoff_year,
                "top_n": self.config.top_n,
                "event_types": len(self.config.event_types),
            },
            "counts": self.stage_counts(),
            "summaries": [
                {k: getattr(s, k) for k in _EXPORT_FIELDS}
                for s in self._summary_rows()
            ],
            "rankings": {
                m: [{"event_type": k, "value": v} for k, v in self.top(m)]
                for m in METRICS
            } if self.summaries else {},
            "compliance_impact": [
                {
                    "metric": c.metric,
                    "full_total": c.full_total,
                    "compliant_total": c.compliant_total,
                    "excluded_pct": c.excluded_pct,
                }
                for c in self.impact()
            ],
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
