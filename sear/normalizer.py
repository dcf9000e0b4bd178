"""
Normalizer (RawRecord -> CanonicalRecord)
=========================================

The normalizer is a chain of small, pure steps:

1) Temporal filter     -> drop events that began before the cutoff year
2) Magnitude resolution -> PROPDMG/CROPDMG x scale code  ->  US$
3) Zero-impact filter  -> drop events with no deaths, injuries or damage
4) Canonicalization    -> " Tornadoes " -> "TORNADO"
5) Compliance tagging  -> is the canonical label one of the 48 official ones?

Non-compliant records are NOT dropped here. They are flagged so that the
aggregator can report how much impact the category filter throws away.

Depluralization is deliberately naive (see `canonicalize`). Labels that differ
from the official vocabulary in other ways ("TSTM WIND", "WIND DAMAGE") stay
non-compliant; the compliance-impact report measures that loss instead of
trying to guess the right label.
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Sequence, Tuple
import logging
import re

from .config import DEFAULT_CUTOFF_YEAR
from .models import CanonicalRecord, RawRecord

logger = logging.getLogger(__name__)

# Scale code -> multiplier. Anything not listed means "no reliable estimate".
_SCALE_MULTIPLIERS = {
    "H": 1e2,
    "K": 1e3,
    "M": 1e6,
    "B": 1e9,
    "+": 1.0,
}
_SCALE_MULTIPLIERS.update({str(d): 10.0 for d in range(1, 9)})

_WS_RE = re.compile(r"\s+")


# ---------------- Magnitude resolution ----------------
def scale_multiplier(scale_code: Optional[str]) -> float:
    """Return the power-of-ten multiplier for a scale code (0.0 if unknown)."""
    if scale_code is None:
        return 0.0
    return _SCALE_MULTIPLIERS.get(str(scale_code).strip().upper(), 0.0)


def resolve_magnitude(value: float, scale_code: Optional[str]) -> float:
    """Convert a magnitude-coded damage figure into absolute US$.

    Examples:
        resolve_magnitude(25, "K")  -> 25000.0
        resolve_magnitude(5, "3")   -> 50.0
        resolve_magnitude(5, "?")   -> 0.0

    Never raises: an unrecognized code zeroes the value (even inf/nan).
    """
    mult = scale_multiplier(scale_code)
    if mult == 0.0:
        return 0.0
    return float(value) * mult


# ---------------- Category canonicalization ----------------
def _deplural(label: str) -> str:
    # naive English plural: TORNADOES -> TORNADO, WINDS -> WIND, GLASS stays
    if label.endswith("OES"):
        return label[:-2]
    if label.endswith("S") and not label.endswith("SS"):
        return label[:-1]
    return label


def _canonical_step(label: str) -> str:
    s = _WS_RE.sub(" ", label.upper()).strip()
    return _deplural(s).rstrip()


def canonicalize(label: Optional[str]) -> str:
    """Canonical form of a free-text event type.

    Uppercase, collapse whitespace, trim, strip a plural "S". The steps are
    repeated until nothing changes, so canonicalize(canonicalize(s)) equals
    canonicalize(s).

    A trailing "SS" is never stripped. Without that guard the repetition would
    eat every trailing S ("GLASS" -> "GLAS" -> "GLA"); with it, a label loses
    at most one plural S and the result is still a fixed point.
    """
    s = "" if label is None else str(label)
    while True:
        nxt = _canonical_step(s)
        if nxt == s:
            return s
        s = nxt


def canonical_vocabulary(known_categories: Iterable[str]) -> frozenset:
    """Canonicalize a vocabulary so it compares equal to canonicalized labels."""
    return frozenset(canonicalize(c) for c in known_categories)


# ---------------- Filters ----------------
def filter_since(raw: Iterable[RawRecord], cutoff_year: int) -> List[RawRecord]:
    """Keep records whose begin date is in or after `cutoff_year`."""
    return [r for r in raw if r.begin_date.year >= cutoff_year]


def has_impact(r: CanonicalRecord) -> bool:
    return (r.fatalities + r.injuries + r.property_damage + r.crop_damage) != 0


# ---------------- Pipeline ----------------
def to_canonical(r: RawRecord, vocabulary: frozenset) -> CanonicalRecord:
    """Derive one CanonicalRecord (no filtering)."""
    label = canonicalize(r.event_type)
    return CanonicalRecord(
        record_id=r.record_id,
        begin_date=r.begin_date,
        event_type=label,
        compliant=label in vocabulary,
        fatalities=r.fatalities,
        injuries=r.injuries,
        property_damage=resolve_magnitude(r.prop_dmg, r.prop_dmg_exp),
        crop_damage=resolve_magnitude(r.crop_dmg, r.crop_dmg_exp),
    )


def normalize(
    raw: Sequence[RawRecord],
    known_categories: Iterable[str],
    cutoff_year: int = DEFAULT_CUTOFF_YEAR,
) -> List[CanonicalRecord]:
    """Run every normalization step over `raw`.

    Returns compliant and non-compliant records alike (check `.compliant`).
    """
    vocabulary = canonical_vocabulary(known_categories)

    recent = filter_since(raw, cutoff_year)
    logger.info("Temporal filter (>= %d): kept %d of %d records", cutoff_year, len(recent), len(raw))

    canon = [to_canonical(r, vocabulary) for r in recent]
    out = [r for r in canon if has_impact(r)]
    logger.info("Zero-impact filter: kept %d of %d records", len(out), len(canon))

    n_ok = sum(1 for r in out if r.compliant)
    logger.info("Compliance: %d compliant, %d non-compliant records", n_ok, len(out) - n_ok)
    return out


def split_compliance(records: Iterable[CanonicalRecord]) -> Tuple[List[CanonicalRecord], List[CanonicalRecord]]:
    """Split records into (compliant, non-compliant)."""
    ok: List[CanonicalRecord] = []
    rejected: List[CanonicalRecord] = []
    for r in records:
        (ok if r.compliant else rejected).append(r)
    return ok, rejected
