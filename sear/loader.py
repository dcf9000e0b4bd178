"""
Dataset loader (CSV -> RawRecord list)
======================================

This module reads the NOAA Storm Events CSV export and converts each row into
a `RawRecord` object.

Key ideas:
- Only the 8 columns SEAR needs are read (`usecols`), the file has 37.
- We try multiple possible column names because exports may vary
  (legacy `BGN_DATE`/`EVTYPE` names and descriptive `begin_date`/`event_type`).
- Compressed files (`.csv.bz2`, `.csv.gz`) are read directly by pandas.
- Bad dates/numbers are never silently swallowed: the `on_parse_error` policy
  either aborts on the first bad row ("abort") or drops the bad rows and logs
  them ("skip").
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence
import logging
import os
import re

import numpy as np
import pandas as pd

from .config import DEFAULT_DATE_FORMAT, PARSE_ERROR_POLICIES
from .errors import InvalidArgument, ParseError
from .models import RawRecord

logger = logging.getLogger(__name__)

# field -> accepted column names (first match wins)
COLUMNS: Dict[str, Sequence[str]] = {
    "begin_date": ("BGN_DATE", "BEGIN_DATE", "Begin Date"),
    "event_type": ("EVTYPE", "EVENT_TYPE", "Event Type"),
    "fatalities": ("FATALITIES", "DEATHS"),
    "injuries": ("INJURIES",),
    "prop_dmg": ("PROPDMG", "PROPERTY_DAMAGE", "Property Damage"),
    "prop_dmg_exp": ("PROPDMGEXP", "PROPERTY_DAMAGE_SCALE", "Property Damage Scale"),
    "crop_dmg": ("CROPDMG", "CROP_DAMAGE", "Crop Damage"),
    "crop_dmg_exp": ("CROPDMGEXP", "CROP_DAMAGE_SCALE", "Crop Damage Scale"),
}
_COUNT_FIELDS = ("fatalities", "injuries")
_AMOUNT_FIELDS = ("prop_dmg", "crop_dmg")


def _to_str(x) -> str:
    if pd.isna(x): return ""
    return str(x).strip()

def _to_code(x) -> Optional[str]:
    """Scale code cell -> stripped string, or None if blank."""
    s = _to_str(x)
    return s or None

def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())

def _col(columns: Sequence[str], *names: str) -> str:
    cols = list(columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    raise KeyError(f"Missing required column. Tried={tuple(names)}. Available={cols}")

def resolve_columns(columns: Sequence[str]) -> Dict[str, str]:
    """Map each SEAR field to the matching column of the file header."""
    return {field: _col(columns, *names) for field, names in COLUMNS.items()}


def load_storm_csv(
    path: str,
    *,
    date_format: Optional[str] = DEFAULT_DATE_FORMAT,
    on_parse_error: str = "abort",
) -> List[RawRecord]:
    """
    Read a Storm Events CSV into RawRecord objects.

    `record_id` is the 0-based data row number (header excluded), so error
    messages can point at the offending row.

    Raises:
        FileNotFoundError: `path` does not exist.
        KeyError: a required column is missing.
        ParseError: a bad date/number and `on_parse_error == "abort"`.
    """
    if on_parse_error not in PARSE_ERROR_POLICIES:
        raise InvalidArgument(f"on_parse_error must be one of {PARSE_ERROR_POLICIES}")
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Storm data file not found: {path}")

    header = pd.read_csv(path, nrows=0).columns
    header = [str(c).strip() for c in header]
    cols = resolve_columns(header)
    wanted = set(cols.values())
    df = pd.read_csv(
        path,
        usecols=lambda c: str(c).strip() in wanted,
        dtype=str,
    )
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
    logger.info("Read %d rows from %s", len(df), path)

    errors: Dict[int, ParseError] = {}

    def _flag(mask: pd.Series, field: str, reason: str) -> None:
        raw = df[cols[field]]
        for rid in df.index[mask]:
            errors.setdefault(int(rid), ParseError(int(rid), field, raw.loc[rid], reason))

    # Dates
    date_raw = df[cols["begin_date"]].str.strip()
    dates = pd.to_datetime(date_raw, format=date_format, errors="coerce")
    _flag(dates.isna(), "begin_date", f"expected format {date_format}" if date_format else "unrecognized date")

    # Numbers: blank -> 0, text, inf or negative -> error
    numbers: Dict[str, pd.Series] = {}
    for field in _COUNT_FIELDS + _AMOUNT_FIELDS:
        text = df[cols[field]].str.strip()
        blank = text.isna() | (text == "")
        num = pd.to_numeric(text.where(~blank), errors="coerce").astype(float)
        _flag(num.isna() & ~blank, field, "not a number")
        _flag(num.notna() & ~np.isfinite(num), field, "not a finite number")
        _flag(num < 0, field, "negative value")
        if field in _COUNT_FIELDS:
            _flag(num.notna() & (num % 1 != 0), field, "not a whole number")
        numbers[field] = num.fillna(0)

    if errors:
        if on_parse_error == "abort":
            raise errors[min(errors)]
        bad = sorted(errors)
        logger.warning(
            "Skipping %d unparseable records (first: %s)",
            len(bad), "; ".join(str(errors[i]) for i in bad[:3]),
        )
    keep = ~df.index.isin(sorted(errors))

    records: List[RawRecord] = []
    rows = zip(
        df.index[keep],
        dates[keep],
        df[cols["event_type"]][keep],
        numbers["fatalities"][keep],
        numbers["injuries"][keep],
        numbers["prop_dmg"][keep],
        df[cols["prop_dmg_exp"]][keep],
        numbers["crop_dmg"][keep],
        df[cols["crop_dmg_exp"]][keep],
    )
    for rid, d, ev, fat, inj, pdmg, pexp, cdmg, cexp in rows:
        records.append(RawRecord(
            record_id=int(rid),
            begin_date=d.to_pydatetime(),
            event_type=_to_str(ev),
            fatalities=int(fat),
            injuries=int(inj),
            prop_dmg=float(pdmg),
            prop_dmg_exp=_to_code(pexp),
            crop_dmg=float(cdmg),
            crop_dmg_exp=_to_code(cexp),
        ))
    logger.info("Loaded %d records", len(records))
    return records
