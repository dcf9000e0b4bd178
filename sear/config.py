"""
Pipeline configuration
======================

Everything the pipeline treats as a "policy" lives here, and is passed
explicitly into the normalizer / aggregator (no module-level mutable state):

- `cutoff_year`: records that started before this year are dropped.
- `event_types`: the permitted event-type vocabulary (48 labels from
  NWS Directive 10-1605, Storm Data Preparation, table 2.1.1).
- `top_n`: default size of ranking tables.
- `date_format` / `on_parse_error`: how the loader reads dates and what it
  does with rows it cannot read.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from .errors import InvalidArgument

DEFAULT_CUTOFF_YEAR = 2001
DEFAULT_TOP_N = 10
# NOAA legacy export, e.g. "4/18/1950 0:00:00"
DEFAULT_DATE_FORMAT = "%m/%d/%Y %H:%M:%S"

PARSE_ERROR_POLICIES = ("abort", "skip")

EVENT_TYPES: FrozenSet[str] = frozenset({
    "ASTRONOMICAL LOW TIDE",
    "AVALANCHE",
    "BLIZZARD",
    "COASTAL FLOOD",
    "COLD/WIND CHILL",
    "DEBRIS FLOW",
    "DENSE FOG",
    "DENSE SMOKE",
    "DROUGHT",
    "DUST DEVIL",
    "DUST STORM",
    "EXCESSIVE HEAT",
    "EXTREME COLD/WIND CHILL",
    "FLASH FLOOD",
    "FLOOD",
    "FROST/FREEZE",
    "FUNNEL CLOUD",
    "FREEZING FOG",
    "HAIL",
    "HEAT",
    "HEAVY RAIN",
    "HEAVY SNOW",
    "HIGH SURF",
    "HIGH WIND",
    "HURRICANE (TYPHOON)",
    "ICE STORM",
    "LAKE-EFFECT SNOW",
    "LAKESHORE FLOOD",
    "LIGHTNING",
    "MARINE HAIL",
    "MARINE HIGH WIND",
    "MARINE STRONG WIND",
    "MARINE THUNDERSTORM WIND",
    "RIP CURRENT",
    "SEICHE",
    "SLEET",
    "STORM SURGE/TIDE",
    "STRONG WIND",
    "THUNDERSTORM WIND",
    "TORNADO",
    "TROPICAL DEPRESSION",
    "TROPICAL STORM",
    "TSUNAMI",
    "VOLCANIC ASH",
    "WATERSPOUT",
    "WILDFIRE",
    "WINTER STORM",
    "WINTER WEATHER",
})


@dataclass(frozen=True)
class PipelineConfig:
    """Knobs for one SEAR run."""
    cutoff_year: int = DEFAULT_CUTOFF_YEAR
    event_types: FrozenSet[str] = field(default=EVENT_TYPES)
    top_n: int = DEFAULT_TOP_N
    date_format: Optional[str] = DEFAULT_DATE_FORMAT
    on_parse_error: str = "abort"

    def __post_init__(self) -> None:
        if self.top_n < 1:
            raise InvalidArgument(f"top_n must be >= 1, got {self.top_n}")
        if not self.event_types:
            raise InvalidArgument("event_types vocabulary must not be empty")
        if self.on_parse_error not in PARSE_ERROR_POLICIES:
            raise InvalidArgument(
                f"on_parse_error must be one of {PARSE_ERROR_POLICIES}, got {self.on_parse_error!r}"
            )
        # accept any iterable of labels but store it immutably
        object.__setattr__(self, "event_types", frozenset(self.event_types))
