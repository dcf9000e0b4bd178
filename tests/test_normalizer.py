"""
Tests for the normalizer (magnitudes, canonicalization, filters).
"""

from datetime import datetime

import pytest

from sear.config import EVENT_TYPES
from sear.models import RawRecord
from sear.normalizer import (
    canonicalize,
    normalize,
    resolve_magnitude,
    scale_multiplier,
    split_compliance,
)


def raw(record_id=0, year=2005, event_type="TORNADO", fatalities=0, injuries=0,
        prop=0.0, prop_exp=None, crop=0.0, crop_exp=None):
    return RawRecord(
        record_id=record_id,
        begin_date=datetime(year, 6, 1),
        event_type=event_type,
        fatalities=fatalities,
        injuries=injuries,
        prop_dmg=prop,
        prop_dmg_exp=prop_exp,
        crop_dmg=crop,
        crop_dmg_exp=crop_exp,
    )


class TestResolveMagnitude:
    """Scale code -> multiplier mapping."""

    @pytest.mark.parametrize("code,expected", [
        ("H", 100), ("h", 100),
        ("K", 1000), ("k", 1000),
        ("M", 1e6), ("m", 1e6),
        ("B", 1e9), ("b", 1e9),
    ])
    def test_letter_codes(self, code, expected):
        assert resolve_magnitude(1, code) == expected

    @pytest.mark.parametrize("digit", list("12345678"))
    def test_digit_codes_multiply_by_ten(self, digit):
        assert resolve_magnitude(5, digit) == 50

    @pytest.mark.parametrize("x", [0, 1, 2.5, 1234.0])
    def test_plus_is_identity(self, x):
        assert resolve_magnitude(x, "+") == x

    @pytest.mark.parametrize("code", ["", "Z", "?", "-", "0", "9", "KK", None])
    def test_unrecognized_codes_zero_the_value(self, code):
        assert resolve_magnitude(42, code) == 0

    @pytest.mark.parametrize("x", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_value_with_unknown_code_is_zero(self, x):
        assert resolve_magnitude(x, "Z") == 0.0
        assert resolve_magnitude(x, None) == 0.0

    def test_surrounding_whitespace_ignored(self):
        assert scale_multiplier(" k ") == 1000


class TestCanonicalize:
    """Event type clean-up."""

    def test_tornadoes_example(self):
        assert canonicalize(" Tornadoes  ") == "TORNADO"

    def test_collapses_internal_whitespace_and_strips_plural(self):
        assert canonicalize("thunderstorm   winds") == "THUNDERSTORM WIND"

    def test_double_s_is_not_a_plural(self):
        assert canonicalize("glass") == "GLASS"

    def test_none_and_blank(self):
        assert canonicalize(None) == ""
        assert canonicalize("   ") == ""

    @pytest.mark.parametrize("s", [
        " Tornadoes  ", "RIP CURRENTS", "HAIL S", "AS S", "S", "ss", "shoes",
        "Hurricane (Typhoon)", "tstm wind\t\n", "WINDSS ", "",
    ])
    def test_idempotent(self, s):
        once = canonicalize(s)
        assert canonicalize(once) == once

    def test_vocabulary_is_canonical(self):
        assert len(EVENT_TYPES) == 48
        assert all(canonicalize(e) == e for e in EVENT_TYPES)


class TestNormalize:
    """End-to-end normalization over RawRecord lists."""

    def test_temporal_filter(self):
        out = normalize([raw(0, year=1995, fatalities=1), raw(1, year=2005, fatalities=1)], EVENT_TYPES)
        assert [r.record_id for r in out] == [1]

    def test_cutoff_is_configurable(self):
        out = normalize([raw(0, year=1995, fatalities=1)], EVENT_TYPES, cutoff_year=1990)
        assert len(out) == 1

    def test_zero_impact_dropped(self):
        records = [
            raw(0, prop=0, prop_exp="B"),
            raw(1, prop=12, prop_exp="?"),  # unknown code -> 0 damage
            raw(2, injuries=1),
        ]
        out = normalize(records, EVENT_TYPES)
        assert [r.record_id for r in out] == [2]

    def test_damages_resolved(self):
        out = normalize([raw(0, prop=2.5, prop_exp="M", crop=3, crop_exp="k")], EVENT_TYPES)
        assert out[0].property_damage == 2.5e6
        assert out[0].crop_damage == 3000
        assert out[0].economic_damage == 2.5e6 + 3000

    def test_plural_label_is_compliant(self):
        out = normalize([raw(0, event_type=" Tornadoes  ", fatalities=1)], EVENT_TYPES)
        assert out[0].event_type == "TORNADO"
        assert out[0].compliant

    def test_unknown_label_is_flagged_not_dropped(self):
        out = normalize([raw(0, event_type="WIND DAMAGE", fatalities=3)], EVENT_TYPES)
        assert len(out) == 1
        assert out[0].event_type == "WIND DAMAGE"
        assert not out[0].compliant

    def test_counts_carried_through(self):
        out = normalize([raw(0, fatalities=4, injuries=9)], EVENT_TYPES)
        assert (out[0].fatalities, out[0].injuries) == (4, 9)

    def test_split_compliance(self):
        out = normalize([
            raw(0, event_type="FLOOD", injuries=1),
            raw(1, event_type="WIND DAMAGE", injuries=1),
        ], EVENT_TYPES)
        ok, rejected = split_compliance(out)
        assert [r.record_id for r in ok] == [0]
        assert [r.record_id for r in rejected] == [1]

    def test_custom_vocabulary_is_canonicalized(self):
        out = normalize([raw(0, event_type="wind damage", injuries=1)], {"Wind  Damages"})
        assert out[0].compliant
