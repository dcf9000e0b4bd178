"""
Tests for the CSV loader.
"""

import bz2
import logging
from datetime import datetime

import pytest

from sear.config import EVENT_TYPES
from sear.errors import InvalidArgument, ParseError
from sear.loader import load_storm_csv, resolve_columns
from sear.normalizer import normalize


class TestLoadStormCsv:

    def test_reads_required_columns(self, storm_csv):
        records = load_storm_csv(storm_csv)
        assert len(records) == 7
        assert [r.record_id for r in records] == list(range(7))

        r = records[1]
        assert r.begin_date == datetime(2005, 1, 10)
        assert r.event_type == "Tornadoes"
        assert (r.fatalities, r.injuries) == (2, 10)
        assert (r.prop_dmg, r.prop_dmg_exp) == (1.5, "M")
        assert (r.crop_dmg, r.crop_dmg_exp) == (0.0, None)

    def test_blank_numbers_are_zero(self, write_csv):
        path = write_csv("""
            1,1/1/2010 0:00:00,1,HAIL,,,,,,,1
        """)
        r = load_storm_csv(path)[0]
        assert (r.fatalities, r.injuries, r.prop_dmg, r.crop_dmg) == (0, 0, 0.0, 0.0)
        assert r.prop_dmg_exp is None

    def test_bad_date_aborts(self, write_csv):
        path = write_csv("""
            1,1/1/2010 0:00:00,1,HAIL,0,1,0,,0,,1
            1,not a date,1,HAIL,0,1,0,,0,,2
        """)
        with pytest.raises(ParseError) as ei:
            load_storm_csv(path)
        assert ei.value.record_id == 1
        assert ei.value.field == "begin_date"
        assert "Record 1" in str(ei.value)

    def test_first_bad_row_reported(self, write_csv):
        path = write_csv("""
            1,1/1/2010 0:00:00,1,HAIL,0,1,0,,0,,1
            1,1/1/2010 0:00:00,1,HAIL,two,1,0,,0,,2
            1,13/45/2010 0:00:00,1,HAIL,0,1,0,,0,,3
        """)
        with pytest.raises(ParseError) as ei:
            load_storm_csv(path)
        assert (ei.value.record_id, ei.value.field) == (1, "fatalities")

    @pytest.mark.parametrize("row", [
        "1,1/1/2010 0:00:00,1,HAIL,-1,0,0,,0,,1",
        "1,1/1/2010 0:00:00,1,HAIL,0,1.5,0,,0,,1",
        "1,1/1/2010 0:00:00,1,HAIL,0,0,lots,K,0,,1",
    ])
    def test_bad_numbers(self, write_csv, row):
        with pytest.raises(ParseError):
            load_storm_csv(write_csv(row + "\n"))

    @pytest.mark.parametrize("value", ["inf", "Infinity", "-inf"])
    def test_non_finite_damage_aborts(self, write_csv, value):
        path = write_csv(f"1,1/1/2010 0:00:00,1,HAIL,0,0,{value},Z,0,,1\n")
        with pytest.raises(ParseError) as ei:
            load_storm_csv(path)
        assert ei.value.field == "prop_dmg"

    def test_non_finite_damage_skipped(self, write_csv):
        path = write_csv("""
            1,1/1/2010 0:00:00,1,HAIL,0,0,inf,Z,0,,1
            1,1/2/2010 0:00:00,1,HAIL,0,0,2,K,0,,2
        """)
        records = load_storm_csv(path, on_parse_error="skip")
        assert [r.record_id for r in records] == [1]
        assert normalize(records, EVENT_TYPES)[0].property_damage == 2000.0

    def test_skip_policy_drops_and_logs(self, write_csv, caplog):
        path = write_csv("""
            1,1/1/2010 0:00:00,1,HAIL,0,1,0,,0,,1
            1,garbage,1,HAIL,0,1,0,,0,,2
            1,1/2/2010 0:00:00,1,FLOOD,0,-4,0,,0,,3
            1,1/3/2010 0:00:00,1,FLOOD,0,2,0,,0,,4
        """)
        with caplog.at_level(logging.WARNING, logger="sear.loader"):
            records = load_storm_csv(path, on_parse_error="skip")
        assert [r.record_id for r in records] == [0, 3]
        assert "Skipping 2 unparseable records" in caplog.text

    def test_custom_date_format(self, write_csv):
        path = write_csv("""
            1,2011-04-27,1,TORNADO,10,0,0,,0,,1
        """)
        r = load_storm_csv(path, date_format="%Y-%m-%d")[0]
        assert r.begin_date == datetime(2011, 4, 27)

    def test_unknown_policy(self, storm_csv):
        with pytest.raises(InvalidArgument):
            load_storm_csv(storm_csv, on_parse_error="ignore")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_storm_csv(str(tmp_path / "nope.csv"))

    def test_missing_column(self, write_csv):
        path = write_csv("1,1/1/2010 0:00:00,HAIL\n", header="STATE__,BGN_DATE,EVTYPE\n")
        with pytest.raises(KeyError, match="FATALITIES"):
            load_storm_csv(path)

    def test_descriptive_column_names(self, write_csv):
        header = "event_type,begin_date,fatalities,injuries,property_damage,property_damage_scale,crop_damage,crop_damage_scale\n"
        path = write_csv("FLOOD,5/5/2012 0:00:00,0,0,3,M,1,K\n", header=header)
        r = load_storm_csv(path)[0]
        assert r.event_type == "FLOOD"
        assert (r.prop_dmg, r.prop_dmg_exp, r.crop_dmg, r.crop_dmg_exp) == (3.0, "M", 1.0, "K")

    def test_bz2_input(self, tmp_path, storm_csv):
        path = tmp_path / "StormData.csv.bz2"
        with open(storm_csv, "rb") as src:
            path.write_bytes(bz2.compress(src.read()))
        assert len(load_storm_csv(str(path))) == 7


def test_resolve_columns_is_case_and_punctuation_insensitive():
    cols = resolve_columns(["bgn date", "EvType", "Fatalities", "injuries",
                            "PropDmg", "prop-dmg-exp", "CROPDMG", "cropdmgexp"])
    assert cols["begin_date"] == "bgn date"
    assert cols["prop_dmg_exp"] == "prop-dmg-exp"
