"""Shared fixtures: small Storm Events CSV files written to tmp_path."""

import textwrap

import pytest

HEADER = "STATE__,BGN_DATE,COUNTY,EVTYPE,FATALITIES,INJURIES,PROPDMG,PROPDMGEXP,CROPDMG,CROPDMGEXP,REFNUM\n"


@pytest.fixture
def write_csv(tmp_path):
    """Return a helper that writes rows (under the NOAA header) to a CSV file."""
    def _write(rows, name="storm.csv", header=HEADER):
        path = tmp_path / name
        path.write_text(header + textwrap.dedent(rows).lstrip("\n"), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def storm_csv(write_csv):
    return write_csv("""
        1,4/18/1950 0:00:00,97,TORNADO,4,15,25,K,0,,1
        1,1/10/2005 0:00:00,97, Tornadoes  ,2,10,1.5,M,0,,2
        1,6/1/2006 0:00:00,3,THUNDERSTORM WINDS,0,1,50,K,10,K,3
        1,7/4/2007 0:00:00,3,FLOOD,1,0,2,B,5,M,4
        1,8/9/2008 0:00:00,5,WIND DAMAGE,3,0,10,K,0,,5
        1,9/9/2009 0:00:00,5,HAIL,0,0,0,K,0,,6
        1,3/3/2003 0:00:00,5,HEAT,7,20,0,,0,,7
    """)
