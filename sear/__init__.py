"""
SEAR package
============

This package contains the Storm Events Analytical Report (SEAR).

- The CLI entry point is in `sear/cli.py`.
- Dataset loading is in `sear/loader.py` (and downloading in `sear/fetch.py`).
- Category cleaning + damage conversion is in `sear/normalizer.py`.
- Per-category sums and rankings are in `sear/aggregator.py`.
- `sear/engine.py` ties the steps together for one run.
"""

__version__ = '0.1.0'
