"""
Error types
===========

SEAR is a one-shot batch job, so errors are simple:

- `ParseError`: a date or number in the input file could not be read.
- `InvalidArgument`: the caller asked for something impossible (e.g. top 0).

A missing input file is reported with Python's own `FileNotFoundError`.
"""

from __future__ import annotations
from typing import Any, Optional


class SearError(Exception):
    """Base class for all SEAR errors."""


class ParseError(SearError, ValueError):
    """A record could not be parsed on ingest."""

    def __init__(self, record_id: Optional[int], field: str, value: Any, reason: str = "") -> None:
        self.record_id = record_id
        self.field = field
        self.value = value
        msg = f"Record {record_id}: cannot parse {field}={value!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class InvalidArgument(SearError, ValueError):
    pass
