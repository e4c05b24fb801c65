"""
Timecode Parsing
================

Parses the loose timecodes the analysis model writes into shot lists:
``SS``, ``MM:SS`` and ``HH:MM:SS``, each with an optional fraction.
"""

import re


_TIMECODE_RE = re.compile(r"^\d+(\.\d+)?$")


def parse_timecode(value: str) -> float:
    """
    Convert a timecode to seconds.

    Args:
        value: e.g. "7.5", "01:05.5", "00:01:05"

    Returns:
        Seconds as float

    Raises:
        ValueError: If the value is not a timecode
    """
    text = str(value).strip()
    parts = text.split(":")
    if not text or len(parts) > 3 or not all(_TIMECODE_RE.match(p) for p in parts):
        raise ValueError(f"Invalid timecode: {value!r}")

    seconds = 0.0
    for part in parts:
        seconds = seconds * 60 + float(part)
    return seconds
