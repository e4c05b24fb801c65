"""
Analysis Module
===============

Glue between the local pipeline and the external analysis model:
payload preparation, timecodes and shot list statistics.
"""

from framescript.analysis.timecode import parse_timecode
from framescript.analysis.payload import AnalysisPayload, PayloadFrame, build_payload
from framescript.analysis.shot_stats import ShotListSummary, summarize_shots

__all__ = [
    "parse_timecode",
    "AnalysisPayload",
    "PayloadFrame",
    "build_payload",
    "ShotListSummary",
    "summarize_shots",
]
