"""Aggregate statistics over a shot list."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Sequence

from framescript.models.shots import ShotData


@dataclass(frozen=True)
class ShotListSummary:
    """
    Attributes:
        shot_count: Number of shots
        total_duration: Sum of shot durations in seconds
        average_shot_length: total_duration / shot_count (0 when empty)
        end_time: End timecode of the last shot ("00:00" when empty)
        size_distribution: Shot count per shot size, in first-seen order
    """

    shot_count: int
    total_duration: float
    average_shot_length: float
    end_time: str
    size_distribution: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "shot_count": self.shot_count,
            "total_duration": round(self.total_duration, 3),
            "average_shot_length": round(self.average_shot_length, 1),
            "end_time": self.end_time,
            "size_distribution": dict(self.size_distribution),
        }


def summarize_shots(shots: Sequence[ShotData]) -> ShotListSummary:
    if not shots:
        return ShotListSummary(
            shot_count=0,
            total_duration=0.0,
            average_shot_length=0.0,
            end_time="00:00",
        )

    total = sum(shot.duration for shot in shots)
    sizes = Counter(shot.size.strip() or "Unknown" for shot in shots)
    return ShotListSummary(
        shot_count=len(shots),
        total_duration=total,
        average_shot_length=total / len(shots),
        end_time=shots[-1].end_time,
        size_distribution=dict(sizes),
    )
