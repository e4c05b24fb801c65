"""
Analysis Payload
================

Prepares the sampled frames for the external analysis model.

The model accepts a bounded number of images per request, so long frame
lists are decimated to every ceil(n / max_frames)-th frame. Each sent
frame is introduced by a text marker carrying its index *in the sent
list* and its timestamp:

    [Frame Index: 12, Timestamp: 2.40s]

The model reports ``thumbnailIndex`` against those sent indices, so the
payload keeps the mapping back to the full frame list and
``resolve_thumbnail_index`` translates returned shots before they reach
the compositor.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from framescript.models.frame import Frame
from framescript.models.shots import ShotReference


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PayloadFrame:
    """
    One frame as sent to the model.

    Attributes:
        index: Position in the sent list (what the model refers to)
        source_index: Position in the full sampled frame list
        frame: The frame itself
    """

    index: int
    source_index: int
    frame: Frame

    @property
    def marker(self) -> str:
        return f"[Frame Index: {self.index}, Timestamp: {self.frame.timestamp:.2f}s]"


@dataclass(frozen=True)
class AnalysisPayload:
    """Frames selected for one analysis request."""

    file_name: str
    frames: tuple
    source_frame_count: int

    def to_parts(self) -> List[Dict]:
        """
        Interleaved text/image parts in the model's inline-data format.

        Returns:
            [{"text": marker}, {"inline_data": {"mime_type", "data"}}, ...]
        """
        parts: List[Dict] = []
        for entry in self.frames:
            parts.append({"text": entry.marker})
            parts.append({
                "inline_data": {
                    "mime_type": "image/jpeg",
                    "data": entry.frame.to_base64(),
                }
            })
        return parts

    def resolve_thumbnail_index(self, sent_index: Optional[int]) -> Optional[int]:
        """
        Map a sent-list index back to the full frame list.

        Returns None for missing or out-of-range indices, leaving the
        compositor's fallback policy to decide.
        """
        if sent_index is None or not 0 <= sent_index < len(self.frames):
            return None
        return self.frames[sent_index].source_index

    def resolve_shots(self, shots: Sequence[ShotReference]) -> List[ShotReference]:
        """Copies of ``shots`` with thumbnail indices mapped to the full list."""
        return [
            shot.model_copy(
                update={"thumbnail_index": self.resolve_thumbnail_index(shot.thumbnail_index)}
            )
            for shot in shots
        ]

    @property
    def payload_bytes(self) -> int:
        return sum(len(entry.frame.pixels) for entry in self.frames)


def build_payload(
    frames: Sequence[Frame],
    file_name: str,
    max_frames: int = 300,
) -> AnalysisPayload:
    """
    Select the frames to send for one analysis request.

    Args:
        frames: Full sampled frame list
        file_name: Display name of the video
        max_frames: Upper bound on sent frames

    Returns:
        AnalysisPayload
    """
    if max_frames < 1:
        raise ValueError("max_frames must be >= 1")

    step = max(1, math.ceil(len(frames) / max_frames))
    selected = tuple(
        PayloadFrame(index=sent, source_index=source, frame=frames[source])
        for sent, source in enumerate(range(0, len(frames), step))
    )

    payload = AnalysisPayload(
        file_name=file_name,
        frames=selected,
        source_frame_count=len(frames),
    )
    logger.info(
        f"Analysis payload for '{file_name}': {len(selected)}/{len(frames)} frames "
        f"(step {step}), {payload.payload_bytes / 1024:.0f} KiB"
    )
    return payload
