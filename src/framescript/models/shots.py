"""
Shot List Schema
================

Pydantic models for the shot list returned by the external analysis model.

The compositor only needs ``ShotReference`` (shot number + thumbnail index);
``ShotData`` carries the full row so statistics and high-resolution captures
can work from the same payload.

Input Contract (from the analysis model):
    {
        "shotNumber": 3,
        "startTime": "00:04.2",
        "endTime": "00:06.0",
        "duration": 1.8,
        "size": "MCU",
        "movement": "Static",
        "description": "...",
        "audio": "",
        "sfx": "",
        "thumbnailIndex": 42
    }

Guarantees:
    - None for thumbnailIndex: it is validated against the frame list by
      the compositor, not here
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ShotReference(BaseModel):
    """
    Minimal per-shot data the tile compositor consumes.

    Attributes:
        shot_number: 1-based shot number shown in labels
        thumbnail_index: Index into the sampled frame list (may be invalid)
    """

    model_config = ConfigDict(populate_by_name=True)

    shot_number: int = Field(
        ...,
        alias="shotNumber",
        description="Shot number as reported by the analysis model",
    )

    thumbnail_index: Optional[int] = Field(
        default=None,
        alias="thumbnailIndex",
        description="Index of the representative frame in the sampled frame list",
    )


class ShotData(ShotReference):
    """
    Full shot row produced by the analysis model.

    ``duration`` is accepted as a number or numeric string and stored as float.
    """

    start_time: str = Field(default="00:00", alias="startTime")
    end_time: str = Field(default="00:00", alias="endTime")
    duration: float = Field(default=0.0, ge=0.0)
    size: str = Field(default="", description="Shot size, e.g. MCU, Wide, ECU")
    movement: str = Field(default="", description="Camera movement, e.g. Pan Left")
    description: str = ""
    audio: str = Field(default="", description="Dialogue or voice-over")
    sfx: str = Field(default="", description="Sound effects")

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, value: Union[float, int, str, None]) -> float:
        if value is None or value == "":
            return 0.0
        if isinstance(value, str):
            cleaned = value.strip().rstrip("s").strip()
            try:
                return float(cleaned)
            except ValueError as e:
                raise ValueError(f"duration is not numeric: {value!r}") from e
        return float(value)

    def reference(self) -> ShotReference:
        """Strip the row down to what the compositor needs."""
        return ShotReference(
            shot_number=self.shot_number,
            thumbnail_index=self.thumbnail_index,
        )
