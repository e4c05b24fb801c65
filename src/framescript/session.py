"""
Analysis Sessions
=================

An analysis session owns everything derived from one uploaded video:
the spooled video file (kept for high-resolution captures), the sampled
frames and the metadata. Discarding the session releases all of it.

Design Rules:
    - Sessions are created only from a complete sampling run
    - Frames are read-only once the session exists
    - The store is bounded; the oldest session is discarded first
"""

import logging
import os
import tempfile
import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from framescript.models.frame import Frame, VideoMetadata
from framescript.video.sampler import FrameSampler, ProgressCallback, sample_video


logger = logging.getLogger(__name__)


@dataclass
class AnalysisSession:
    """
    Attributes:
        session_id: Opaque identifier
        file_name: Display name of the uploaded video
        video_path: Spooled copy of the video
        frames: Sampled frames ordered by timestamp
        metadata: Source metadata
        interval_seconds: Sampling interval used for the run
        created_at: UNIX timestamp of creation
    """

    session_id: str
    file_name: str
    video_path: Path
    frames: List[Frame]
    metadata: VideoMetadata
    interval_seconds: float
    created_at: float = field(default_factory=time.time)

    def discard(self) -> None:
        """Delete the spooled video. Frames go with the session object."""
        try:
            self.video_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove {self.video_path}: {e}")

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "file_name": self.file_name,
            "frame_count": len(self.frames),
            "interval_seconds": self.interval_seconds,
            "metadata": self.metadata.to_dict(),
            "created_at": round(self.created_at, 3),
        }


class SessionStore:
    """
    Thread-safe, bounded in-memory session registry.

    Example:
        store = SessionStore(max_sessions=8)
        session = store.create("clip.mp4", data, sampler)
        store.discard(session.session_id)
    """

    def __init__(self, max_sessions: int = 8) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be >= 1")
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, AnalysisSession]" = OrderedDict()
        self._lock = threading.Lock()

    def create(
        self,
        file_name: str,
        video: bytes,
        sampler: FrameSampler,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> AnalysisSession:
        """
        Spool, sample and register a video.

        Sampling failures propagate and leave nothing behind.

        Raises:
            DurationExceededError, DecodeError, SamplingCancelledError
        """
        suffix = Path(file_name).suffix or ".mp4"
        fd, tmp_name = tempfile.mkstemp(suffix=suffix, prefix="framescript_session_")
        video_path = Path(tmp_name)
        with os.fdopen(fd, "wb") as f:
            f.write(video)

        try:
            frames, metadata = sample_video(
                video_path,
                sampler=sampler,
                on_progress=on_progress,
                cancel_event=cancel_event,
            )
        except Exception:
            video_path.unlink(missing_ok=True)
            raise

        session = AnalysisSession(
            session_id=uuid.uuid4().hex,
            file_name=file_name,
            video_path=video_path,
            frames=frames,
            metadata=metadata,
            interval_seconds=sampler.plan(metadata.duration_seconds).interval_seconds,
        )

        evicted: List[AnalysisSession] = []
        with self._lock:
            self._sessions[session.session_id] = session
            while len(self._sessions) > self.max_sessions:
                _, oldest = self._sessions.popitem(last=False)
                evicted.append(oldest)

        for old in evicted:
            logger.info(f"Evicting session {old.session_id} ('{old.file_name}')")
            old.discard()

        logger.info(
            f"Session {session.session_id} created for '{file_name}': "
            f"{len(frames)} frames"
        )
        return session

    def get(self, session_id: str) -> Optional[AnalysisSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def discard(self, session_id: str) -> bool:
        """Remove a session and its files. Returns False if unknown."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.discard()
        logger.info(f"Session {session_id} discarded")
        return True

    def clear(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.discard()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
