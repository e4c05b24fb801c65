"""
Session Store Tests
===================

Creation, eviction and cleanup of analysis sessions.
"""

import pytest

from framescript.errors import DecodeError, DurationExceededError
from framescript.session import SessionStore
from framescript.video.sampler import FrameSampler


@pytest.fixture
def video_bytes(tiny_video_path):
    return tiny_video_path.read_bytes()


def test_create_and_get(video_bytes):
    store = SessionStore()
    session = store.create("tiny.avi", video_bytes, FrameSampler())

    assert store.get(session.session_id) is session
    assert len(session.frames) == 21
    assert session.interval_seconds == 0.1
    assert session.video_path.suffix == ".avi"
    assert session.video_path.exists()
    assert session.to_dict()["frame_count"] == 21

    store.clear()
    assert not session.video_path.exists()


def test_oldest_session_evicted(video_bytes):
    store = SessionStore(max_sessions=2)
    first = store.create("a.avi", video_bytes, FrameSampler())
    second = store.create("b.avi", video_bytes, FrameSampler())
    third = store.create("c.avi", video_bytes, FrameSampler())

    assert len(store) == 2
    assert store.get(first.session_id) is None
    assert not first.video_path.exists()
    assert store.get(second.session_id) is second
    assert store.get(third.session_id) is third
    store.clear()


def test_discard(video_bytes):
    store = SessionStore()
    session = store.create("tiny.avi", video_bytes, FrameSampler())

    assert store.discard(session.session_id) is True
    assert store.discard(session.session_id) is False
    assert not session.video_path.exists()


def test_failed_sampling_leaves_nothing(video_bytes, tmp_path, monkeypatch):
    monkeypatch.setattr("tempfile.tempdir", str(tmp_path))
    store = SessionStore()

    with pytest.raises(DurationExceededError):
        store.create("tiny.avi", video_bytes, FrameSampler(max_duration_seconds=1.0))
    with pytest.raises(DecodeError):
        store.create("junk.mp4", b"\x00" * 512, FrameSampler())

    assert len(store) == 0
    assert list(tmp_path.iterdir()) == []


def test_invalid_size():
    with pytest.raises(ValueError):
        SessionStore(max_sessions=0)
