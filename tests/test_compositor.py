"""
Compositor Tests
================

Grid geometry, thumbnail fallback, labels and degradation of the
tile compositor.
"""

import numpy as np
import pytest

from conftest import GREEN, RED
from framescript.composite.compositor import TileCompositor, resolve_frame_index
from framescript.composite.layout import compute_layout
from framescript.errors import EmptyInputError
from framescript.imaging.codec import decode_image
from framescript.models.frame import Frame, VideoMetadata
from framescript.models.shots import ShotReference


BACKGROUND_BGR = (39, 24, 17)  # #111827


def shot(number, index):
    return ShotReference(shot_number=number, thumbnail_index=index)


def pixel_rgb(image, y, x):
    b, g, r = image[y, x]
    return (int(r), int(g), int(b))


def assert_close(actual, expected, tolerance=12):
    assert all(abs(a - e) <= tolerance for a, e in zip(actual, expected)), f"{actual} != {expected}"


class TestLayout:
    """Tests for compute_layout."""

    def test_default_geometry(self):
        layout = compute_layout(10, 4)

        assert layout.frame_width == pytest.approx(742.5)
        assert layout.frame_height == pytest.approx(742.5 / (16 / 9))
        assert layout.rows == 3
        assert layout.canvas_height == pytest.approx(3 * layout.frame_height + 2 * 10)
        assert layout.pixel_width == 3000
        assert layout.pixel_height == 1272

    def test_single_row(self):
        layout = compute_layout(3, 4)
        assert layout.rows == 1
        assert layout.canvas_height == pytest.approx(layout.frame_height)

    def test_metadata_aspect_ratio(self):
        metadata = VideoMetadata(native_width=1080, native_height=1920, duration_seconds=10.0)
        layout = compute_layout(2, 2, metadata, canvas_width=210.0)

        assert layout.frame_width == pytest.approx(100.0)
        assert layout.frame_height == pytest.approx(100.0 * 1920 / 1080)

    def test_degenerate_metadata_uses_default_aspect(self):
        metadata = VideoMetadata(native_width=0, native_height=0, duration_seconds=1.0)
        layout = compute_layout(1, 1, metadata, canvas_width=160.0, gap=0.0)
        assert layout.frame_height == pytest.approx(90.0)

    def test_cell_boxes(self):
        layout = compute_layout(3, 2, canvas_width=400.0)

        assert layout.cell_box(0) == (0, 0, 195, 110)
        assert layout.cell_box(1) == (205, 0, 400, 110)
        assert layout.cell_box(2) == (0, 120, 195, 229)

    @pytest.mark.parametrize(
        "shot_count,columns,gap",
        [(0, 4, 10.0), (3, 0, 10.0), (3, 2, -1.0), (3, 400, 10.0)],
    )
    def test_invalid_inputs(self, shot_count, columns, gap):
        with pytest.raises(ValueError):
            compute_layout(shot_count, columns, gap=gap, canvas_width=400.0)


class TestResolveFrameIndex:
    """Tests for thumbnail index resolution."""

    @pytest.mark.parametrize(
        "index,expected",
        [(0, 0), (4, 4), (5, 0), (-1, 0), (None, 0), (1000, 0)],
    )
    def test_resolution(self, index, expected):
        assert resolve_frame_index(index, 5) == expected


class TestTileCompositor:
    """Tests for TileCompositor.composite."""

    @pytest.fixture
    def compositor(self):
        return TileCompositor(canvas_width=400.0, gap=10.0, max_workers=2)

    def test_canvas_size(self, compositor, make_frame):
        result = compositor.composite([shot(1, 0)] * 3, [make_frame(RED)], None, columns=2)

        assert (result.width, result.height) == (400, 229)
        assert result.image.dtype == np.uint8

    def test_cells_placed_row_major(self, compositor, make_frame):
        frames = [make_frame(RED), make_frame(GREEN)]
        shots = [shot(1, 1), shot(2, 0), shot(3, 1)]

        result = compositor.composite(shots, frames, None, columns=2, show_labels=False)

        assert_close(pixel_rgb(result.image, 55, 97), GREEN)
        assert_close(pixel_rgb(result.image, 55, 300), RED)
        assert_close(pixel_rgb(result.image, 175, 97), GREEN)
        assert result.fallback_cells == ()

    def test_gap_and_unused_cells_are_background(self, compositor, make_frame):
        result = compositor.composite([shot(1, 0)] * 3, [make_frame(RED)], None, columns=2)

        assert tuple(result.image[50, 200]) == BACKGROUND_BGR
        assert tuple(result.image[115, 50]) == BACKGROUND_BGR
        assert tuple(result.image[175, 300]) == BACKGROUND_BGR

    def test_bad_thumbnail_falls_back_to_first_frame(self, compositor, make_frame):
        frames = [make_frame(RED), make_frame(GREEN)]
        shots = [shot(1, 1), shot(2, 99), shot(3, None), shot(4, -2)]

        result = compositor.composite(shots, frames, None, columns=2, show_labels=False)

        assert result.fallback_cells == (1, 2, 3)
        assert_close(pixel_rgb(result.image, 55, 97), GREEN)
        assert_close(pixel_rgb(result.image, 55, 300), RED)
        assert_close(pixel_rgb(result.image, 175, 97), RED)
        assert_close(pixel_rgb(result.image, 175, 300), RED)

    def test_labels_drawn_on_black_box(self, compositor, make_frame):
        result = compositor.composite([shot(7, 0)], [make_frame(GREEN)], None, columns=2)

        assert tuple(result.image[1, 1]) == (0, 0, 0)
        assert tuple(result.image[18, 38]) == (0, 0, 0)
        assert_close(pixel_rgb(result.image, 80, 150), GREEN)
        assert result.image[2:18, 5:35].max() > 200

    def test_labels_disabled(self, compositor, make_frame):
        result = compositor.composite([shot(7, 0)], [make_frame(GREEN)], None, columns=2, show_labels=False)
        assert_close(pixel_rgb(result.image, 1, 1), GREEN)

    def test_translucent_label(self, make_frame):
        compositor = TileCompositor(canvas_width=400.0, label_opacity=0.5)
        result = compositor.composite([shot(1, 0)], [make_frame(GREEN)], None, columns=2)

        r, g, b = pixel_rgb(result.image, 1, 1)
        assert 80 <= g <= 112

    def test_undecodable_frame_leaves_cell_empty(self, compositor, make_frame):
        broken = Frame(timestamp=0.1, pixels=b"corrupt", width=64, height=36)
        frames = [make_frame(RED), broken]

        result = compositor.composite([shot(1, 0), shot(2, 1)], frames, None, columns=2)

        assert result.skipped_cells == (1,)
        assert tuple(result.image[55, 300]) == BACKGROUND_BGR
        assert_close(pixel_rgb(result.image, 55, 97), RED)

    def test_metadata_sets_cell_aspect(self, compositor, make_frame):
        metadata = VideoMetadata(native_width=100, native_height=100, duration_seconds=1.0)
        result = compositor.composite([shot(1, 0)], [make_frame(RED)], metadata, columns=2)

        assert result.layout.frame_height == pytest.approx(195.0)
        assert result.height == 195

    def test_empty_inputs(self, compositor, make_frame):
        with pytest.raises(EmptyInputError):
            compositor.composite([], [make_frame(RED)], None, columns=2)
        with pytest.raises(EmptyInputError):
            compositor.composite([shot(1, 0)], [], None, columns=2)

    def test_invalid_columns(self, compositor, make_frame):
        with pytest.raises(ValueError):
            compositor.composite([shot(1, 0)], [make_frame(RED)], None, columns=0)

    def test_to_jpeg(self, compositor, make_frame):
        result = compositor.composite([shot(1, 0)], [make_frame(RED)], None, columns=1)

        decoded = decode_image(result.to_jpeg(quality=80))
        assert decoded.shape == result.image.shape
        assert result.to_base64().startswith("/9j/")
