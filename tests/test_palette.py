"""
Palette Tests
=============

Quantization, histogram merging and representative colour selection.
"""

import itertools

import cv2
import numpy as np
import pytest

from conftest import BLUE, GREEN, RED, YELLOW
from framescript.models.frame import Frame
from framescript.palette.histogram import ColorHistogram, quantize_channels
from framescript.palette.summarizer import ColorSummarizer, color_distance


def split_frame(left, right, timestamp=0.0, width=64, height=36):
    """Frame whose left and right halves are solid ``left`` and ``right`` RGB."""
    image = np.empty((height, width, 3), dtype=np.uint8)
    image[:, : width // 2] = left[::-1]
    image[:, width // 2 :] = right[::-1]
    # Lossless so the halves stay exact at the seam
    ok, buffer = cv2.imencode(".png", image)
    assert ok
    return Frame(timestamp=timestamp, pixels=buffer.tobytes(), width=width, height=height)


class TestQuantization:
    """Tests for channel quantization."""

    def test_rounds_to_nearest_multiple(self):
        values = np.array([0, 15, 16, 47, 48, 255], dtype=np.uint8)
        assert quantize_channels(values).tolist() == [0, 0, 32, 32, 64, 256]

    def test_custom_step(self):
        assert quantize_channels(np.array([7, 8, 100]), step=16).tolist() == [0, 16, 96]

    def test_invalid_step(self):
        with pytest.raises(ValueError):
            quantize_channels(np.zeros(3), step=0)


class TestColorHistogram:
    """Tests for ColorHistogram."""

    def test_counts_and_insertion_order(self):
        image = np.array([[[0, 0, 0], [250, 250, 250], [1, 2, 3], [250, 250, 250]]], dtype=np.uint8)
        histogram = ColorHistogram.from_image(image)

        assert list(histogram.items()) == [((0, 0, 0), 2), ((256, 256, 256), 2)]
        assert histogram.total == 4

    def test_ranked_ties_keep_insertion_order(self):
        histogram = ColorHistogram()
        histogram.add((32, 0, 0), 3)
        histogram.add((0, 32, 0), 5)
        histogram.add((0, 0, 32), 3)

        assert histogram.ranked() == [((0, 32, 0), 5), ((32, 0, 0), 3), ((0, 0, 32), 3)]

    def test_merge_sums_counts(self):
        first = ColorHistogram()
        first.add((0, 0, 0), 2)
        second = ColorHistogram()
        second.add((0, 0, 0), 1)
        second.add((64, 64, 64), 4)

        merged = first.merge(second)

        assert merged[(0, 0, 0)] == 3
        assert merged[(64, 64, 64)] == 4
        assert (128, 0, 0) not in merged
        assert len(first) == 1

    def test_empty_image(self):
        assert len(ColorHistogram.from_image(np.zeros((0, 0, 3), dtype=np.uint8))) == 0


class TestColorSummarizer:
    """Tests for ColorSummarizer."""

    def test_empty_input(self):
        assert ColorSummarizer().summarize([]) == []

    def test_single_colour(self, make_frame):
        frames = [make_frame((100, 150, 200), timestamp=i * 0.1) for i in range(5)]
        assert ColorSummarizer().summarize(frames) == ["#60a0c0"]

    def test_only_sampled_frames_counted(self, make_frame):
        # Step is ceil(12 / 10) = 2: frames 0-4 red, 6-8 green, 10 blue, odd frames never read
        colors = [RED, YELLOW, RED, YELLOW, RED, YELLOW, GREEN, YELLOW, GREEN, YELLOW, BLUE, YELLOW]
        frames = [make_frame(rgb, timestamp=i * 0.1) for i, rgb in enumerate(colors)]

        assert ColorSummarizer().summarize(frames) == ["#e02020", "#20c040", "#2040e0"]

    def test_entries_carry_frequencies(self, make_frame):
        frames = [make_frame(RED), make_frame(RED), make_frame(BLUE)]
        entries = ColorSummarizer().summarize_entries(frames)

        assert [entry.color_hex for entry in entries] == ["#e02020", "#2040e0"]
        assert entries[0].frequency == 2 * 50 * 50
        assert entries[1].frequency == 50 * 50

    def test_max_colors_bounds_result(self, make_frame):
        frames = [make_frame(rgb) for rgb in (RED, GREEN, BLUE, YELLOW)]
        assert len(ColorSummarizer().summarize(frames, max_colors=2)) == 2
        assert ColorSummarizer().summarize(frames, max_colors=0) == []

    def test_top_colours_after_truncation(self):
        # Sampled frames 0, 2, ..., 10 in half-frame units: red 5, green 4, blue 2, yellow 1.
        # The split at x=32 maps exactly onto column 25 of the 50px raster.
        grey = (128, 128, 128)
        halves = [
            (RED, RED), (grey, grey), (RED, RED), (grey, grey),
            (RED, GREEN), (grey, grey), (GREEN, GREEN), (grey, grey),
            (BLUE, YELLOW), (grey, grey), (BLUE, GREEN), (grey, grey),
        ]
        frames = [split_frame(left, right, timestamp=i * 0.1) for i, (left, right) in enumerate(halves)]

        entries = ColorSummarizer().summarize_entries(frames, max_colors=3)

        assert [entry.color_hex for entry in entries] == ["#e02020", "#20c040", "#2040e0"]
        assert [entry.frequency for entry in entries] == [5 * 1250, 4 * 1250, 2 * 1250]

    def test_colours_are_distinct(self):
        rng = np.random.default_rng(7)
        frames = []
        for i in range(6):
            noise = rng.integers(0, 256, size=(40, 60, 3), dtype=np.uint8)
            ok, buffer = cv2.imencode(".jpg", noise, [int(cv2.IMWRITE_JPEG_QUALITY), 90])
            assert ok
            frames.append(Frame(timestamp=i * 0.1, pixels=buffer.tobytes(), width=60, height=40))

        entries = ColorSummarizer().summarize_entries(frames, max_colors=7)

        assert 1 <= len(entries) <= 7
        for a, b in itertools.combinations(entries, 2):
            assert color_distance(a.rgb, b.rgb) >= 60
        assert [e.frequency for e in entries] == sorted((e.frequency for e in entries), reverse=True)

    @pytest.mark.parametrize("count,expected", [(1, 1), (10, 10), (11, 6), (25, 9), (201, 10)])
    def test_select_frames_count(self, make_frame, count, expected):
        frame = make_frame(RED)
        assert len(ColorSummarizer().select_frames([frame] * count)) == expected

    def test_undecodable_frame_skipped(self, make_frame):
        broken = Frame(timestamp=0.0, pixels=b"not a jpeg", width=64, height=36)
        frames = [broken, make_frame(GREEN)]
        assert ColorSummarizer().summarize(frames) == ["#20c040"]

    def test_white_clamps_in_hex(self, make_frame):
        entries = ColorSummarizer().summarize_entries([make_frame((255, 255, 255))])

        assert entries[0].color_hex == "#ffffff"
        assert entries[0].rgb == (256, 256, 256)

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            ColorSummarizer(max_sampled_frames=0)
