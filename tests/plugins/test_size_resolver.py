"""Unit tests for output size resolution.

Covers free resizing, aspect-preserving single-axis requests, contain-fit
bounding boxes, clamping of degenerate requests and rounding.
"""

import pytest

from cl_image_fit.common.errors import InvalidDimension
from cl_image_fit.common.schemas import ResolvedSize, SizeSpec
from cl_image_fit.plugins.image_fit.algo.size_resolver import (
    resolve_size,
    resolve_size_spec,
)

SOURCES = [(1, 1), (4000, 3000), (3000, 4000), (1920, 1080), (7, 3), (1, 500), (500, 1)]

# ============================================================================
# keep_aspect=False
# ============================================================================


def test_free_resize_uses_requested_values():
    assert resolve_size(4000, 3000, False, 640, 640) == (640, 640)


def test_free_resize_falls_back_to_source_per_axis():
    assert resolve_size(4000, 3000, False, 800, None) == (800, 3000)
    assert resolve_size(4000, 3000, False, None, 200) == (4000, 200)
    assert resolve_size(4000, 3000, False, None, None) == (4000, 3000)


def test_free_resize_clamps_to_one():
    assert resolve_size(4000, 3000, False, 0, -5) == (1, 1)


# ============================================================================
# keep_aspect=True
# ============================================================================


def test_keep_aspect_auto_returns_source_exactly():
    for width, height in SOURCES:
        assert resolve_size(width, height, True, None, None) == (width, height)


def test_keep_aspect_width_only():
    """End-to-end scenario: 4000x3000 with width 800 -> 800x600."""
    assert resolve_size(4000, 3000, True, 800, None) == (800, 600)


def test_keep_aspect_height_only():
    assert resolve_size(1920, 1080, True, None, 540) == (960, 540)


def test_keep_aspect_single_axis_preserves_ratio():
    for width, height in SOURCES:
        for requested in (1, 2, 10, 333, 1000):
            w, h = resolve_size(width, height, True, requested, None)
            assert w == requested
            # Off by at most the rounding of one pixel
            assert abs(h - requested * height / width) <= 0.5 or h == 1

            w, h = resolve_size(width, height, True, None, requested)
            assert h == requested
            assert abs(w - requested * width / height) <= 0.5 or w == 1


def test_keep_aspect_rounds_half_away_from_zero():
    # 6 / 4 = 1.5 -> 2 and 5 / 2 = 2.5 -> 3
    assert resolve_size(4, 1, True, 6, None) == (6, 2)
    assert resolve_size(2, 1, True, 5, None) == (5, 3)


def test_keep_aspect_box_wider_than_source():
    # Box 1000x300 is wider than 4:3, so height binds
    assert resolve_size(4000, 3000, True, 1000, 300) == (400, 300)


def test_keep_aspect_box_taller_than_source():
    # Box 400x1000 is taller than 4:3, so width binds
    assert resolve_size(4000, 3000, True, 400, 1000) == (400, 300)


def test_keep_aspect_box_contain_fit_never_exceeds_box():
    for width, height in SOURCES:
        for box_w, box_h in [(1, 1), (100, 100), (640, 480), (50, 900), (900, 50), (3, 7)]:
            w, h = resolve_size(width, height, True, box_w, box_h)
            assert 1 <= w <= box_w
            assert 1 <= h <= box_h
            assert w == box_w or h == box_h


def test_keep_aspect_degenerate_requests_clamp():
    for width, height in SOURCES:
        for requested in (0, -1, -1000):
            w, h = resolve_size(width, height, True, requested, None)
            assert w >= 1 and h >= 1
            w, h = resolve_size(width, height, True, None, requested)
            assert w >= 1 and h >= 1
            w, h = resolve_size(width, height, True, requested, requested)
            assert w >= 1 and h >= 1


def test_extreme_aspect_never_produces_zero():
    assert resolve_size(10000, 1, True, 10, None) == (10, 1)
    assert resolve_size(1, 10000, True, 10, 10) == (1, 10)


# ============================================================================
# Helpers and errors
# ============================================================================


def test_resolve_size_returns_named_tuple():
    size = resolve_size(4000, 3000, True, 800, None)
    assert isinstance(size, ResolvedSize)
    assert size.width == 800
    assert size.height == 600


def test_resolve_size_spec():
    spec = SizeSpec(width=800)
    assert resolve_size_spec(4000, 3000, spec) == (800, 600)

    spec = SizeSpec(width=800, height=800, keep_aspect=False)
    assert resolve_size_spec(4000, 3000, spec) == (800, 800)


def test_size_spec_defaults():
    spec = SizeSpec()
    assert spec.width is None
    assert spec.height is None
    assert spec.keep_aspect is True


def test_invalid_source_dimensions_raise():
    with pytest.raises(InvalidDimension):
        _ = resolve_size(0, 100, True, None, None)
