from __future__ import annotations

import pytest
from pydantic import ValidationError

from newsroom_stylizer_backend.models.composition import (
    Anchor,
    CompositionConfig,
    Direction,
    clamp_repeat_count,
)


def test_defaults_match_the_newsroom_look():
    config = CompositionConfig()

    assert config.background_color == "#6BFF7A"
    assert (config.canvas_width, config.canvas_height) == (1200, 675)
    assert config.direction is Direction.RIGHT
    assert config.repeat_count == 3
    assert config.gap_percent == -18
    assert config.scale_step_percent == 90
    assert config.anchor is Anchor.BOTTOM_RIGHT
    assert config.padding_px == 24
    assert config.base_scale_percent == 70
    assert config.pixel_density == 1


@pytest.mark.parametrize(
    "field, requested, expected",
    [
        ("repeat_count", 9, 6),
        ("repeat_count", 0, 1),
        ("repeat_count", -3, 1),
        ("gap_percent", 150, 60),
        ("gap_percent", -75, -60),
        ("scale_step_percent", 20, 60),
        ("scale_step_percent", 130, 110),
        ("y_offset_percent", 99, 60),
        ("padding_px", -10, 0),
        ("padding_px", 500, 200),
        ("base_scale_percent", 5, 20),
        ("base_scale_percent", 400, 120),
        ("pixel_density", 3.0, 2.0),
        ("pixel_density", 0.5, 1.0),
        ("canvas_width", 0, 1),
    ],
)
def test_out_of_range_values_are_clamped_not_rejected(field, requested, expected):
    config = CompositionConfig(**{field: requested})

    assert getattr(config, field) == expected


def test_in_range_values_pass_through():
    config = CompositionConfig(gap_percent=12.5, pixel_density=1.5, repeat_count=5)

    assert config.gap_percent == 12.5
    assert config.pixel_density == 1.5
    assert config.repeat_count == 5


def test_camel_case_payload_is_accepted():
    config = CompositionConfig.model_validate(
        {"repeatCount": 4, "scaleStepPercent": 100, "backgroundColor": "#ff27b1"}
    )

    assert config.repeat_count == 4
    assert config.scale_step_percent == 100
    assert config.background_color == "#FF27B1"


def test_short_anchor_keys_map_to_anchors():
    assert CompositionConfig(anchor="tl").anchor is Anchor.TOP_LEFT
    assert CompositionConfig(anchor="BR").anchor is Anchor.BOTTOM_RIGHT
    assert CompositionConfig(anchor="c").anchor is Anchor.CENTER
    assert CompositionConfig(anchor="top-right").anchor is Anchor.TOP_RIGHT


def test_unknown_anchor_and_direction_are_rejected():
    with pytest.raises(ValidationError):
        CompositionConfig(anchor="middle")
    with pytest.raises(ValidationError):
        CompositionConfig(direction="up")


def test_background_color_is_normalized_to_rgb():
    config = CompositionConfig(background_color="white")

    assert config.background_color == "#FFFFFF"
    assert config.background_rgb == (255, 255, 255)


def test_invalid_background_color_is_rejected():
    with pytest.raises(ValidationError):
        CompositionConfig(background_color="not-a-color")


def test_config_is_immutable():
    config = CompositionConfig()

    with pytest.raises(ValidationError):
        config.repeat_count = 5


def test_effective_repeat_count_clamps_even_unvalidated_values():
    config = CompositionConfig.model_construct(repeat_count=9)

    assert config.effective_repeat_count == 6
    assert clamp_repeat_count(0) == 1
    assert clamp_repeat_count(4) == 4
