import pytest

from landval.pipeline.formatting import (
    estimated_remaining_seconds,
    format_elapsed,
    progress_fraction,
    render_dots,
)


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "0s"), (5, "5s"), (59, "59s"), (60, "1m 0s"), (65, "1m 5s"), (125, "2m 5s"), (-3, "0s")],
)
def test_format_elapsed(seconds, expected):
    assert format_elapsed(seconds) == expected


def test_progress_fraction_is_capped_below_one():
    assert progress_fraction(0) == 0
    assert progress_fraction(22.5) == pytest.approx(0.5)
    assert progress_fraction(45) == pytest.approx(0.95)
    assert progress_fraction(1000) == pytest.approx(0.95)


def test_progress_fraction_uses_configured_duration():
    assert progress_fraction(30, nominal_seconds=60) == pytest.approx(0.5)
    assert progress_fraction(30, nominal_seconds=60, cap=0.4) == pytest.approx(0.4)


def test_estimated_remaining_seconds():
    assert estimated_remaining_seconds(0) == 45
    assert estimated_remaining_seconds(40) == 5
    assert estimated_remaining_seconds(90) == 0


def test_render_dots():
    assert [render_dots(n) for n in range(5)] == ["", ".", "..", "...", "..."]
