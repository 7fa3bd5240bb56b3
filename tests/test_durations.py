import pytest

from fvg.durations import SUPPORTED_DURATIONS, describe_supported_durations, quantize


@pytest.mark.parametrize("requested", [0.5, 3, 4, 4.5, 5, 6, 7.9, 8, 9, 30])
def test_quantize_returns_supported_duration(requested):
    assert quantize(requested) in SUPPORTED_DURATIONS


@pytest.mark.parametrize(
    "requested, expected",
    [(2, 4), (4, 4), (5, 6), (6, 6), (7, 8), (8, 8)],
)
def test_quantize_picks_smallest_duration_not_below_request(requested, expected):
    assert quantize(requested) == expected


def test_quantize_clamps_long_requests():
    assert quantize(9) == 8
    assert quantize(120) == 8


def test_quantize_is_monotonic():
    values = [quantize(x / 2) for x in range(1, 25)]
    assert values == sorted(values)


def test_describe_supported_durations():
    assert describe_supported_durations() == "4s, 6s, 8s"
