"""Tests for threshold range parsing."""

import math

import pytest

from poe_guard.exceptions import ConfigurationError
from poe_guard.thresholds import ThresholdRange


def test_plain_number_means_zero_to_n() -> None:
    r = ThresholdRange.parse("10")

    assert (r.start, r.end, r.invert) == (0.0, 10.0, False)
    assert not r.violates(10)
    assert r.violates(10.5)
    assert r.violates(-1)


def test_open_ended_ranges() -> None:
    assert ThresholdRange.parse("10:").end == math.inf
    assert ThresholdRange.parse("10:").violates(9)
    assert ThresholdRange.parse("~:10").start == -math.inf
    assert not ThresholdRange.parse("~:10").violates(-500)


def test_inverted_range() -> None:
    r = ThresholdRange.parse("@10:20")

    assert r.violates(15)
    assert not r.violates(25)


def test_str_keeps_original_text() -> None:
    assert str(ThresholdRange.parse(" 7 ")) == "7"


@pytest.mark.parametrize("text", ["", "abc", ":", "20:10", "1:2:3"])
def test_invalid_ranges(text: str) -> None:
    with pytest.raises(ConfigurationError):
        ThresholdRange.parse(text)
