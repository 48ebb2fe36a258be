from __future__ import annotations

import pytest

from captions import Cue, last_start_at_or_before, locate

CUES = (
    Cue(0.0, 2.0, "A"),
    Cue(2.5, 4.0, "B"),
    Cue(6.0, 6.0, "C"),
    Cue(7.0, 9.5, "D"),
)


@pytest.mark.parametrize(
    ("t", "expected"),
    [
        (0.0, 0),
        (1.0, 0),
        (2.0, 0),
        (2.2, None),
        (2.5, 1),
        (4.0, 1),
        (5.0, None),
        (6.0, 2),
        (8.0, 3),
        (9.5, 3),
        (10.0, None),
        (-1.0, None),
    ],
)
def test_locate(t: float, expected) -> None:
    assert locate(CUES, t) == expected


def test_locate_hit_contains_t() -> None:
    for i in range(0, 110):
        t = i / 10
        idx = locate(CUES, t)
        containing = [j for j, c in enumerate(CUES) if c.start <= t <= c.end]
        if idx is None:
            assert containing == []
        else:
            assert containing == [idx]


def test_locate_is_idempotent() -> None:
    assert [locate(CUES, 3.0) for _ in range(5)] == [1] * 5
    assert CUES[1].text == "B"


def test_locate_empty() -> None:
    assert locate((), 1.0) is None
    assert last_start_at_or_before((), 1.0) is None


@pytest.mark.parametrize(
    ("t", "expected"),
    [(-0.1, None), (0.0, 0), (2.2, 0), (2.5, 1), (5.0, 1), (6.5, 2), (100.0, 3)],
)
def test_last_start_at_or_before(t: float, expected) -> None:
    assert last_start_at_or_before(CUES, t) == expected
