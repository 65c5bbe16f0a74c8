import random

import pytest

from assetdex.rack_space import occupancy
from assetdex.rack_space.suggestion import candidate_spaces, suggest
from assetdex.rack_space.types import FreeSpace, RackSnapshot, RackUnitInterval


def test_first_fit_from_top_of_rack():
    spaces = [
        FreeSpace(start_unit=42, end_unit=41),  # 2U, too small
        FreeSpace(start_unit=30, end_unit=25),  # 6U, first that fits
        FreeSpace(start_unit=20, end_unit=1),   # 20U, larger but lower
    ]

    suggestion = suggest(spaces, 4)

    assert suggestion is not None
    assert suggestion.start_unit == 27
    assert suggestion.reason == "Suggested position U27 in available 6U space (U30-U25)"


def test_exact_fit_uses_whole_space():
    suggestion = suggest([FreeSpace(start_unit=9, end_unit=7)], 3)

    assert suggestion is not None
    assert suggestion.start_unit == 7


def test_no_suggestion_when_nothing_is_tall_enough():
    spaces = [FreeSpace(start_unit=42, end_unit=40), FreeSpace(start_unit=10, end_unit=9)]

    assert suggest(spaces, 4) is None
    assert suggest([], 1) is None


@pytest.mark.parametrize("height", [0, -2])
def test_non_positive_height_has_no_candidates(height):
    assert candidate_spaces([FreeSpace(start_unit=42, end_unit=1)], height) == []
    assert suggest([FreeSpace(start_unit=42, end_unit=1)], height) is None


def test_candidate_spaces_preserve_input_order():
    spaces = [
        FreeSpace(start_unit=40, end_unit=35),
        FreeSpace(start_unit=30, end_unit=30),
        FreeSpace(start_unit=20, end_unit=11),
    ]

    assert candidate_spaces(spaces, 2) == [spaces[0], spaces[2]]


@pytest.mark.parametrize("seed", range(25))
def test_suggested_range_is_free_and_inside_rack(seed):
    rng = random.Random(seed)
    intervals = []
    for index in range(rng.randint(0, 8)):
        start = rng.randint(1, 40)
        intervals.append(
            RackUnitInterval(device_id=f"d{index}", label=f"h{index}", start_unit=start, height=rng.randint(1, 3))
        )
    snapshot = RackSnapshot(rack="R1", intervals=intervals)
    occupied = occupancy.occupied_unit_set(snapshot)
    spaces = occupancy.free_spaces(snapshot)

    for height in range(1, 43):
        suggestion = suggest(spaces, height)
        fits = any(space.size >= height for space in spaces)
        assert (suggestion is not None) is fits
        if suggestion is None:
            continue
        units = set(range(suggestion.start_unit, suggestion.start_unit + height))
        assert min(units) >= 1
        assert max(units) <= snapshot.total_units
        assert units.isdisjoint(occupied)
