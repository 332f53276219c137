"""
Tests for interval primitives.
"""

import pendulum

from bookingslots.domain.intervals import Interval, intersect, merge, overlaps, subtract


class TestInterval:
    """Tests for the Interval value type."""

    def test_empty_interval(self):
        """Intervals whose end is not after the start are empty."""
        assert Interval(600, 600).is_empty
        assert Interval(700, 600).is_empty
        assert not Interval(600, 601).is_empty

    def test_overlaps_is_strict(self):
        """Touching endpoints do not overlap (half-open semantics)."""
        assert Interval(540, 600).overlaps(Interval(570, 630))
        assert not Interval(540, 600).overlaps(Interval(600, 660))
        assert not overlaps(Interval(600, 660), Interval(540, 600))

    def test_intersect(self):
        """Test intersection calculation."""
        assert Interval(540, 720).intersect(Interval(660, 840)) == Interval(660, 720)
        assert Interval(540, 600).intersect(Interval(600, 660)) is None

    def test_works_with_datetimes(self):
        """The same operations apply to absolute datetimes."""
        a = Interval(
            pendulum.parse("2024-11-25 09:00", tz="Europe/Paris"),
            pendulum.parse("2024-11-25 12:00", tz="Europe/Paris"),
        )
        b = Interval(
            pendulum.parse("2024-11-25 11:00", tz="Europe/Paris"),
            pendulum.parse("2024-11-25 14:00", tz="Europe/Paris"),
        )

        assert a.overlaps(b)
        assert a.length().total_seconds() == 3 * 3600
        assert subtract([a], [b]) == [
            Interval(a.start, pendulum.parse("2024-11-25 11:00", tz="Europe/Paris"))
        ]


class TestMerge:
    """Tests for merge()."""

    def test_merge_overlapping_and_adjacent(self):
        """Overlapping and touching intervals are coalesced."""
        result = merge([Interval(600, 660), Interval(540, 600), Interval(630, 720)])

        assert result == [Interval(540, 720)]

    def test_merge_keeps_gaps(self):
        result = merge([Interval(840, 900), Interval(540, 600)])

        assert result == [Interval(540, 600), Interval(840, 900)]

    def test_merge_drops_empty_intervals(self):
        """Malformed intervals collapse to nothing."""
        assert merge([Interval(700, 600), Interval(600, 600)]) == []

    def test_merge_contained_interval(self):
        assert merge([Interval(540, 1020), Interval(600, 660)]) == [Interval(540, 1020)]


class TestSubtract:
    """Tests for subtract()."""

    def test_busy_covers_free(self):
        """A busy interval covering a free one removes it."""
        assert subtract([Interval(600, 660)], [Interval(540, 720)]) == []

    def test_busy_trims_edges(self):
        free = [Interval(540, 1020)]

        assert subtract(free, [Interval(480, 600)]) == [Interval(600, 1020)]
        assert subtract(free, [Interval(960, 1080)]) == [Interval(540, 960)]

    def test_busy_splits_free(self):
        """
        Working: 09:00 - 17:00
        Busy: [10:00-11:00, 14:00-15:00]
        Result: [09:00-10:00, 11:00-14:00, 15:00-17:00]
        """
        result = subtract(
            [Interval(540, 1020)],
            [Interval(840, 900), Interval(600, 660)],
        )

        assert result == [Interval(540, 600), Interval(660, 840), Interval(900, 1020)]

    def test_busy_across_several_free_intervals(self):
        result = subtract(
            [Interval(540, 720), Interval(840, 1080)],
            [Interval(690, 870)],
        )

        assert result == [Interval(540, 690), Interval(870, 1080)]

    def test_no_busy(self):
        assert subtract([Interval(540, 600)], []) == [Interval(540, 600)]

    def test_touching_busy_leaves_free_intact(self):
        assert subtract([Interval(600, 660)], [Interval(540, 600), Interval(660, 700)]) == [
            Interval(600, 660)
        ]


class TestIntersect:
    """Tests for intersect()."""

    def test_intersect_sets(self):
        result = intersect(
            [Interval(540, 720), Interval(840, 1020)],
            [Interval(600, 900)],
        )

        assert result == [Interval(600, 720), Interval(840, 900)]

    def test_intersect_disjoint(self):
        assert intersect([Interval(540, 600)], [Interval(600, 660)]) == []
