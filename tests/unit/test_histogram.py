"""Tests for set-size histograms."""

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from dupseeker.core.histogram import (
    SetSizeHistogram,
    SetSizeHistogramAccumulator,
    histograms_to_dataframe,
)


class TestSetSizeHistogram:
    """Test the bin container."""

    def test_bins_are_floats(self):
        hist = SetSizeHistogram("all_sets")
        hist.increment(3)
        assert 3 in hist
        assert 3.0 in hist
        assert hist[3] == 1.0
        assert list(hist) == [3.0]

    def test_missing_bins_read_as_zero(self):
        hist = SetSizeHistogram("all_sets")
        assert hist.get(7) == 0.0
        assert hist[7] == 0
        assert hist.is_empty

    def test_iteration_is_sorted(self):
        hist = SetSizeHistogram("all_sets")
        for size in (5, 2, 9, 2):
            hist.increment(size)
        assert list(hist.items()) == [(2.0, 2.0), (5.0, 1.0), (9.0, 1.0)]

    def test_total_units(self):
        hist = SetSizeHistogram("all_sets")
        hist.increment(2, 3)
        hist.increment(4)
        assert hist.total_units() == 10.0

    def test_merge_sums_bins(self):
        a = SetSizeHistogram("all_sets")
        b = SetSizeHistogram("all_sets")
        a.increment(2)
        b.increment(2)
        b.increment(3)
        merged = a.merge(b)
        assert merged.as_dict() == {2.0: 2.0, 3.0: 1.0}
        assert a.as_dict() == {2.0: 1.0}


class TestSetSizeHistogramAccumulator:
    """Test the three-histogram accumulator."""

    def test_singletons_are_not_recorded(self):
        acc = SetSizeHistogramAccumulator()
        acc.record(1)
        assert all(hist.is_empty for hist in acc.histograms.values())

    def test_set_without_optical(self):
        acc = SetSizeHistogramAccumulator()
        acc.record(4)
        assert acc.all_sets.as_dict() == {4.0: 1.0}
        assert acc.non_optical_sets.as_dict() == {4.0: 1.0}
        assert acc.optical_sets.is_empty

    def test_optical_duplicates_shrink_non_optical_size(self):
        acc = SetSizeHistogramAccumulator()
        acc.record(2, optical_count=1)
        assert acc.all_sets.as_dict() == {2.0: 1.0}
        assert acc.non_optical_sets.as_dict() == {1.0: 1.0}
        assert acc.optical_sets.as_dict() == {2.0: 1.0}

    def test_merge_keeps_labels(self):
        a = SetSizeHistogramAccumulator()
        b = SetSizeHistogramAccumulator()
        a.record(2)
        b.record(2)
        merged = a.merge(b)
        assert merged.all_sets[2] == 2.0
        assert set(merged.histograms) == {"all_sets", "non_optical_sets", "optical_sets"}

    def test_dataframe_fills_missing_bins(self):
        acc = SetSizeHistogramAccumulator()
        acc.record(3, optical_count=1)
        frame = acc.to_dataframe()
        assert list(frame.columns) == ["set_size", "all_sets", "non_optical_sets", "optical_sets"]
        assert list(frame["set_size"]) == [2.0, 3.0]
        row = frame.set_index("set_size").loc[3.0]
        assert row["all_sets"] == 1.0
        assert row["non_optical_sets"] == 0.0

    def test_empty_dataframe(self):
        frame = histograms_to_dataframe(SetSizeHistogramAccumulator().histograms)
        assert frame.empty
