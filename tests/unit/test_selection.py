"""Tests for scoring strategies and representative selection."""

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from dupseeker.constants import MAX_READ_SCORE
from dupseeker.core.grouping import PairGrouper
from dupseeker.core.keys import RecordKeyBuilder, iter_pair_end_keys
from dupseeker.core.scoring import (
    make_scorer,
    random_score,
    sum_of_base_qualities,
    total_mapped_reference_length,
)
from dupseeker.core.selection import DuplicateSelector
from dupseeker.exceptions import ConfigurationError


def _sets(records):
    units, _ = RecordKeyBuilder().build(records)
    return units, PairGrouper().group(units)


class TestScorers:
    """Test built-in scoring strategies."""

    def test_low_qualities_are_ignored(self, fragment_factory):
        record = fragment_factory("r", 100, quals=(10, 14, 15, 40))
        assert sum_of_base_qualities([record]) == 55.0

    def test_threshold_is_configurable(self, fragment_factory):
        record = fragment_factory("r", 100, quals=(10, 14, 15, 40))
        assert sum_of_base_qualities([record], min_base_quality=0) == 79.0

    def test_per_read_cap(self, fragment_factory):
        record = fragment_factory("r", 100, quals=(40,) * 1000)
        assert sum_of_base_qualities([record]) == float(MAX_READ_SCORE)

    def test_pair_scores_sum_both_mates(self, pair_factory):
        records = pair_factory("p", 100, 300, quals=(20,) * 5)
        assert sum_of_base_qualities(records) == 200.0

    def test_missing_qualities_score_zero(self, fragment_factory):
        record = fragment_factory("r", 100, quals=())
        assert sum_of_base_qualities([record]) == 0.0

    def test_total_mapped_reference_length(self, pair_factory):
        records = pair_factory("p", 100, 300, quals=(30,) * 25)
        assert total_mapped_reference_length(records) == 50.0

    def test_random_score_is_reproducible(self, fragment_factory):
        a = fragment_factory("read_1", 100)
        b = fragment_factory("read_1", 900)
        assert random_score([a]) == random_score([b])

    def test_make_scorer_is_case_insensitive(self, fragment_factory):
        scorer = make_scorer("total_mapped_reference_length")
        assert scorer([fragment_factory("r", 1, quals=(30,) * 7)]) == 7.0

    def test_make_scorer_rejects_unknown(self):
        with pytest.raises(ConfigurationError):
            make_scorer("BEST_GUESS")


class TestDuplicateSelector:
    """Test representative choice within a set."""

    def test_highest_score_is_kept(self, fragment_factory):
        records = [
            fragment_factory("a", 100, quals=(20,) * 10),
            fragment_factory("b", 100, quals=(40,) * 10),
            fragment_factory("c", 100, quals=(30,) * 10),
        ]
        _, sets = _sets(records)
        selection = DuplicateSelector().select(sets[0])
        assert selection.representative.name == "b"
        assert [unit.name for unit in selection.duplicates] == ["c", "a"]

    def test_ties_break_on_name(self, fragment_factory):
        records = [fragment_factory("zeta", 100), fragment_factory("alpha", 100)]
        _, sets = _sets(records)
        selection = DuplicateSelector().select(sets[0])
        assert selection.representative.name == "alpha"

    def test_full_ties_break_on_input_order(self, fragment_factory):
        records = [fragment_factory("same", 100), fragment_factory("same", 100)]
        _, sets = _sets(records)
        selection = DuplicateSelector().select(sets[0])
        assert selection.representative.first_ordinal == 0
        assert selection.duplicates[0].first_ordinal == 1

    def test_singleton_has_no_duplicates(self, fragment_factory):
        _, sets = _sets([fragment_factory("a", 100)])
        selection = DuplicateSelector().select(sets[0])
        assert selection.representative.name == "a"
        assert selection.duplicates == []

    def test_exactly_one_representative(self, fragment_factory):
        _, sets = _sets([fragment_factory(f"r{i}", 100) for i in range(6)])
        selection = DuplicateSelector().select(sets[0])
        assert len(selection.duplicates) == 5
        assert selection.representative not in selection.duplicates

    def test_custom_scorer(self, fragment_factory):
        records = [fragment_factory("a", 100), fragment_factory("b", 100)]
        builder = RecordKeyBuilder(scorer=lambda recs: 1.0 if recs[0].name == "b" else 0.0)
        units, _ = builder.build(records)
        sets = PairGrouper().group(units)
        assert DuplicateSelector().select(sets[0]).representative.name == "b"

    def test_pair_units_carry_both_mate_scores(self, pair_factory):
        units, _ = RecordKeyBuilder().build(pair_factory("p", 100, 300, quals=(20,) * 5))
        assert units[0].score == 200.0

    def test_fragments_yield_to_pairs(self, fragment_factory, pair_factory):
        records = [fragment_factory("f", 100), *pair_factory("p", 100, 300)]
        units, sets = _sets(records)
        selector = DuplicateSelector(pair_end_keys=frozenset(iter_pair_end_keys(units)))
        fragment_set = next(s for s in sets if not s.is_pair_set)
        selection = selector.select(fragment_set)
        assert selection.representative is None
        assert [unit.name for unit in selection.duplicates] == ["f"]

    def test_pair_sets_ignore_pair_end_keys(self, pair_factory):
        units, sets = _sets(pair_factory("p", 100, 300))
        selector = DuplicateSelector(pair_end_keys=frozenset(iter_pair_end_keys(units)))
        assert selector.select(sets[0]).duplicates == []
