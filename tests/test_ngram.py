"""Tests for licensescan.ngram."""
import pytest

from licensescan.ngram import NgramSet


class TestFromStr:
    def test_bigrams(self) -> None:
        grams = NgramSet.from_str("a b c", 2)
        assert grams.grams == {"a b": 1, "b c": 1}
        assert len(grams) == 2

    def test_repeats_counted(self) -> None:
        grams = NgramSet.from_str("a b a b", 2)
        assert grams.grams == {"a b": 2, "b a": 1}
        assert len(grams) == 3
        assert grams.get("a b") == 2
        assert grams.get("x y") == 0

    def test_too_few_words(self) -> None:
        assert len(NgramSet.from_str("license", 2)) == 0
        assert len(NgramSet.from_str("", 2)) == 0

    def test_unigrams(self) -> None:
        assert NgramSet.from_str("a a b", 1).grams == {"a": 2, "b": 1}

    def test_invalid_n(self) -> None:
        with pytest.raises(ValueError):
            NgramSet.from_str("a b", 0)


class TestDice:
    def test_identical(self) -> None:
        a = NgramSet.from_str("this is a license text", 2)
        assert a.dice(a) == 1.0

    def test_disjoint(self) -> None:
        a = NgramSet.from_str("a b c", 2)
        b = NgramSet.from_str("x y z", 2)
        assert a.dice(b) == 0.0

    def test_partial_overlap(self) -> None:
        a = NgramSet.from_str("a b c", 2)
        b = NgramSet.from_str("a b d", 2)
        assert a.dice(b) == 0.5

    def test_multiplicity(self) -> None:
        a = NgramSet.from_str("a b a b", 2)
        b = NgramSet.from_str("a b", 2)
        assert a.dice(b) == 0.5
        assert b.dice(a) == 0.5

    def test_different_n(self) -> None:
        a = NgramSet.from_str("a b c", 2)
        b = NgramSet.from_str("a b c", 1)
        assert a.dice(b) == 0.0

    def test_empty_sets(self) -> None:
        empty = NgramSet.from_str("", 2)
        full = NgramSet.from_str("a b c", 2)
        assert empty.dice(empty) == 1.0
        assert empty.dice(full) == 0.0
        assert full.dice(empty) == 0.0


class TestEqualityAndSerialization:
    def test_equality(self) -> None:
        assert NgramSet.from_str("a b c", 2) == NgramSet.from_str("a  b\nc", 2)
        assert NgramSet.from_str("a b c", 2) != NgramSet.from_str("a b d", 2)

    def test_dict_roundtrip(self) -> None:
        grams = NgramSet.from_str("a b a b", 2)
        restored = NgramSet.from_dict(grams.to_dict())
        assert restored == grams
        assert len(restored) == 3

    def test_malformed_payload(self) -> None:
        with pytest.raises(ValueError):
            NgramSet.from_dict({"grams": {}})
        with pytest.raises(ValueError):
            NgramSet.from_dict({"n": 2, "grams": {"a b": 0}})


class TestDirectConstruction:
    def test_size_derived_from_grams(self) -> None:
        grams = NgramSet(n=2, grams={"a b": 1})
        assert len(grams) == 1
        assert grams == NgramSet.from_str("a b", 2)
        assert grams.dice(NgramSet.from_str("a b", 2)) == 1.0

    def test_score_stays_in_bounds(self) -> None:
        direct = NgramSet(n=2, grams={"a b": 2, "b c": 1})
        other = NgramSet.from_str("a b c a b", 2)
        assert 0.0 <= direct.dice(other) <= 1.0
        assert 0.0 <= other.dice(direct) <= 1.0

    def test_empty_default(self) -> None:
        assert len(NgramSet(n=2)) == 0


class TestImmutability:
    def test_grams_read_only(self) -> None:
        grams = NgramSet.from_str("a b c", 2)
        with pytest.raises(TypeError):
            grams.grams["x y"] = 1  # type: ignore[index]
        assert len(grams) == 2

    def test_source_dict_is_copied(self) -> None:
        source = {"a b": 1}
        grams = NgramSet(n=2, grams=source)
        source["b c"] = 1
        assert grams.grams == {"a b": 1}
        assert len(grams) == 1

    def test_hashable(self) -> None:
        a = NgramSet.from_str("a b c", 2)
        b = NgramSet(n=2, grams={"b c": 1, "a b": 1})
        assert hash(a) == hash(b)
        assert len({a, b, NgramSet.from_str("a b d", 2)}) == 2
