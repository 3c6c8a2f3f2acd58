import pytest

from core import terms
from core.errors import InvalidSearchTermError
from core.models import SearchOptions


def test_counts_non_overlapping_hits():
    assert terms.count_occurrences("aaaa", "aa", SearchOptions()) == 2


def test_case_insensitive_by_default():
    assert terms.count_occurrences("Foo foo FOO", "foo", SearchOptions()) == 3


def test_case_sensitive():
    options = SearchOptions(case_sensitive=True)
    assert terms.count_occurrences("Foo foo FOO", "foo", options) == 1


def test_whole_word_anchors_term():
    options = SearchOptions(whole_word=True)
    assert terms.count_occurrences("category theory", "cat", options) == 0
    assert terms.count_occurrences("a cat, the cat", "cat", options) == 2


def test_whole_word_anchors_first_and_last_alternative():
    # "\bcat|dog\b": only the outer ends of the alternation are anchored
    options = SearchOptions(whole_word=True)
    assert terms.count_occurrences("catalog hotdog", "cat|dog", options) == 2
    assert terms.count_occurrences("dogma", "cat|dog", options) == 0


def test_preserve_pattern_wraps_alternation():
    options = SearchOptions(whole_word=True, preserve_pattern=True)
    assert terms.count_occurrences("catalog hotdog", "cat|dog", options) == 0
    assert terms.count_occurrences("dog and cat", "cat|dog", options) == 2


def test_terms_are_patterns_by_default():
    assert terms.count_occurrences("abc a.c", "a.c", SearchOptions()) == 2


def test_literal_mode_escapes_terms():
    options = SearchOptions(literal=True)
    assert terms.count_occurrences("abc a.c", "a.c", options) == 1
    assert terms.count_occurrences("f(x) = 1", "f(x)", options) == 1


def test_case_folding_lowercases_the_term():
    # "\W" folds to "\w", as when both line and term are lowercased
    assert terms.count_occurrences("a-b", r"a\Wb", SearchOptions()) == 0
    assert terms.count_occurrences("axb", r"a\Wb", SearchOptions()) == 1


def test_preserve_pattern_keeps_escape_classes():
    options = SearchOptions(preserve_pattern=True)
    assert terms.count_occurrences("a-b", r"a\Wb", options) == 1
    assert terms.count_occurrences("A-B", r"a\Wb", options) == 1


def test_case_sensitive_keeps_escape_classes():
    assert terms.count_occurrences("a-b", r"a\Wb", SearchOptions(case_sensitive=True)) == 1



def test_malformed_term_raises():
    with pytest.raises(InvalidSearchTermError) as excinfo:
        terms.count_occurrences("text", "(unclosed", SearchOptions())

    assert excinfo.value.term == "(unclosed"
    assert isinstance(excinfo.value, ValueError)


def test_count_terms_keeps_term_order():
    assert terms.count_terms("b a b", ["a", "b", "c"], SearchOptions()) == [1, 2, 0]


def test_term_spans_skip_empty_matches():
    assert terms.term_spans("ab", "x*", SearchOptions()) == []
    assert terms.term_spans("xab x", "x", SearchOptions()) == [(0, 1), (4, 5)]
