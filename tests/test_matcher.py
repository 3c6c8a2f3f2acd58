import pytest

from core import matcher
from core.errors import InvalidSearchTermError
from core.models import MatchType, SearchConfiguration, SearchOptions


def config(*terms: str, **options) -> SearchConfiguration:
    return SearchConfiguration(terms=terms, options=SearchOptions(**options))


def test_all_requires_every_term():
    text = "only foo here\nfoo and bar and foo"
    matches = matcher.find_matches(text, config("foo", "bar", match_type=MatchType.ALL))

    assert [m.line_number for m in matches] == [2]
    assert matches[0].occurrences == 3


def test_any_counts_only_present_terms():
    text = "nothing\nonly bar here"
    matches = matcher.find_matches(text, config("foo", "bar", match_type=MatchType.ANY))

    assert len(matches) == 1
    assert matches[0].line_number == 2
    assert matches[0].occurrences == 1


def test_whole_word_rejects_partial_word():
    text = "category theory"

    assert matcher.find_matches(text, config("cat", whole_word=True)) == []
    assert len(matcher.find_matches(text, config("cat", whole_word=False))) == 1


def test_case_insensitive_match():
    matches = matcher.find_matches("this has foo once", config("Foo", case_sensitive=False))

    assert len(matches) == 1
    assert matches[0].occurrences == 1
    assert matcher.find_matches("this has foo once", config("Foo", case_sensitive=True)) == []


def test_empty_term_set_never_matches():
    assert matcher.find_matches("anything at all\n\n", SearchConfiguration(terms=())) == []


def test_empty_terms_are_rejected():
    with pytest.raises(ValueError):
        SearchConfiguration(terms=("foo", ""))


def test_malformed_term_fails_whole_text():
    with pytest.raises(InvalidSearchTermError):
        matcher.find_matches("foo\nbar", config("foo", "[bad"))


def test_duplicate_terms_count_twice():
    matches = matcher.find_matches("foo", config("foo", "foo"))
    assert matches[0].occurrences == 2


def test_term_order_does_not_change_outcome():
    text = "alpha beta\nbeta\nalpha"
    first = matcher.find_matches(text, config("alpha", "beta", match_type=MatchType.ANY))
    second = matcher.find_matches(text, config("beta", "alpha", match_type=MatchType.ANY))

    assert [(m.line_number, m.occurrences) for m in first] == \
           [(m.line_number, m.occurrences) for m in second]


@pytest.mark.parametrize("index, expected", [
    (0, (1, 3)),
    (1, (1, 4)),
    (5, (4, 8)),
    (9, (8, 10)),
])
def test_context_window_is_clipped(index, expected):
    lines = [f"line {n}" for n in range(10)]
    lines[index] = "target"
    matches = matcher.find_matches("\n".join(lines), config("target"))

    assert len(matches) == 1
    match = matches[0]
    assert (match.context_start, match.context_end) == expected

    start, end = expected
    window = lines[start - 1:end]
    assert match.context.replace("**", "") == "\n".join(window)


def test_context_bounds_for_short_text():
    assert matcher.context_bounds(0, 1) == (0, 0)


def test_blank_lines_are_candidates():
    matches = matcher.find_matches("a\n\nb", config("^$"))
    assert [m.line_number for m in matches] == [2]


def test_line_keeps_source_text():
    matches = matcher.find_matches("  padded foo  \r\nnext", config("foo"))
    assert matches[0].text == "  padded foo  \r"


def test_context_highlights_all_terms():
    matches = matcher.find_matches("say foo then bar", config("foo", "bar"))
    assert matches[0].context == "say **foo** then **bar**"


def test_merged_highlight_joins_overlaps():
    options = SearchOptions(merge_highlights=True)
    assert matcher.highlight_merged("foobar", ("foo", "foobar"), options) == "**foobar**"
    assert matcher.highlight_merged("foobar", ("foo", "bar"), options) == "**foobar**"


def test_sequential_highlight_nests_overlapping_terms():
    options = SearchOptions()

    assert matcher.highlight_sequential("foobar", ("foo", "foobar"), options) == "**foo**bar"
    assert matcher.highlight_sequential("ab", ("ab", "b"), options) == "**a**b****"


def test_highlight_is_sequential_by_default():
    text = "ab"
    sequential = matcher.find_matches(text, config("ab", "b"))
    merged = matcher.find_matches(text, config("ab", "b", merge_highlights=True))

    assert sequential[0].context == "**a**b****"
    assert merged[0].context == "**ab**"


def test_highlight_is_case_insensitive():
    matches = matcher.find_matches("Alpha ALPHA", config("alpha"))
    assert matches[0].context == "**Alpha** **ALPHA**"
    assert matches[0].occurrences == 2
