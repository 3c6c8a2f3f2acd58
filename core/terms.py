import re
from functools import lru_cache

from core.errors import InvalidSearchTermError
from core.models import SearchOptions


@lru_cache(maxsize=256)
def _compile(source: str, case_sensitive: bool, whole_word: bool, grouped: bool) -> re.Pattern:
    if whole_word:
        source = rf"\b(?:{source})\b" if grouped else rf"\b{source}\b"
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile(source, flags)


def compile_term(term: str, options: SearchOptions) -> re.Pattern:
    """
    Build the pattern for one search term.

    The term is pattern source unless options.literal is set. Without
    case_sensitive the term is lowercased and matched with re.IGNORECASE,
    which folds case on both sides while keeping the line's offsets intact.
    Lowercasing also rewrites escapes such as \\W to \\w; options.preserve_pattern
    skips it and wraps whole-word terms as \\b(?:term)\\b so alternations are
    anchored as a unit.

    Raises:
        InvalidSearchTermError if the term does not compile
    """
    source = term
    if not options.case_sensitive and not options.preserve_pattern:
        source = source.lower()
    if options.literal:
        source = re.escape(source)
    try:
        return _compile(source, options.case_sensitive, options.whole_word, options.preserve_pattern)
    except re.error as e:
        raise InvalidSearchTermError(term, str(e)) from e


def count_occurrences(line: str, term: str, options: SearchOptions) -> int:
    # Non-overlapping hits of a term on one line
    pattern = compile_term(term, options)
    return sum(1 for _ in pattern.finditer(line))


def count_terms(line: str, terms: tuple[str, ...] | list[str],
                options: SearchOptions) -> list[int]:
    return [count_occurrences(line, term, options) for term in terms]


def term_spans(text: str, term: str, options: SearchOptions) -> list[tuple[int, int]]:
    pattern = compile_term(term, options)
    return [match.span() for match in pattern.finditer(text) if match.end() > match.start()]
