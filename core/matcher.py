from core import terms as term_ops
from core.config import CONTEXT_LINES, HIGHLIGHT_MARKER
from core.models import MatchRecord, MatchType, SearchConfiguration, SearchOptions


def split_lines(text: str) -> list[str]:
    # Only "\n" breaks a line; a trailing "\r" stays part of it
    return text.split("\n")


def line_matches(counts: list[int], match_type: MatchType) -> bool:
    if not counts:
        return False

    if match_type is MatchType.ALL:
        return all(count > 0 for count in counts)

    return any(count > 0 for count in counts)


def context_bounds(index: int, total_lines: int, *, radius: int = CONTEXT_LINES) -> tuple[int, int]:
    # 0-based inclusive window around line `index`, clipped to the text
    start = max(0, index - radius)
    end = min(total_lines - 1, index + radius)
    return start, end


def _merge_spans(spans: list[tuple[int, int]]) -> list[tuple[int, int]]:
    merged: list[list[int]] = []

    for start, end in sorted(spans):
        if merged and start <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])

    return [(start, end) for start, end in merged]


def highlight_merged(text: str, search_terms: tuple[str, ...], options: SearchOptions,
                     *, marker: str = HIGHLIGHT_MARKER) -> str:
    spans: list[tuple[int, int]] = []
    for term in search_terms:
        spans.extend(term_ops.term_spans(text, term, options))

    if not spans:
        return text

    parts: list[str] = []
    position = 0
    for start, end in _merge_spans(spans):
        parts.append(text[position:start])
        parts.append(f"{marker}{text[start:end]}{marker}")
        position = end
    parts.append(text[position:])

    return "".join(parts)


def highlight_sequential(text: str, search_terms: tuple[str, ...], options: SearchOptions,
                         *, marker: str = HIGHLIGHT_MARKER) -> str:
    """
    Wrap each term's hits one term at a time.

    Every later term runs over text that already carries the markers of the
    earlier ones, so overlapping terms can nest or split markers.
    """
    highlighted = text
    for term in search_terms:
        pattern = term_ops.compile_term(term, options)
        highlighted = pattern.sub(lambda m: f"{marker}{m.group(0)}{marker}", highlighted)

    return highlighted


def highlight(text: str, search_terms: tuple[str, ...], options: SearchOptions) -> str:
    if options.merge_highlights:
        return highlight_merged(text, search_terms, options)

    return highlight_sequential(text, search_terms, options)


def find_matches(text: str, config: SearchConfiguration) -> list[MatchRecord]:
    """
    Scan text line by line and return one MatchRecord per matching line,
    in ascending line order.

    Raises:
        InvalidSearchTermError if a term does not compile
    """
    if not config.terms:
        return []

    options = config.options
    lines = split_lines(text)
    matches: list[MatchRecord] = []

    for i, line in enumerate(lines):
        counts = term_ops.count_terms(line, config.terms, options)

        if not line_matches(counts, options.match_type):
            continue

        start, end = context_bounds(i, len(lines))
        window = "\n".join(lines[start:end + 1])

        matches.append(MatchRecord(text=line,
                                   line_number=i + 1,
                                   context=highlight(window, config.terms, options),
                                   occurrences=sum(counts),
                                   context_start=start + 1,
                                   context_end=end + 1))

    return matches
