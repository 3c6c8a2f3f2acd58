from enum import Enum
from typing import Callable, NamedTuple
from dataclasses import dataclass, field

class MatchType(Enum):
    # How per-term hits on one line combine into a line match
    ALL = "all"
    ANY = "any"

class FileStatus(Enum):
    SUCCESS = "success"
    ERROR = "error"
    UNSUPPORTED = "unsupported"

class DocumentKind(Enum):
    # Decoder family chosen for a file
    PDF = 1
    WORD = 2
    TEXT = 3
    UNSUPPORTED = 4

@dataclass(frozen=True)
class SearchOptions:
    match_type: MatchType = MatchType.ALL
    case_sensitive: bool = False
    whole_word: bool = False
    literal: bool = False           # Escape terms instead of reading them as patterns
    merge_highlights: bool = False  # Merge overlapping term spans instead of marking term by term
    preserve_pattern: bool = False  # No case-folding of the term; whole-word anchors the term as a group

@dataclass(frozen=True)
class SearchConfiguration:
    # Term order only drives display/export columns, never the match outcome
    terms: tuple[str, ...]
    options: SearchOptions = field(default_factory=SearchOptions)

    def __post_init__(self) -> None:
        object.__setattr__(self, "terms", tuple(self.terms))
        for term in self.terms:
            if not isinstance(term, str) or not term:
                raise ValueError("Search terms must be non-empty strings")

@dataclass
class FileDescriptor:
    # One file offered to a run, independent of where its bytes live
    name: str
    relative_path: str
    declared_type: str   # MIME type, empty when unknown
    size: int            # Bytes
    reader: Callable[[], bytes] = field(repr=False)

    def read_bytes(self) -> bytes:
        return self.reader()

class MatchRecord(NamedTuple):
    # One matching line of a file
    text: str            # Source line as it appears in the text
    line_number: int     # 1-based
    context: str         # Highlighted window of surrounding lines
    occurrences: int     # Sum of every term's hits on the line
    context_start: int   # 1-based first line of the window
    context_end: int     # 1-based last line of the window (inclusive)

@dataclass
class FileRecord:
    # Outcome for a single file. Identity key is file_path.
    file_name: str
    file_path: str
    file_type: str
    status: FileStatus = FileStatus.SUCCESS
    error: str | None = None
    matches: list[MatchRecord] = field(default_factory=list)

    @property
    def match_count(self) -> int:
        return len(self.matches)

    @property
    def total_occurrences(self) -> int:
        return sum(match.occurrences for match in self.matches)

@dataclass
class ProcessingStats:
    total_files: int = 0
    processed_files: int = 0
    success: int = 0
    error: int = 0
    unsupported: int = 0
    total_matches: int = 0
    total_occurrences: int = 0
    memory_bytes: int | None = None

@dataclass
class RunSummary:
    stats: ProcessingStats
    no_results: bool = False
    stale: bool = False    # A newer run took over the store before this one finished
