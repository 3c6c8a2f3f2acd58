import csv
import io
import re
from datetime import date

from core import terms as term_ops
from core.models import FileRecord, SearchOptions
from core.store import ResultStore

MAX_FILENAME_TERMS_LEN = 80


def build_header(search_terms: list[str] | tuple[str, ...], *, detailed: bool = False) -> list[str]:
    header = ["File Name", "File Path", *search_terms, "Total Occurrences"]
    if detailed:
        header += ["File Type", "Total Matches", "Matching Lines"]
    return header


def term_counts(record: FileRecord, search_terms: list[str] | tuple[str, ...],
                options: SearchOptions) -> list[int]:
    # Per-term hits over the file's matched lines, counted like the matcher counts them
    totals = [0] * len(search_terms)
    for match in record.matches:
        for i, count in enumerate(term_ops.count_terms(match.text, search_terms, options)):
            totals[i] += count
    return totals


def _matching_lines_summary(record: FileRecord) -> str:
    return "; ".join(f"Line {m.line_number} ({m.occurrences} occurrences)" for m in record.matches)


def build_rows(store: ResultStore, search_terms: list[str] | tuple[str, ...],
               options: SearchOptions, *, detailed: bool = False) -> list[list[str]]:
    """
    Header row followed by one row per file with at least one match, in the
    store's order.
    """
    rows = [build_header(search_terms, detailed=detailed)]

    for record in store.matching_records():
        row = [record.file_name, record.file_path,
               *(str(count) for count in term_counts(record, search_terms, options)),
               str(record.total_occurrences)]
        if detailed:
            row += [record.file_type, str(record.match_count), _matching_lines_summary(record)]
        rows.append(row)

    return rows


def export_csv(store: ResultStore, search_terms: list[str] | tuple[str, ...],
               options: SearchOptions, *, detailed: bool = False) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(build_rows(store, search_terms, options, detailed=detailed))
    return buffer.getvalue()


def export_filename(search_terms: list[str] | tuple[str, ...], *, today: date | None = None) -> str:
    suffix = re.sub(r'[\\/:*?"<>|\s]+', "_", "-".join(search_terms)).strip("._-")
    suffix = suffix[:MAX_FILENAME_TERMS_LEN]

    if not suffix:
        suffix = (today or date.today()).isoformat()

    return f"search-results-{suffix}.csv"
