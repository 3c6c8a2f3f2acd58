import math
import threading

from core.config import PAGE_SIZE
from core.models import FileRecord, FileStatus, ProcessingStats


def _sort_key(record: FileRecord) -> tuple[int, str]:
    return -record.match_count, record.file_path


class ResultStore:
    """
    All FileRecords of the current run, kept sorted by match count
    (descending, then file path).

    Merges replace the record list with a new sorted list instead of
    mutating it, so readers on other threads always see a whole snapshot.
    """

    def __init__(self, *, page_size: int = PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")

        self.page_size = page_size
        self._records: list[FileRecord] = []
        self._generation = 0
        self._generation_lock = threading.Lock()

    @property
    def generation(self) -> int:
        return self._generation

    # Clear the store for a new run and return the token that run merges with.
    def start_run(self) -> int:
        with self._generation_lock:
            self._generation += 1
            self._records = []
            return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def merge_batch(self, records: list[FileRecord], generation: int) -> bool:
        # False (and nothing merged) when a newer run owns the store
        with self._generation_lock:
            if not self.is_current(generation):
                return False

            self._records = sorted(self._records + list(records), key=_sort_key)
            return True

    def records(self) -> list[FileRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def get(self, file_path: str) -> FileRecord | None:
        for record in self._records:
            if record.file_path == file_path:
                return record
        return None

    def page_count(self) -> int:
        return max(1, math.ceil(len(self._records) / self.page_size))

    # 1-based page of the sorted view
    def page(self, number: int) -> list[FileRecord]:
        if number < 1:
            raise ValueError("Page numbers start at 1")

        snapshot = self._records
        start = (number - 1) * self.page_size
        return snapshot[start:start + self.page_size]

    def matching_records(self) -> list[FileRecord]:
        return [record for record in self._records if record.match_count > 0]

    def has_matches(self) -> bool:
        return any(record.match_count > 0 for record in self._records)

    def stats(self, *, total_files: int | None = None,
              memory_bytes: int | None = None) -> ProcessingStats:
        snapshot = self._records
        stats = ProcessingStats(total_files=len(snapshot) if total_files is None else total_files,
                                processed_files=len(snapshot),
                                memory_bytes=memory_bytes)

        for record in snapshot:
            if record.status is FileStatus.SUCCESS:
                stats.success += 1
            elif record.status is FileStatus.ERROR:
                stats.error += 1
            else:
                stats.unsupported += 1

            stats.total_matches += record.match_count
            stats.total_occurrences += record.total_occurrences

        return stats
