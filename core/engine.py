import concurrent.futures
import logging
import time
from typing import Callable, Iterable, Iterator

import psutil

from core import extractors, matcher
from core.config import BATCH_PAUSE_SECONDS, BATCH_SIZE, MAX_FILE_BYTES
from core.errors import SearchRunError, UnsupportedFileTypeError
from core.models import (FileDescriptor, FileRecord, FileStatus, ProcessingStats,
                         RunSummary, SearchConfiguration)
from core.store import ResultStore

logger = logging.getLogger(__name__)

ProgressCb = Callable[[int, int], None]            # processed, total
BatchCb = Callable[[list[FileRecord]], None]
StatsCb = Callable[[ProcessingStats], None]

RUN_ERROR_MESSAGE = "An error occurred while searching the files."


def sample_memory() -> int | None:
    try:
        return psutil.Process().memory_info().rss
    except psutil.Error:
        return None


def batched(items: list[FileDescriptor], size: int) -> Iterator[list[FileDescriptor]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def process_file(descriptor: FileDescriptor, config: SearchConfiguration,
                 *, max_bytes: int = MAX_FILE_BYTES) -> FileRecord:
    """
    Extract and match one file. Never raises: every failure is recorded on
    the returned FileRecord.
    """
    record = FileRecord(file_name=descriptor.name,
                        file_path=descriptor.relative_path,
                        file_type=descriptor.declared_type or "unknown")

    try:
        text = extractors.extract_text(descriptor, max_bytes=max_bytes)
        record.matches = matcher.find_matches(text, config)
    except UnsupportedFileTypeError as e:
        record.status = FileStatus.UNSUPPORTED
        record.error = str(e)
    except Exception as e:
        record.status = FileStatus.ERROR
        record.error = str(e) or type(e).__name__
        record.matches = []
        logger.warning("Failed to process %s: %s", descriptor.relative_path, record.error)

    return record


class BatchScheduler:
    """
    Run one search over a set of files in fixed-size batches.

    Files inside a batch are processed concurrently; the next batch starts
    only after the whole batch has settled and been merged into the store.
    A short pause between batches leaves the host room to handle the
    progress it was sent.
    """

    def __init__(self,
                 store: ResultStore,
                 *,
                 batch_size: int = BATCH_SIZE,
                 batch_pause: float = BATCH_PAUSE_SECONDS,
                 max_bytes: int = MAX_FILE_BYTES,
                 on_progress: ProgressCb | None = None,
                 on_batch: BatchCb | None = None,
                 on_stats: StatsCb | None = None,
                 sleep: Callable[[float], None] = time.sleep,
                 memory_probe: Callable[[], int | None] = sample_memory) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")

        self.store = store
        self.batch_size = batch_size
        self.batch_pause = batch_pause
        self.max_bytes = max_bytes
        self.on_progress = on_progress
        self.on_batch = on_batch
        self.on_stats = on_stats
        self._sleep = sleep
        self._memory_probe = memory_probe

    def run(self, files: Iterable[FileDescriptor], config: SearchConfiguration,
            *, generation: int | None = None) -> RunSummary:
        """
        Process every file once and return the run summary.

        Pass `generation` when the caller already called store.start_run();
        otherwise a new run is started here.

        Raises:
            SearchRunError if anything fails outside per-file processing.
            Records merged so far stay in the store.
        """
        if generation is None:
            generation = self.store.start_run()

        processed = 0

        try:
            files = list(files)
            total = len(files)
            stats = self.store.stats(total_files=total)
            logger.info("Search run %d started: %d files, %d terms, %s",
                        generation, total, len(config.terms), config.options)

            with concurrent.futures.ThreadPoolExecutor(max_workers=self.batch_size,
                                                       thread_name_prefix="tada-file") as executor:
                for batch_number, batch in enumerate(batched(files, self.batch_size)):
                    if batch_number:
                        self._sleep(self.batch_pause)

                    futures = [executor.submit(process_file, descriptor, config,
                                               max_bytes=self.max_bytes)
                               for descriptor in batch]
                    concurrent.futures.wait(futures)
                    records = [future.result() for future in futures]

                    if not self.store.merge_batch(records, generation):
                        logger.info("Search run %d superseded after %d of %d files",
                                    generation, processed, total)
                        return RunSummary(stats=stats, stale=True)

                    processed += len(records)
                    stats = self.store.stats(total_files=total, memory_bytes=self._memory_probe())
                    logger.info("Batch %d done: %d/%d files, %d matches",
                                batch_number + 1, processed, total, stats.total_matches)

                    if self.on_batch:
                        self.on_batch(records)
                    if self.on_progress:
                        self.on_progress(processed, total)
                    if self.on_stats:
                        self.on_stats(stats)
        except Exception as e:
            logger.exception("Search run %d failed", generation)
            raise SearchRunError(RUN_ERROR_MESSAGE) from e

        no_results = not self.store.has_matches()
        logger.info("Search run %d finished: %d files, %d matches, %d errors, %d unsupported",
                    generation, processed, stats.total_matches, stats.error, stats.unsupported)

        return RunSummary(stats=stats, no_results=no_results)
