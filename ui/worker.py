from PyQt6.QtCore import pyqtSignal, QObject

from core import scanner
from core.engine import BatchScheduler
from core.errors import SearchRunError
from core.models import ProcessingStats, SearchConfiguration
from core.store import ResultStore

# Background worker that scans a folder and runs one search over its files.
# It runs in a QThread and communicates with the UI exclusively via signals.
class SearchWorker(QObject):
    # Emitted to report stages (e.g. "Scanning...", "Searching 120 files...").
    status = pyqtSignal(str)

    # Emitted after every merged batch: processed files, total files.
    progress = pyqtSignal(int, int)

    # Emitted after every merged batch with that batch's FileRecords.
    batch_finished = pyqtSignal(list)

    # Emitted after every merged batch with the store-wide ProcessingStats.
    stats = pyqtSignal(object)

    # Emitted when the folder cannot be scanned or the run fails outside per-file processing.
    error = pyqtSignal(str)

    # Emitted once when every file has a record (RunSummary).
    finished = pyqtSignal(object)

    def __init__(self,
                 root_dir: str,
                 config: SearchConfiguration,
                 store: ResultStore,
                 generation: int) -> None:
        super().__init__()
        # Captured at creation time; not modified during execution.
        self.root_dir = root_dir
        self.config = config
        self.store = store
        self.generation = generation

    """
       Worker entry point executed inside a background thread.

       Flow:
       1) Emit status("Scanning...") and collect the folder's files.
       2) Run the batch scheduler against the shared store with the
          generation token handed out by the window. A newer search makes
          this run's remaining merges a no-op.
       3) Emit finished(summary) on completion.
       On a scan or run-level failure: emit error(...) and stop.
    """

    def run(self) -> None:
        try:
            self.status.emit("Scanning...")
            files = scanner.scan_folder(self.root_dir)
        except OSError as e:
            self.error.emit(f"Scan Error: {e}")
            return

        self.status.emit(f"Searching {len(files)} files...")
        self.progress.emit(0, len(files))

        scheduler = BatchScheduler(self.store,
                                   on_progress=self.progress.emit,
                                   on_batch=self.batch_finished.emit,
                                   on_stats=self._emit_stats)
        try:
            summary = scheduler.run(files, self.config, generation=self.generation)
        except SearchRunError as e:
            self.error.emit(str(e))
            return
        else:
            self.finished.emit(summary)

    def _emit_stats(self, stats: ProcessingStats) -> None:
        self.stats.emit(stats)
