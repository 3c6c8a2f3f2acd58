import pytest

pytest.importorskip("PyQt6.QtCore")

from core.models import MatchType, SearchConfiguration, SearchOptions  # noqa: E402
from core.store import ResultStore  # noqa: E402
from ui.worker import SearchWorker  # noqa: E402


def make_worker(root, terms, store):
    config = SearchConfiguration(terms=terms, options=SearchOptions(match_type=MatchType.ANY))
    return SearchWorker(str(root), config, store, store.start_run())


def test_worker_emits_progress_batches_and_summary(qt_app, tmp_path):
    root = tmp_path / "docs"
    root.mkdir()
    (root / "a.txt").write_text("alpha\nalpha alpha", encoding="utf-8")
    (root / "b.txt").write_text("beta", encoding="utf-8")

    store = ResultStore()
    worker = make_worker(root, ("alpha",), store)
    statuses, progress, batches, summaries, errors = [], [], [], [], []
    worker.status.connect(lambda value: statuses.append(value))
    worker.progress.connect(lambda done, total: progress.append((done, total)))
    worker.batch_finished.connect(lambda value: batches.append(value))
    worker.finished.connect(lambda value: summaries.append(value))
    worker.error.connect(lambda value: errors.append(value))

    worker.run()

    assert errors == []
    assert statuses[0] == "Scanning..."
    assert progress[0] == (0, 2)
    assert progress[-1] == (2, 2)
    assert sum(len(batch) for batch in batches) == 2
    assert len(summaries) == 1
    assert not summaries[0].no_results
    assert store.records()[0].file_path == "docs/a.txt"
    assert store.records()[0].total_occurrences == 3


def test_worker_reports_scan_errors(qt_app, tmp_path):
    store = ResultStore()
    worker = make_worker(tmp_path / "missing", ("x",), store)
    errors, summaries = [], []
    worker.error.connect(lambda value: errors.append(value))
    worker.finished.connect(lambda value: summaries.append(value))

    worker.run()

    assert len(errors) == 1
    assert errors[0].startswith("Scan Error")
    assert summaries == []
