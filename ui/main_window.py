import logging
from functools import partial
from pathlib import Path

from PyQt6.QtCore import Qt, QThread, QEvent, QObject, QUrl
from PyQt6.QtWidgets import QMainWindow, QLabel, QLineEdit, QPushButton, QProgressBar, QListWidget, QPlainTextEdit, \
    QVBoxLayout, QHBoxLayout, QWidget, QSplitter, QFileDialog, QRadioButton, QTextEdit, QAbstractItemView, \
    QSizePolicy, QCheckBox, QButtonGroup
from PyQt6.QtGui import QColor, QTextCursor, QTextCharFormat, QTextDocument, QFont, QDesktopServices

from core import export
from core.config import HIGHLIGHT_MARKER
from core.models import FileRecord, FileStatus, MatchType, ProcessingStats, RunSummary, SearchConfiguration, \
    SearchOptions
from core.store import ResultStore
from ui.worker import SearchWorker

logger = logging.getLogger(__name__)

NUM_OF_SEPARATORS_BETWEEN_MATCHES = 120


# Backspace on an empty term input removes the last term.
class _TermBackspaceFilter(QObject):
    def __init__(self, window: "MainWindow") -> None:
        super().__init__(window)
        self.window = window

    def eventFilter(self, obj, event) -> bool:
        if event.type() == QEvent.Type.KeyPress and event.key() == Qt.Key.Key_Backspace \
                and not obj.text() and self.window.search_terms:
            self.window.remove_last_term()
            return True
        return False


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()

        self.setWindowTitle("TaDa Search")
        self.resize(1000, 700)

        # One store for the window. Every search takes a new generation from it,
        # which turns merges from any older, still-running search into no-ops.
        self.store = ResultStore()

        # Keep references to avoid garbage-collection while background threads are running.
        # A superseded search keeps running to completion, so more than one may be alive.
        self.threads: dict[int, tuple[QThread, SearchWorker]] = {}

        # Ordered search terms (display/export column order).
        self.search_terms: list[str] = []

        # Configuration of the search whose results are shown.
        self.last_config: SearchConfiguration | None = None
        self.last_root: str | None = None
        self.last_stats: ProcessingStats | None = None

        # Current page of the results list and the records shown on it
        # (used to map a selected UI row -> FileRecord).
        self.current_page = 1
        self.page_records: list[FileRecord] = []

        self._build_ui()
        self._apply_style()
        self._connect_signals()
        self._update_buttons()

    # Create widgets and layouts.
    def _build_ui(self) -> None:
        # --- Widget Initialization ---
        self.status_label = QLabel("Ready")
        self.status_label.setObjectName("statusLabel")
        self.status_label.setSizePolicy(QSizePolicy.Policy.Fixed, QSizePolicy.Policy.Fixed)

        self.path_edit = QLineEdit()
        self.path_edit.setReadOnly(True)
        self.browse_btn = QPushButton("Browse...")

        self.term_edit = QLineEdit()
        self.term_edit.setPlaceholderText("Enter search terms...")
        self.terms_list = QListWidget()
        self.terms_list.setFlow(QListWidget.Flow.LeftToRight)
        self.terms_list.setMaximumHeight(40)
        self.terms_list.setToolTip("Double-click a term to remove it")

        self.match_all_radio_button = QRadioButton("Match all terms")
        self.match_any_radio_button = QRadioButton("Match any term")
        self.match_all_radio_button.setChecked(True)
        self.match_type_group = QButtonGroup(self)
        self.match_type_group.addButton(self.match_all_radio_button)
        self.match_type_group.addButton(self.match_any_radio_button)

        self.case_sensitive_checkbox = QCheckBox("Case sensitive")
        self.whole_word_checkbox = QCheckBox("Match whole words only")
        self.literal_checkbox = QCheckBox("Literal terms")
        self.literal_checkbox.setToolTip("Treat terms as plain text instead of regular expressions")
        self.merge_highlights_checkbox = QCheckBox("Merge overlapping highlights")
        self.merge_highlights_checkbox.setToolTip("Mark overlapping term hits once instead of term by term")
        self.preserve_pattern_checkbox = QCheckBox("Keep patterns as typed")
        self.preserve_pattern_checkbox.setToolTip("Do not lowercase terms; whole-word anchors the whole pattern")

        self.search_btn = QPushButton("Search")
        self.search_btn.setObjectName("searchButton")
        self.export_btn = QPushButton("Export CSV")

        self.progress = QProgressBar()
        self.progress.hide()

        self.stats_label = QLabel("")

        self.results_list = QListWidget()
        self.results_list.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.prev_page_btn = QPushButton("< Prev")
        self.next_page_btn = QPushButton("Next >")
        self.page_label = QLabel("Page 1 / 1")

        self.snippets_box = QPlainTextEdit()
        self.snippets_box.setReadOnly(True)

        # --- Layout Construction ---
        main_layout = QVBoxLayout()
        main_widget = QWidget()

        # 1. Folder Row
        folder_layout = QHBoxLayout()
        folder_layout.addWidget(QLabel("Folder:"))
        folder_layout.addWidget(self.path_edit)
        folder_layout.addWidget(self.browse_btn)

        # 2. Terms Row
        terms_layout = QHBoxLayout()
        terms_layout.addWidget(self.term_edit, 1)
        terms_layout.addWidget(self.terms_list, 2)

        # 3. Options Row
        options_layout = QHBoxLayout()
        options_layout.addWidget(self.match_all_radio_button)
        options_layout.addWidget(self.match_any_radio_button)
        options_layout.addWidget(self.case_sensitive_checkbox)
        options_layout.addWidget(self.whole_word_checkbox)
        options_layout.addWidget(self.literal_checkbox)
        options_layout.addWidget(self.merge_highlights_checkbox)
        options_layout.addWidget(self.preserve_pattern_checkbox)
        options_layout.addStretch(1)
        options_layout.addWidget(self.search_btn)
        options_layout.addWidget(self.export_btn)

        # 4. Progress & Status Row
        status_layout = QHBoxLayout()
        status_layout.addWidget(self.progress)
        status_layout.addWidget(self.stats_label)
        status_layout.addStretch(1)  # Elastic spacer pushes status_label to the right
        status_layout.addWidget(self.status_label)

        # 5. Results (top) vs Snippets (bottom)
        results_widget = QWidget()
        results_layout = QVBoxLayout()
        results_layout.setContentsMargins(0, 0, 0, 0)
        pager_layout = QHBoxLayout()
        pager_layout.addWidget(self.prev_page_btn)
        pager_layout.addWidget(self.page_label)
        pager_layout.addWidget(self.next_page_btn)
        pager_layout.addStretch(1)
        results_layout.addWidget(self.results_list)
        results_layout.addLayout(pager_layout)
        results_widget.setLayout(results_layout)

        self.main_splitter = QSplitter(Qt.Orientation.Vertical)
        self.main_splitter.addWidget(results_widget)
        self.main_splitter.addWidget(self.snippets_box)
        self.main_splitter.setStretchFactor(0, 2)
        self.main_splitter.setStretchFactor(1, 3)

        main_layout.addLayout(folder_layout)
        main_layout.addLayout(terms_layout)
        main_layout.addLayout(options_layout)
        main_layout.addLayout(status_layout)
        main_layout.addWidget(self.main_splitter)

        main_widget.setLayout(main_layout)
        self.setCentralWidget(main_widget)

    def _apply_style(self) -> None:
        self.setStyleSheet("""
            QWidget {
                background: #0f172a;
                color: #f8fafc;
                font-family: 'Segoe UI', 'Inter', system-ui, sans-serif;
                font-size: 13px;
            }
            QLabel#statusLabel {
                background: #1e293b;
                border: 1px solid #334155;
                border-radius: 12px;
                padding: 4px 14px;
                color: #38bdf8;
                font-weight: 600;
                font-size: 11px;
            }
            QLineEdit, QListWidget, QPlainTextEdit {
                background: #020617;
                border: 1px solid #1e293b;
                border-radius: 6px;
                padding: 6px;
                selection-background-color: #2563eb;
            }
            QLineEdit:focus { border: 1px solid #3b82f6; }
            QListWidget::item:selected { background: #1d4ed8; color: white; }
            QPushButton {
                background: #1e293b;
                border: 1px solid #334155;
                border-radius: 6px;
                padding: 6px 16px;
                min-height: 24px;
            }
            QPushButton:hover { background: #334155; }
            QPushButton:disabled { color: #64748b; }
            QPushButton#searchButton { background: #2563eb; font-weight: bold; }
            QPushButton#searchButton:hover { background: #3b82f6; }
            QProgressBar {
                border: 1px solid #1e293b;
                border-radius: 4px;
                text-align: center;
                background: #020617;
            }
            QProgressBar::chunk { background: #3b82f6; border-radius: 3px; }
        """)

    # Connect buttons and input events
    def _connect_signals(self) -> None:
        self.browse_btn.clicked.connect(self.on_browse_clicked)
        self.search_btn.clicked.connect(self.on_search_clicked)
        self.export_btn.clicked.connect(self.on_export_clicked)
        self.prev_page_btn.clicked.connect(self.on_prev_page_clicked)
        self.next_page_btn.clicked.connect(self.on_next_page_clicked)

        self.term_edit.returnPressed.connect(self.on_term_submitted)
        self.term_edit.installEventFilter(_TermBackspaceFilter(self))
        self.terms_list.itemDoubleClicked.connect(self.on_term_double_clicked)

        self.results_list.itemSelectionChanged.connect(self.on_result_selected)
        self.results_list.itemDoubleClicked.connect(self.on_result_double_clicked)

    def _update_buttons(self) -> None:
        self.search_btn.setEnabled(bool(self.search_terms) and bool(self.path_edit.text()))
        self.export_btn.setEnabled(self.store.has_matches())

    # --- Terms ---

    def on_term_submitted(self) -> None:
        term = self.term_edit.text().strip()
        if not term:
            return

        self.search_terms.append(term)
        self.term_edit.clear()
        self._refresh_terms()

    def remove_last_term(self) -> None:
        if self.search_terms:
            self.search_terms.pop()
            self._refresh_terms()

    def on_term_double_clicked(self) -> None:
        row = self.terms_list.currentRow()
        if 0 <= row < len(self.search_terms):
            del self.search_terms[row]
            self._refresh_terms()

    def _refresh_terms(self) -> None:
        self.terms_list.clear()
        self.terms_list.addItems(self.search_terms)
        self.term_edit.setPlaceholderText("Add another term..." if self.search_terms else "Enter search terms...")
        self._update_buttons()

    def _current_options(self) -> SearchOptions:
        return SearchOptions(
            match_type=MatchType.ALL if self.match_all_radio_button.isChecked() else MatchType.ANY,
            case_sensitive=self.case_sensitive_checkbox.isChecked(),
            whole_word=self.whole_word_checkbox.isChecked(),
            literal=self.literal_checkbox.isChecked(),
            merge_highlights=self.merge_highlights_checkbox.isChecked(),
            preserve_pattern=self.preserve_pattern_checkbox.isChecked(),
        )

    # --- Search ---

    def on_browse_clicked(self) -> None:
        # Let user choose the folder to search.
        explorer_dialog = QFileDialog()
        explorer_dialog.setFileMode(QFileDialog.FileMode.Directory)
        dialog_success = explorer_dialog.exec()

        if dialog_success and len(explorer_dialog.selectedFiles()) > 0:
            self.path_edit.setText(explorer_dialog.selectedFiles()[0])
            self._update_buttons()

    def on_search_clicked(self) -> None:
        if not self.path_edit.text():
            self.status_label.setText("No folder...")
            return

        if not self.search_terms:
            self.status_label.setText("Enter a search term")
            return

        config = SearchConfiguration(terms=tuple(self.search_terms), options=self._current_options())
        generation = self.store.start_run()

        self.last_config = config
        self.last_root = self.path_edit.text()
        self.last_stats = None
        self.current_page = 1
        self.results_list.clear()
        self.snippets_box.clear()
        self.stats_label.setText("")
        self._refresh_results_page()

        self.progress.show()
        self.progress.setRange(0, 0)  # Busy mode until the scan reports a total
        self.status_label.setText("Starting...")

        # Create worker + thread. Worker does the heavy lifting; UI stays responsive.
        thread = QThread()
        worker = SearchWorker(self.last_root, config, self.store, generation)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)

        # Worker -> UI communication. Every slot gets the run's generation so
        # signals from a superseded search are dropped.
        worker.status.connect(partial(self.on_search_status, generation))
        worker.progress.connect(partial(self.on_search_progress, generation))
        worker.batch_finished.connect(partial(self.on_batch_finished, generation))
        worker.stats.connect(partial(self.on_search_stats, generation))
        worker.error.connect(partial(self.on_search_error, generation))
        worker.finished.connect(partial(self.on_search_finished, generation))

        # Always stop and clean up the thread when work ends (success or error).
        worker.finished.connect(thread.quit)
        worker.error.connect(thread.quit)
        thread.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        thread.finished.connect(partial(self.threads.pop, generation, None))

        self.threads[generation] = (thread, worker)
        thread.start()

    def on_search_status(self, generation: int, message: str) -> None:
        if self.store.is_current(generation):
            self.status_label.setText(message)

    def on_search_progress(self, generation: int, processed: int, total: int) -> None:
        if not self.store.is_current(generation):
            return

        self.progress.setRange(0, max(total, 1))
        self.progress.setValue(processed)
        percent = round(processed / total * 100) if total else 100
        self.progress.setFormat(f"Processing files: {processed} / {total} ({percent}%)")

    def on_batch_finished(self, generation: int, records: list[FileRecord]) -> None:
        if not self.store.is_current(generation):
            return

        logger.debug("Batch of %d records received", len(records))
        self._refresh_results_page()
        self._update_buttons()

    def on_search_stats(self, generation: int, stats: ProcessingStats) -> None:
        if not self.store.is_current(generation):
            return

        self.last_stats = stats
        memory = f" | memory: {stats.memory_bytes / 1024 / 1024:.0f} MB" if stats.memory_bytes else ""
        self.stats_label.setText(
            f"{stats.success} ok | {stats.error} errors | {stats.unsupported} unsupported | "
            f"{stats.total_matches} matches | {stats.total_occurrences} occurrences{memory}"
        )

    def on_search_error(self, generation: int, message: str) -> None:
        if not self.store.is_current(generation):
            return

        # Run failed: keep partial results and restore UI so the user can try again.
        self.status_label.setText(message)
        self._finish_progress()
        self._refresh_results_page()
        self._update_buttons()

    def on_search_finished(self, generation: int, summary: RunSummary) -> None:
        if summary.stale or not self.store.is_current(generation):
            return

        self._finish_progress()
        self._refresh_results_page()
        self._update_buttons()

        if summary.no_results:
            self.status_label.setText("No matches found in any of the selected files.")
        else:
            self.status_label.setText(f"Search Results ({len(self.store)} files)")

    def _finish_progress(self) -> None:
        self.progress.setRange(0, 100)
        self.progress.setValue(100)
        self.progress.hide()

    # --- Results ---

    def _refresh_results_page(self) -> None:
        page_count = self.store.page_count()
        self.current_page = min(self.current_page, page_count)

        selected_path = None
        row = self.results_list.currentRow()
        if 0 <= row < len(self.page_records):
            selected_path = self.page_records[row].file_path

        self.page_records = self.store.page(self.current_page)

        self.results_list.blockSignals(True)
        self.results_list.clear()
        for record in self.page_records:
            if record.status is FileStatus.SUCCESS:
                self.results_list.addItem(f"matches: {record.match_count} | occurrences: "
                                          f"{record.total_occurrences} | path: {record.file_path}")
            else:
                self.results_list.addItem(f"{record.status.value} | path: {record.file_path}")

        for i, record in enumerate(self.page_records):
            if record.file_path == selected_path:
                self.results_list.setCurrentRow(i)
                break
        self.results_list.blockSignals(False)

        self.page_label.setText(f"Page {self.current_page} / {page_count}")
        self.prev_page_btn.setEnabled(self.current_page > 1)
        self.next_page_btn.setEnabled(self.current_page < page_count)

    def on_prev_page_clicked(self) -> None:
        if self.current_page > 1:
            self.current_page -= 1
            self._refresh_results_page()

    def on_next_page_clicked(self) -> None:
        if self.current_page < self.store.page_count():
            self.current_page += 1
            self._refresh_results_page()

    """
    Read the selected row, get the corresponding FileRecord,
    show its matches in the text box.
    """
    def on_result_selected(self) -> None:
        row = self.results_list.currentRow()

        if row < 0 or row >= len(self.page_records):
            self.snippets_box.clear()
            return

        record = self.page_records[row]
        if record.error:
            self.snippets_box.setExtraSelections([])
            self.snippets_box.setPlainText(f"{record.file_path}\n{record.error}")
        else:
            self.show_matches_with_highlight(record)

        self.status_label.setText(f"Showing result for: {record.file_name}")

    @staticmethod
    def _strip_markers(context: str) -> tuple[str, list[tuple[int, int]]]:
        # Split on the marker: odd parts were wrapped, so they get highlighted.
        plain_parts: list[str] = []
        spans: list[tuple[int, int]] = []
        position = 0

        for i, part in enumerate(context.split(HIGHLIGHT_MARKER)):
            if i % 2 == 1 and part:
                spans.append((position, position + len(part)))
            plain_parts.append(part)
            position += len(part)

        return "".join(plain_parts), spans

    """
        Render every match of a record with a "Match n (Line x)" header,
        its context window, and a yellow background on each highlighted span.
    """
    def show_matches_with_highlight(self, record: FileRecord) -> None:
        self.snippets_box.clear()
        self.snippets_box.setExtraSelections([])

        if not record.matches:
            self.snippets_box.setPlainText(f"Found 0 matches in {record.file_path}")
            return

        text_parts: list[str] = []
        highlight_spans: list[tuple[int, int]] = []
        header_spans: list[tuple[int, int]] = []
        position = 0

        for idx, match in enumerate(record.matches, start=1):
            plural = "" if match.occurrences == 1 else "s"
            header = f"Match {idx} (Line {match.line_number}) - {match.occurrences} occurrence{plural}\n"
            header_spans.append((position, position + len(header) - 1))
            text_parts.append(header)
            position += len(header)

            plain, spans = self._strip_markers(match.context)
            highlight_spans.extend((position + start, position + end) for start, end in spans)
            block = f"{plain}\n{'-' * NUM_OF_SEPARATORS_BETWEEN_MATCHES}\n"
            text_parts.append(block)
            position += len(block)

        self.snippets_box.setPlainText("".join(text_parts))

        fmt = QTextCharFormat()
        fmt.setBackground(QColor("yellow"))
        fmt.setForeground(QColor("Black"))

        header_format = QTextCharFormat()
        header_format.setForeground(QColor("#00FFFF"))
        header_format.setFontWeight(QFont.Weight.Bold)

        doc: QTextDocument = self.snippets_box.document()
        selections: list[QTextEdit.ExtraSelection] = []
        for spans, span_format in ((highlight_spans, fmt), (header_spans, header_format)):
            for start, end in spans:
                cursor = QTextCursor(doc)
                cursor.setPosition(start)
                cursor.setPosition(end, QTextCursor.MoveMode.KeepAnchor)

                sel = QTextEdit.ExtraSelection()
                sel.cursor = cursor
                sel.format = span_format
                selections.append(sel)

        self.snippets_box.setExtraSelections(selections)

    def result_path(self, record: FileRecord) -> Path | None:
        # Relative paths start with the searched folder's name.
        if not self.last_root:
            return None
        return Path(self.last_root).parent / record.file_path

    def on_result_double_clicked(self) -> None:
        row = self.results_list.currentRow()
        if not 0 <= row < len(self.page_records):
            return

        path = self.result_path(self.page_records[row])
        if path is None or not path.is_file():
            self.status_label.setText("File not exists")
            return

        QDesktopServices.openUrl(QUrl.fromLocalFile(str(path)))

    # --- Export ---

    def on_export_clicked(self) -> None:
        if self.last_config is None or not self.store.has_matches():
            self.status_label.setText("No results to export")
            return

        terms = list(self.last_config.terms)
        default_name = export.export_filename(terms)
        file_path, _ = QFileDialog.getSaveFileName(self, "Export CSV", default_name, "CSV files (*.csv)")
        if not file_path:
            return

        try:
            content = export.export_csv(self.store, terms, self.last_config.options)
            Path(file_path).write_text(content, encoding="utf-8")
        except OSError as e:
            self.status_label.setText(f"Export failed, error: {e}")
        else:
            self.status_label.setText(f"Exported results to: {file_path}")
