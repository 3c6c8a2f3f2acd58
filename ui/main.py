import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from PyQt6.QtWidgets import QApplication

from core.config import LOG_DIR, LOG_LEVEL


def setup_logging(logs_dir: Path = LOG_DIR, level: str = LOG_LEVEL) -> None:
    logger = logging.getLogger()
    logger.setLevel(level)
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(message)s")

    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(str(logs_dir / "tada_search.log"), maxBytes=1_000_000,
                                 backupCount=3, encoding="utf-8")
    except OSError as e:
        # Without a writable log dir the app still logs to stdout.
        fh = None
        print(f"File logging disabled: {e}", file=sys.stderr)

    if fh is not None:
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)
    logger.addHandler(sh)

    logging.info("Logging initialized: %s", logs_dir)


# Create QApplication, show MainWindow, exec().
def main() -> None:
    setup_logging()

    from ui import main_window

    app = QApplication(sys.argv)
    window = main_window.MainWindow()

    window.show()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
