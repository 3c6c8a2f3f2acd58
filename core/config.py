import os
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default

    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


# Batch processing
BATCH_SIZE = max(1, _env_int("TADA_BATCH_SIZE", 50))
BATCH_PAUSE_SECONDS = max(0, _env_int("TADA_BATCH_PAUSE_MS", 100)) / 1000

# Extraction
MAX_FILE_BYTES = _env_int("TADA_MAX_FILE_MB", 50) * 1024 * 1024
TEXT_EXTENSIONS = {".txt", ".md"}
PDF_EXTENSIONS = {".pdf"}
WORD_EXTENSIONS = {".doc", ".docx"}
PDF_MIME = "application/pdf"
WORD_MIMES = {
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

# Matching
CONTEXT_LINES = 2
HIGHLIGHT_MARKER = "**"

# Results
PAGE_SIZE = max(1, _env_int("TADA_PAGE_SIZE", 20))

# Logging
LOG_LEVEL = os.environ.get("TADA_LOG_LEVEL", "INFO").upper()
LOG_DIR = Path(os.environ.get("TADA_LOG_DIR", Path.home() / ".tada_search" / "logs"))
