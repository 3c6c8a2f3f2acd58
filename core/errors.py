# Per-file failure while turning a document into text.
class ExtractionError(Exception):
    pass


class FileTooLargeError(ExtractionError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"File is too large to process ({size / 1024 / 1024:.1f} MB, "
                         f"limit is {limit // (1024 * 1024)} MB)")
        self.size = size
        self.limit = limit


# Raised for file types no decoder handles. Not an error: the file is
# reported as unsupported and the run goes on.
class UnsupportedFileTypeError(Exception):
    def __init__(self, file_type: str) -> None:
        super().__init__("Unsupported file type")
        self.file_type = file_type


class InvalidSearchTermError(ValueError):
    def __init__(self, term: str, reason: str) -> None:
        super().__init__(f"Invalid search term {term!r}: {reason}")
        self.term = term


# Anything that escapes per-file isolation ends the run with this.
class SearchRunError(RuntimeError):
    pass
