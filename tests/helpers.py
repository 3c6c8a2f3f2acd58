from core.models import FileDescriptor


def make_descriptor(name: str, data: bytes = b"", *, declared_type: str = "",
                    size: int | None = None, relative_path: str | None = None,
                    reader=None) -> FileDescriptor:
    return FileDescriptor(name=name,
                          relative_path=relative_path or f"docs/{name}",
                          declared_type=declared_type,
                          size=len(data) if size is None else size,
                          reader=reader or (lambda: data))
