import mimetypes
import os
from functools import partial
from pathlib import Path

from core.models import FileDescriptor


def _read_file(path: str) -> bytes:
    with open(path, "rb") as file:
        return file.read()


def describe_file(path: str, *, root_dir: str) -> FileDescriptor:
    # Relative paths keep the selected folder's name as their first segment
    root = Path(root_dir)
    relative = Path(os.path.relpath(path, root_dir)).as_posix()
    name = os.path.basename(path)
    declared_type = mimetypes.guess_type(name)[0] or ""

    return FileDescriptor(name=name,
                          relative_path=f"{root.name}/{relative}" if root.name else relative,
                          declared_type=declared_type,
                          size=int(os.path.getsize(path)),
                          reader=partial(_read_file, path))


# Return a descriptor for every regular file under root_dir
def scan_folder(root_dir: str) -> list[FileDescriptor]:
    if not os.path.isdir(root_dir):
        raise NotADirectoryError(f"Not a directory: {root_dir}")

    descriptors: list[FileDescriptor] = []

    for dir_path, dir_names, file_names in os.walk(root_dir):
        dir_names.sort()
        for filename in sorted(file_names):
            file_path = os.path.join(dir_path, filename)

            if not os.path.isfile(file_path):
                continue

            descriptors.append(describe_file(file_path, root_dir=root_dir))

    return descriptors
