import pytest

from core import scanner


def test_scan_walks_tree_with_relative_paths(tmp_path):
    root = tmp_path / "docs"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_text("alpha", encoding="utf-8")
    (root / "sub" / "b.pdf").write_bytes(b"%PDF")

    descriptors = scanner.scan_folder(str(root))
    by_path = {d.relative_path: d for d in descriptors}

    assert set(by_path) == {"docs/a.txt", "docs/sub/b.pdf"}
    a = by_path["docs/a.txt"]
    assert a.name == "a.txt"
    assert a.size == 5
    assert a.declared_type == "text/plain"
    assert a.read_bytes() == b"alpha"
    assert by_path["docs/sub/b.pdf"].declared_type == "application/pdf"


def test_unknown_extension_has_empty_type(tmp_path):
    (tmp_path / "blob.unknownext").write_bytes(b"?")

    descriptors = scanner.scan_folder(str(tmp_path))

    assert descriptors[0].declared_type == ""


def test_scan_rejects_files(tmp_path):
    path = tmp_path / "file.txt"
    path.write_text("x", encoding="utf-8")

    with pytest.raises(NotADirectoryError):
        scanner.scan_folder(str(path))
