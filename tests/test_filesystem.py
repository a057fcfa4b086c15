import pytest

from gitops.filesystem import (
    GlobOptions,
    LocalFilesystem,
    get_directory_parts_from_path,
    get_file_name_from_path,
    get_path_parts,
)


@pytest.fixture
def filesystem():
    return LocalFilesystem()


@pytest.fixture
def tree(tmp_path, filesystem):
    for path in ["a.md", "b.json", "docs/guide.md", "docs/api/index.md"]:
        filesystem.write_file(tmp_path / path, f"content of {path}")
    return tmp_path


def relative(filesystem, root, paths):
    return [filesystem.relative_path(root, path) for path in paths]


def test_glob_all_files_sorted(filesystem, tree):
    paths = filesystem.glob_files(tree)
    assert relative(filesystem, tree, paths) == ["a.md", "b.json", "docs/api/index.md", "docs/guide.md"]
    assert all(path.is_absolute() for path in paths)


def test_glob_depth(filesystem, tree):
    assert relative(filesystem, tree, filesystem.glob_files(tree, GlobOptions(deep=1))) == ["a.md", "b.json"]
    assert relative(filesystem, tree, filesystem.glob_files(tree, GlobOptions(deep=2))) == [
        "a.md",
        "b.json",
        "docs/guide.md",
    ]


def test_glob_pattern_and_directories(filesystem, tree):
    markdown = filesystem.glob_files(tree, GlobOptions(pattern="**/*.md"))
    assert "b.json" not in relative(filesystem, tree, markdown)
    with_dirs = filesystem.glob_files(tree, GlobOptions(only_files=False, deep=1))
    assert relative(filesystem, tree, with_dirs) == ["a.md", "b.json", "docs"]


def test_glob_missing_root(filesystem, tmp_path):
    assert filesystem.glob_files(tmp_path / "missing") == []


def test_read_file_as_base64(filesystem, tmp_path):
    path = filesystem.write_file(tmp_path / "image.bin", b"\x00\x01\xfe\xff")
    assert filesystem.read_file(path, "base64") == "AAH+/w=="


def test_read_non_utf8_file_as_text_fails(filesystem, tmp_path):
    path = filesystem.write_file(tmp_path / "image.bin", b"\xff\xfe\xfa")
    with pytest.raises(UnicodeDecodeError):
        filesystem.read_file(path)


def test_create_and_remove_directory(filesystem, tmp_path):
    folder = filesystem.create_folder(tmp_path / "stage" / "nested")
    assert folder.is_dir()
    assert filesystem.remove_directory(tmp_path / "stage") is True
    assert filesystem.remove_directory(tmp_path / "stage") is False


@pytest.mark.parametrize(
    "path, parts",
    [
        ("src/v1/a.md", ["src", "v1", "a.md"]),
        ("./src\\v1/a.md", ["src", "v1", "a.md"]),
        ("/a.md", ["a.md"]),
        ("", []),
    ],
)
def test_get_path_parts(path, parts):
    assert get_path_parts(path) == parts


def test_file_name_and_directories():
    assert get_file_name_from_path("docs/api/index.md") == "index.md"
    assert get_directory_parts_from_path("docs/api/index.md") == ["docs", "api"]
    assert get_file_name_from_path("") == ""
