import pytest

from gitops.errors import NotFound
from gitops.git_objects.hierarchy import (
    find_in_git_tree_hierarchy,
    find_matching_descriptor,
    flatten_git_tree_hierarchy,
    get_file_descriptor_from_tree,
    get_file_paths_from_tree,
    get_subfolders_from_tree,
    strip_subtrees,
)
from gitops.git_objects.models import Tree, TreeBranch, TreeHierarchy, TreeItem, TreeLeaf


def blob(path, sha=None, size=10):
    return TreeItem(path=path, mode="100644", type="blob", sha=sha or f"blob-{path}", size=size)


def tree_item(path, sha):
    return TreeItem(path=path, mode="040000", type="tree", sha=sha)


@pytest.fixture
def hierarchy():
    """
    root (sha: root)
        ├── package.json
        ├── src/ (sha: src)
        │   ├── index.js
        │   └── lib/ (sha: lib)
        │       └── util.js
        ├── docs/ (sha: docs)
        │   └── guide.md
        └── README.md
    """
    lib = TreeHierarchy(sha="lib", entries=[TreeLeaf(blob("util.js"))])
    src = TreeHierarchy(
        sha="src",
        entries=[TreeLeaf(blob("index.js")), TreeBranch(tree_item("lib", "lib"), lib)],
    )
    docs = TreeHierarchy(sha="docs", entries=[TreeLeaf(blob("guide.md"))])
    return TreeHierarchy(
        sha="root",
        entries=[
            TreeLeaf(blob("package.json")),
            TreeBranch(tree_item("src", "src"), src),
            TreeBranch(tree_item("docs", "docs"), docs),
            TreeLeaf(blob("README.md")),
        ],
    )


def naive_walk(hierarchy, prefix=""):
    paths = []
    for node in hierarchy.entries:
        if isinstance(node, TreeBranch):
            paths.extend(naive_walk(node.hierarchy, f"{prefix}{node.item.path}/"))
        else:
            paths.append(f"{prefix}{node.item.path}")
    return paths


class TestFindMatchingDescriptor:
    entries = [
        blob("ba.json"),
        blob("a.json.bak"),
        tree_item("a.json", "dir-sha"),
        blob("a.json"),
        blob("src/a.json"),
    ]

    def test_exact_path_only(self):
        match = find_matching_descriptor(self.entries, "blob", "a.json")
        assert match is self.entries[3]

    @pytest.mark.parametrize("path", ["json", "a", "a.jso", "b", ".bak"])
    def test_no_substring_or_prefix_matches(self, path):
        assert find_matching_descriptor(self.entries, "blob", path) is None

    def test_type_must_match(self):
        match = find_matching_descriptor(self.entries, "tree", "a.json")
        assert match.sha == "dir-sha"

    def test_nested_path_needs_full_path(self):
        assert find_matching_descriptor(self.entries, "blob", "src/a.json").path == "src/a.json"

    def test_first_match_wins(self):
        first, second = blob("x.txt", sha="one"), blob("x.txt", sha="two")
        assert find_matching_descriptor([first, second], "blob", "x.txt") is first


def test_tree_listing_helpers():
    tree = Tree(sha="t", entries=[blob("package.json"), tree_item("src", "s"), blob("README.md")])
    assert get_file_paths_from_tree(tree) == ["package.json", "README.md"]
    assert get_subfolders_from_tree(tree) == ["src"]
    assert get_file_descriptor_from_tree(tree, "README.md").path == "README.md"
    assert get_file_descriptor_from_tree(tree, "src") is None


def test_strip_subtrees_returns_copy_without_trees():
    tree = Tree(sha="t", entries=[tree_item("src", "s"), blob("package.json")], truncated=False)
    stripped = strip_subtrees(tree)
    assert [item.path for item in stripped.entries] == ["package.json"]
    assert stripped.sha == "t"
    # original untouched
    assert [item.path for item in tree.entries] == ["src", "package.json"]


class TestFlatten:
    def test_paths_match_naive_walk_in_order(self, hierarchy):
        flattened = flatten_git_tree_hierarchy(hierarchy)
        assert [item.path for item in flattened.entries] == naive_walk(hierarchy)
        assert [item.path for item in flattened.entries] == [
            "package.json",
            "src/index.js",
            "src/lib/util.js",
            "docs/guide.md",
            "README.md",
        ]

    def test_items_carry_direct_parent_tree_sha(self, hierarchy):
        flattened = flatten_git_tree_hierarchy(hierarchy)
        parents = {item.path: item.tree_sha for item in flattened.entries}
        assert parents == {
            "package.json": "root",
            "src/index.js": "src",
            "src/lib/util.js": "lib",
            "docs/guide.md": "docs",
            "README.md": "root",
        }

    def test_keeps_item_metadata_and_root_sha(self, hierarchy):
        flattened = flatten_git_tree_hierarchy(hierarchy)
        util = flattened.entries[2]
        assert util.sha == "blob-util.js"
        assert util.mode == "100644"
        assert util.size == 10
        assert flattened.sha == "root"

    def test_does_not_modify_hierarchy(self, hierarchy):
        flatten_git_tree_hierarchy(hierarchy)
        assert hierarchy.entries[1].hierarchy.entries[0].item.path == "index.js"

    def test_empty_hierarchy(self):
        assert flatten_git_tree_hierarchy(TreeHierarchy(sha="empty")).entries == []


class TestFindInHierarchy:
    def test_nested_file_returns_sha_chain(self, hierarchy):
        match = find_in_git_tree_hierarchy(["src", "lib", "util.js"], hierarchy)
        assert match.descriptor.path == "util.js"
        assert match.tree_path_shas == ["src", "lib"]
        assert match.hierarchy.sha == "lib"

    def test_root_file_has_empty_chain(self, hierarchy):
        match = find_in_git_tree_hierarchy(["README.md"], hierarchy)
        assert match.descriptor.path == "README.md"
        assert match.tree_path_shas == []
        assert match.hierarchy is hierarchy

    def test_does_not_consume_segments(self, hierarchy):
        segments = ["src", "index.js"]
        find_in_git_tree_hierarchy(segments, hierarchy)
        assert segments == ["src", "index.js"]

    @pytest.mark.parametrize(
        "segments",
        [["missing.txt"], ["src", "missing.js"], ["nope", "index.js"], ["src", "lib"], ["package.json", "x"], []],
    )
    def test_missing_segments_raise_not_found(self, hierarchy, segments):
        with pytest.raises(NotFound):
            find_in_git_tree_hierarchy(segments, hierarchy)
