import logging
from dataclasses import asdict, replace
from typing import Iterable, List, Optional, Sequence

from gitops.errors import NotFound
from gitops.git_objects.models import (
    BLOB,
    FlattenedTree,
    FlattenedTreeItem,
    HierarchyMatch,
    Tree,
    TreeBranch,
    TreeHierarchy,
    TreeItem,
    TreeLeaf,
)

logger = logging.getLogger(__name__)


def find_matching_descriptor(
    entries: Iterable[TreeItem], type_to_search_for: str, path: str
) -> Optional[TreeItem]:
    """Shallow search of a tree listing.

    Only entries of the given type whose path is exactly `path` match, so
    'a.json' never matches 'ba.json' or 'a.json.bak'. On a truncated listing
    a miss may be a false negative; search a TreeHierarchy instead.
    """
    logger.info(f"Checking tree for descriptor paths matching {path}")
    for entry in entries:
        if entry.type == type_to_search_for and entry.path == path:
            logger.debug(f"Found descriptor path {entry.path} matching {path}")
            return entry
    return None


def get_file_descriptor_from_tree(tree: Tree, name: str) -> Optional[TreeItem]:
    return find_matching_descriptor(tree.entries, BLOB, name)


def get_file_paths_from_tree(tree: Tree) -> List[str]:
    return [item.path for item in tree.entries if item.path and item.is_blob]


def get_subfolders_from_tree(tree: Tree) -> List[str]:
    return [item.path for item in tree.entries if item.path and item.is_tree]


def strip_subtrees(tree: Tree) -> Tree:
    """Returns a copy of `tree` without its `tree` entries.

    Subtree entries of a shallow listing point at content we never looked at,
    they must not be sent back when a new tree is composed from this one.
    """
    return replace(tree, entries=[item for item in tree.entries if not item.is_tree])


def find_in_git_tree_hierarchy(
    path_segments: Sequence[str], hierarchy: TreeHierarchy
) -> HierarchyMatch:
    """Walks `hierarchy` one path segment at a time.

    The returned match holds the descriptor of the final segment, the
    hierarchy level that contains it and the shas of every subtree descended
    into on the way (the immediate parent comes last, root-level files give an
    empty list).
    """
    if not path_segments:
        raise NotFound("An empty path cannot be found in a tree")

    tree_path_shas: List[str] = []
    current = hierarchy
    *directories, file_name = path_segments

    for index, segment in enumerate(directories):
        branch = next(
            (
                node
                for node in current.entries
                if isinstance(node, TreeBranch) and node.item.path == segment
            ),
            None,
        )
        if branch is None:
            remaining = "/".join(path_segments[index:])
            raise NotFound(f"No match found for {remaining} in tree {current.sha}")
        tree_path_shas.append(branch.hierarchy.sha)
        current = branch.hierarchy

    for node in current.entries:
        if isinstance(node, TreeLeaf) and node.item.path == file_name:
            return HierarchyMatch(
                descriptor=node.item, hierarchy=current, tree_path_shas=tree_path_shas
            )

    raise NotFound(f"The file {'/'.join(path_segments)} was not found in tree")


def flatten_git_tree_hierarchy(hierarchy: TreeHierarchy) -> FlattenedTree:
    """Collapses a hierarchy into one list of leaf items with full paths.

    Entries keep the order in which they appear at each level. Every item is
    tagged with the sha of the tree that directly contains it.
    """
    items: List[FlattenedTreeItem] = []
    _flatten_into(hierarchy, [], items)
    return FlattenedTree(
        sha=hierarchy.sha,
        entries=items,
        truncated=hierarchy.truncated,
        url=hierarchy.url,
    )


def _flatten_into(
    hierarchy: TreeHierarchy, parents: List[str], items: List[FlattenedTreeItem]
) -> None:
    for node in hierarchy.entries:
        if isinstance(node, TreeBranch):
            _flatten_into(node.hierarchy, parents + [node.item.path], items)
        else:
            fields = asdict(node.item)
            fields["path"] = "/".join(parents + [node.item.path])
            items.append(FlattenedTreeItem(tree_sha=hierarchy.sha, **fields))
