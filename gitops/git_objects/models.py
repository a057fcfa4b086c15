from dataclasses import dataclass, field
from typing import List, Optional, Union

BLOB = "blob"
TREE = "tree"
DEFAULT_FILE_MODE = "100644"


@dataclass(frozen=True)
class Repository:
    owner_login: str
    name: str
    default_branch: str = "master"
    full_name: str = ""
    fork: bool = False
    archived: bool = False
    disabled: bool = False

    def __post_init__(self):
        if not self.full_name:
            # frozen dataclass, so go through object.__setattr__
            object.__setattr__(self, "full_name", f"{self.owner_login}/{self.name}")


@dataclass
class Reference:
    ref: str
    sha: str
    object_type: str = "commit"
    url: Optional[str] = None


@dataclass
class Commit:
    sha: str
    tree_sha: str
    parent_shas: List[str] = field(default_factory=list)
    message: str = ""
    author_name: Optional[str] = None
    author_email: Optional[str] = None


@dataclass(frozen=True)
class CurrentCommit:
    """The commit a ref points at, plus the root tree of that commit."""
    commit_sha: str
    tree_sha: str


@dataclass
class TreeItem:
    path: str
    mode: str
    type: str
    sha: Optional[str]
    size: Optional[int] = None
    url: Optional[str] = None

    @property
    def is_blob(self) -> bool:
        return self.type == BLOB

    @property
    def is_tree(self) -> bool:
        return self.type == TREE


@dataclass
class Tree:
    sha: str
    entries: List[TreeItem] = field(default_factory=list)
    truncated: bool = False
    url: Optional[str] = None


@dataclass
class TreeLeaf:
    item: TreeItem


@dataclass
class TreeBranch:
    """A `tree` entry together with the fully fetched contents of that subtree."""
    item: TreeItem
    hierarchy: "TreeHierarchy"


HierarchyNode = Union[TreeLeaf, TreeBranch]


@dataclass
class TreeHierarchy:
    sha: str
    entries: List[HierarchyNode] = field(default_factory=list)
    truncated: bool = False
    url: Optional[str] = None


@dataclass
class FlattenedTreeItem(TreeItem):
    # sha of the tree that directly contains this item
    tree_sha: Optional[str] = None


@dataclass
class FlattenedTree:
    sha: str
    entries: List[FlattenedTreeItem] = field(default_factory=list)
    truncated: bool = False
    url: Optional[str] = None


@dataclass
class Blob:
    sha: str
    content: str
    encoding: str
    size: Optional[int] = None


@dataclass
class ContentItem:
    """One entry of a directory listing from the contents endpoint."""
    name: str
    path: str
    # file, dir, symlink or submodule
    type: str
    sha: Optional[str] = None
    size: Optional[int] = None
    download_url: Optional[str] = None


@dataclass
class ShortBlob:
    sha: str
    url: Optional[str] = None


@dataclass
class TreeWithDescriptors:
    tree: Tree
    descriptors: List[TreeItem]
    # True when `tree` came from a recursive listing
    recursive: bool = False


@dataclass
class HierarchyMatch:
    descriptor: TreeItem
    hierarchy: TreeHierarchy
    tree_path_shas: List[str] = field(default_factory=list)
