import asyncio
import base64
import re
from email.message import Message
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from gitops.api.schemas import (
    BlobResponse,
    CommitResponse,
    ContentFileResponse,
    ContentItemResponse,
    CreateBlobRequest,
    CreateCommitRequest,
    CreateRepositoryRequest,
    CreateTreeEntry,
    CreateTreeRequest,
    ReferenceResponse,
    ReleaseResponse,
    RepositoryResponse,
    ShortBlobResponse,
    TreeResponse,
    UpdateReferenceRequest,
)
from gitops.api.transport import DEFAULT_PER_PAGE, GitHubTransport, build_http_client
from gitops.config import Settings
from gitops.errors import (
    GitOpsError,
    MissingRepositoryOwner,
    NotFound,
    NothingToUpload,
    RefTipMoved,
    RemoteError,
    UnreadableFile,
    UsageError,
)
from gitops.filesystem import GlobOptions, LocalFilesystem, PathLike
from gitops.git_objects.hierarchy import (
    find_matching_descriptor,
    flatten_git_tree_hierarchy,
    strip_subtrees,
)
from gitops.git_objects.models import (
    BLOB,
    DEFAULT_FILE_MODE,
    Blob,
    Commit,
    ContentItem,
    CurrentCommit,
    FlattenedTree,
    Reference,
    Repository,
    ShortBlob,
    Tree,
    TreeBranch,
    TreeHierarchy,
    TreeItem,
    TreeLeaf,
    TreeWithDescriptors,
)
from gitops.git_objects.refs import resolve_effective_ref, validate_reference
from gitops.logging_config import OperationContext, get_context_logger

# The contents endpoint refuses files above this size
CONTENT_API_MAX_BYTES = 1024 * 1024
SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def bytes_to_size(size: Optional[int], decimals: int = 2) -> Tuple[float, str]:
    """1536 -> (1.5, 'KB')"""
    if not size:
        return 0, "Bytes"
    index = 0
    while index < len(SIZE_UNITS) - 1 and size >= 1024 ** (index + 1):
        index += 1
    return round(size / 1024 ** index, max(decimals, 0)), SIZE_UNITS[index]


def _to_tree_item(entry) -> TreeItem:
    return TreeItem(
        path=entry.path,
        mode=entry.mode,
        type=entry.type,
        sha=entry.sha,
        size=entry.size,
        url=entry.url,
    )


def _to_tree(response: TreeResponse) -> Tree:
    return Tree(
        sha=response.sha,
        entries=[_to_tree_item(entry) for entry in response.tree],
        truncated=response.truncated,
        url=response.url,
    )


def _to_reference(response: ReferenceResponse) -> Reference:
    return Reference(
        ref=response.ref,
        sha=response.object.sha,
        object_type=response.object.type or "commit",
        url=response.url,
    )


def _to_commit(response: CommitResponse) -> Commit:
    author = response.author
    return Commit(
        sha=response.sha,
        tree_sha=response.tree.sha,
        parent_shas=[parent.sha for parent in response.parents],
        message=response.message,
        author_name=author.name if author else None,
        author_email=author.email if author else None,
    )


def _to_repository(response: RepositoryResponse) -> Repository:
    return Repository(
        owner_login=response.owner.login,
        name=response.name,
        default_branch=response.default_branch or "master",
        full_name=response.full_name or "",
        fork=response.fork,
        archived=response.archived,
        disabled=response.disabled,
    )


def _to_blob(response: BlobResponse) -> Blob:
    return Blob(sha=response.sha, content=response.content, encoding=response.encoding, size=response.size)


def _to_content_item(response: ContentItemResponse) -> ContentItem:
    return ContentItem(
        name=response.name,
        path=response.path,
        type=response.type,
        sha=response.sha,
        size=response.size,
        download_url=response.download_url,
    )


def _attachment_file_name(content_disposition: Optional[str]) -> Optional[str]:
    """'attachment; filename=acme-widgets-1a2b3c4.tar.gz' -> 'acme-widgets-1a2b3c4.tar.gz'"""
    if not content_disposition:
        return None
    message = Message()
    message["content-disposition"] = content_disposition
    file_name = message.get_filename()
    # never let the server pick a directory
    return Path(file_name).name if file_name else None


def _escape_ref(ref: str) -> str:
    # branch names may hold '#', '?' or '%', which must not end the URL path
    return quote(ref, safe="/")


def _decode_content(content: str, source_encoding: str, encoding: str) -> str:
    if source_encoding == "base64":
        raw = base64.b64decode(content)
    elif source_encoding in ("utf-8", "utf8"):
        raw = content.encode("utf-8")
    else:
        raise UsageError(f"Content delivered with encoding '{source_encoding}' cannot be decoded")
    if encoding == "base64":
        return base64.b64encode(raw).decode("ascii")
    return raw.decode(encoding)


class GitHubService:
    """Reads and writes a repository's Git objects through the remote Git Data API.

    Nothing is cloned: refs, commits, trees and blobs are fetched and created
    one API call at a time. One instance may serve many repositories; bind()
    gives a copy that prefixes its log lines with the current command and
    repository.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        filesystem: Optional[LocalFilesystem] = None,
        context: Optional[OperationContext] = None,
    ):
        self.transport = GitHubTransport(client)
        self.filesystem = filesystem or LocalFilesystem()
        self.context = context or OperationContext()
        self.log = get_context_logger(__name__, self.context)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        filesystem: Optional[LocalFilesystem] = None,
        context: Optional[OperationContext] = None,
    ) -> "GitHubService":
        return cls(build_http_client(settings), filesystem=filesystem, context=context)

    def bind(self, context: OperationContext) -> "GitHubService":
        return GitHubService(self.transport.client, filesystem=self.filesystem, context=context)

    async def aclose(self):
        await self.transport.aclose()

    async def __aenter__(self) -> "GitHubService":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    # --- plumbing ---

    def _repo_url(self, repository: Repository, suffix: str) -> str:
        if not repository.owner_login:
            raise MissingRepositoryOwner(f"The repository {repository.name} does not have an owner")
        return f"/repos/{repository.owner_login}/{repository.name}{suffix}"

    def _validate(self, schema: Type[SchemaT], data: Any, operation: str) -> SchemaT:
        try:
            return schema.model_validate(data)
        except ValidationError as e:
            self.log.error(f"Could not {operation}: unexpected response\n{e}")
            raise RemoteError(operation, detail="unexpected response body") from e

    async def _call(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            return await self.transport.request(method, url, operation=operation, params=params, json=json)
        except NotFound as e:
            self.log.warning(f"Could not {operation}\n{e}")
            raise
        except GitOpsError as e:
            self.log.error(f"Could not {operation}\n{e}")
            raise

    # --- references and commits ---

    async def get_reference(self, repository: Repository, ref: str) -> Reference:
        """Gets the reference `ref` ('heads/<branch>' or 'tags/<tag>').

        A malformed ref is rejected before anything is sent.
        """
        try:
            validate_reference(ref)
        except UsageError as e:
            self.log.error(str(e))
            raise

        operation = f"get reference {ref} of {repository.full_name}"
        url = self._repo_url(repository, f"/git/ref/{_escape_ref(ref)}")
        data = await self._call("GET", url, operation=operation)
        return _to_reference(self._validate(ReferenceResponse, data, operation))

    async def get_commit(self, repository: Repository, commit_sha: str) -> Commit:
        operation = f"get commit {commit_sha} of {repository.full_name}"
        data = await self._call(
            "GET", self._repo_url(repository, f"/git/commits/{commit_sha}"), operation=operation
        )
        return _to_commit(self._validate(CommitResponse, data, operation))

    async def get_current_commit(self, repository: Repository, ref: Optional[str] = None) -> CurrentCommit:
        """The commit `ref` points at right now and that commit's root tree.

        New trees and commits must be built on this pair, so fetch it after
        any earlier writes of the same operation.
        """
        ref = resolve_effective_ref(repository, ref)
        reference = await self.get_reference(repository, ref)
        commit = await self.get_commit(repository, reference.sha)
        return CurrentCommit(commit_sha=reference.sha, tree_sha=commit.tree_sha)

    async def create_commit(
        self, repository: Repository, message: str, tree_sha: str, parent_sha: str
    ) -> Commit:
        operation = (
            f"create a commit in {repository.full_name} for tree {tree_sha} on parent {parent_sha}"
        )
        request = CreateCommitRequest(message=message, tree=tree_sha, parents=[parent_sha])
        data = await self._call(
            "POST", self._repo_url(repository, "/git/commits"), operation=operation, json=request.model_dump()
        )
        return _to_commit(self._validate(CommitResponse, data, operation))

    async def set_commit_branch(
        self, repository: Repository, commit_sha: str, ref: Optional[str] = None
    ) -> Reference:
        """Moves `ref` to `commit_sha`. This is a forced update, like a force push."""
        ref = resolve_effective_ref(repository, ref)
        operation = f"set {ref} of {repository.full_name} to {commit_sha}"
        request = UpdateReferenceRequest(sha=commit_sha, force=True)
        url = self._repo_url(repository, f"/git/refs/{_escape_ref(ref)}")
        data = await self._call("PATCH", url, operation=operation, json=request.model_dump())
        return _to_reference(self._validate(ReferenceResponse, data, operation))

    # --- trees ---

    async def get_tree(self, repository: Repository, tree_sha: str, recursive: bool = False) -> Tree:
        operation = f"get tree {tree_sha} of {repository.full_name}"
        params = {"recursive": "1"} if recursive else None
        data = await self._call(
            "GET", self._repo_url(repository, f"/git/trees/{tree_sha}"), operation=operation, params=params
        )
        tree = _to_tree(self._validate(TreeResponse, data, operation))
        if tree.truncated:
            self.log.warning(f"The tree {tree_sha} is truncated, some entries are missing")
        return tree

    async def get_tree_for_tree_item(self, repository: Repository, item: TreeItem) -> Tree:
        if not item.sha:
            raise UsageError(f"Tree item {item.path} has no sha")
        if not item.is_tree:
            raise UsageError(f'Tree item {item.path} is of type "{item.type}", not "tree"')
        return await self.get_tree(repository, item.sha)

    async def get_repository_git_tree(
        self, repository: Repository, ref: Optional[str] = None, recursive: bool = False
    ) -> Tree:
        """Root tree of `ref`. With `recursive` the listing may come back truncated."""
        ref = resolve_effective_ref(repository, ref)
        current = await self.get_current_commit(repository, ref)
        return await self.get_tree(repository, current.tree_sha, recursive)

    async def get_trees_recursively(self, repository: Repository, root_tree: Tree) -> TreeHierarchy:
        """Fetches every subtree of a shallow `root_tree`, one request per subtree.

        Slower than a recursive listing but never truncated.
        """
        entries = []
        for item in root_tree.entries:
            if item.is_tree:
                subtree = await self.get_tree_for_tree_item(repository, item)
                entries.append(
                    TreeBranch(item=item, hierarchy=await self.get_trees_recursively(repository, subtree))
                )
            else:
                entries.append(TreeLeaf(item=item))
        return TreeHierarchy(
            sha=root_tree.sha, entries=entries, truncated=root_tree.truncated, url=root_tree.url
        )

    async def get_repository_full_git_tree(
        self, repository: Repository, ref: Optional[str] = None, flatten: bool = False
    ) -> Union[TreeHierarchy, FlattenedTree]:
        ref = resolve_effective_ref(repository, ref)
        current = await self.get_current_commit(repository, ref)
        root_tree = await self.get_tree(repository, current.tree_sha)
        hierarchy = await self.get_trees_recursively(repository, root_tree)
        if flatten:
            return flatten_git_tree_hierarchy(hierarchy)
        return hierarchy

    async def find_tree_and_descriptor_for_file_path(
        self,
        repository: Repository,
        file_paths: Sequence[str],
        ref: Optional[str] = None,
        recursive: bool = False,
    ) -> TreeWithDescriptors:
        """Finds the blob descriptors of all `file_paths` in the root tree of `ref`.

        Either every path is found or NotFound is raised; the caller is
        expected to skip the repository in that case.
        """
        if not repository.owner_login:
            raise MissingRepositoryOwner(f"The repository {repository.name} does not have an owner")

        tree = await self.get_repository_git_tree(repository, ref, recursive)

        descriptors = []
        missing = []
        for file_path in file_paths:
            descriptor = find_matching_descriptor(tree.entries, BLOB, file_path)
            if descriptor is None:
                missing.append(file_path)
            else:
                descriptors.append(descriptor)

        if missing:
            self.log.warning(f"Skipping {repository.name}, no such file(s): {', '.join(missing)}")
            raise NotFound(f"No such file(s) {', '.join(missing)} in {repository.full_name}")

        return TreeWithDescriptors(tree=tree, descriptors=descriptors, recursive=recursive)

    async def create_new_tree(
        self,
        repository: Repository,
        blobs: Sequence[ShortBlob],
        paths: Sequence[str],
        tree: Optional[Tree] = None,
        parent_tree_sha: Optional[str] = None,
        reference_descriptors: Optional[Sequence[TreeItem]] = None,
    ) -> Tree:
        """Creates a tree holding `blobs` at `paths`.

        With `tree` the new entries are added to that tree's entries and the
        result replaces the whole tree. Without it `parent_tree_sha` becomes
        the base tree and only the new entries are sent. Mode and type of each
        blob come from the reference descriptor with the same path, if any.
        """
        if len(blobs) != len(paths):
            raise UsageError(f"Got {len(blobs)} blobs for {len(paths)} paths")

        descriptors_by_path: Dict[str, TreeItem] = {}
        for descriptor in reference_descriptors or []:
            descriptors_by_path.setdefault(descriptor.path, descriptor)

        new_entries = []
        for blob, path in zip(blobs, paths):
            descriptor = descriptors_by_path.get(path)
            new_entries.append(
                CreateTreeEntry(
                    path=path,
                    mode=descriptor.mode if descriptor else DEFAULT_FILE_MODE,
                    type=descriptor.type if descriptor else BLOB,
                    sha=blob.sha,
                )
            )

        if tree is not None:
            # a new blob replaces an existing entry at the same path
            new_paths = set(paths)
            existing = [
                CreateTreeEntry(path=item.path, mode=item.mode, type=item.type, sha=item.sha)
                for item in tree.entries
                if item.path not in new_paths
            ]
            request = CreateTreeRequest(tree=existing + new_entries)
        else:
            request = CreateTreeRequest(tree=new_entries, base_tree=parent_tree_sha)

        operation = f"create a tree in {repository.full_name}"
        data = await self._call(
            "POST",
            self._repo_url(repository, "/git/trees"),
            operation=operation,
            json=request.model_dump(exclude_none=True),
        )
        return _to_tree(self._validate(TreeResponse, data, operation))

    async def upload_to_repository(
        self,
        upload_dir: PathLike,
        repository: Repository,
        commit_message: str,
        ref: Optional[str] = None,
        descriptor_with_tree: Optional[TreeWithDescriptors] = None,
        *,
        remove_subtrees: Optional[bool] = None,
        glob_options: Optional[GlobOptions] = None,
        blob_encoding: str = "utf-8",
        check_ref_tip: bool = False,
    ) -> Reference:
        """Commits the files staged under `upload_dir` to `ref` and moves the ref.

        Staged paths relative to `upload_dir` are the paths in the repository.

        Without `descriptor_with_tree` the new files are laid over the current
        root tree, everything else stays as it is. With it, the new root tree
        is that tree's entries plus the staged files, which is how files are
        renamed or removed at the root. Subtree entries of a shallow tree are
        dropped first unless `remove_subtrees` says otherwise.

        The ref is force-updated. With `check_ref_tip` the ref is read again
        right before the update and RefTipMoved is raised if someone else
        moved it in the meantime.
        """
        ref = resolve_effective_ref(repository, ref)
        self.log.debug(f"Uploading to {repository.name} <{ref}> from {upload_dir}")

        file_paths = self.filesystem.glob_files(upload_dir, glob_options)
        if not file_paths:
            raise NothingToUpload(f"Nothing is staged in {upload_dir}")

        current_commit = await self.get_current_commit(repository, ref)

        base_tree = None
        reference_descriptors = None
        if descriptor_with_tree is not None:
            if remove_subtrees is None:
                remove_subtrees = not descriptor_with_tree.recursive
            base_tree = descriptor_with_tree.tree
            if remove_subtrees:
                base_tree = strip_subtrees(base_tree)
            reference_descriptors = descriptor_with_tree.descriptors

        blobs = await asyncio.gather(
            *(self.create_blob_for_file(repository, file_path, blob_encoding) for file_path in file_paths)
        )
        paths = [self.filesystem.relative_path(upload_dir, file_path) for file_path in file_paths]
        listing = "\n".join(f"[{index}] {path}" for index, path in enumerate(paths, start=1))
        self.log.debug(f"Uploading the following files\n{listing}")

        new_tree = await self.create_new_tree(
            repository,
            list(blobs),
            paths,
            base_tree,
            current_commit.tree_sha,
            reference_descriptors,
        )
        self.log.debug(f"New tree {new_tree.sha} created")

        new_commit = await self.create_commit(
            repository, commit_message, new_tree.sha, current_commit.commit_sha
        )
        self.log.debug(
            f"New commit {new_commit.sha} created by {new_commit.author_name} <{new_commit.author_email}>"
        )

        if check_ref_tip:
            tip = await self.get_reference(repository, ref)
            if tip.sha != current_commit.commit_sha:
                self.log.error(f"{ref} moved to {tip.sha}, not updating it")
                raise RefTipMoved(ref, current_commit.commit_sha, tip.sha)

        reference = await self.set_commit_branch(repository, new_commit.sha, ref)
        self.log.debug(f"New commit {new_commit.sha} pushed to {ref}")
        return reference

    # --- blobs and file content ---

    async def create_blob_for_file(
        self, repository: Repository, file_path: PathLike, encoding: str = "utf-8"
    ) -> ShortBlob:
        try:
            content = self.filesystem.read_file(file_path, encoding)
        except (OSError, UnicodeDecodeError) as e:
            self.log.error(f"Failed to read {file_path} for a new blob: {e}")
            raise UnreadableFile(f"The file at {file_path} cannot be read") from e

        operation = f"create a blob for {Path(file_path).name} in {repository.full_name}"
        request = CreateBlobRequest(content=content, encoding=encoding)
        data = await self._call(
            "POST", self._repo_url(repository, "/git/blobs"), operation=operation, json=request.model_dump()
        )
        response = self._validate(ShortBlobResponse, data, operation)
        return ShortBlob(sha=response.sha, url=response.url)

    async def get_blob(self, repository: Repository, file_sha: str, encoding: str = "utf-8") -> str:
        operation = f"read blob {file_sha} of {repository.full_name}"
        data = await self._call("GET", self._repo_url(repository, f"/git/blobs/{file_sha}"), operation=operation)
        blob = _to_blob(self._validate(BlobResponse, data, operation))
        return _decode_content(blob.content, blob.encoding, encoding)

    async def get_content(
        self,
        repository: Repository,
        path: str,
        ref: Optional[str] = None,
        encoding: str = "utf-8",
    ) -> str:
        """Content of the file at `path`. The remote serves files up to 1 MB this way."""
        ref = resolve_effective_ref(repository, ref)
        operation = f"read {path} in {repository.full_name} <{ref}>"
        data = await self._call(
            "GET",
            self._repo_url(repository, f"/contents/{quote(path)}"),
            operation=operation,
            params={"ref": ref},
        )
        if isinstance(data, list):
            raise UsageError(f"{path} is a directory in {repository.full_name}")
        response = self._validate(ContentFileResponse, data, operation)
        self.log.debug(f"Read {path} in {repository.name} <{ref}>")
        return _decode_content(response.content, response.encoding, encoding)

    async def get_file_descriptor_content(
        self,
        repository: Repository,
        descriptor: TreeItem,
        ref: Optional[str] = None,
        encoding: str = "utf-8",
    ) -> str:
        """Reads the file behind `descriptor`, picking the endpoint by size.

        Files over 1 MB are read as blobs, smaller ones through the contents
        endpoint.
        """
        if not repository.owner_login:
            raise MissingRepositoryOwner(f"The repository {repository.name} does not have an owner")

        if (descriptor.size or 0) > CONTENT_API_MAX_BYTES and descriptor.sha:
            value, measure = bytes_to_size(descriptor.size)
            self.log.debug(f"{descriptor.path} is {value} {measure}, reading it as a blob")
            return await self.get_blob(repository, descriptor.sha, encoding)

        if not descriptor.path:
            raise UsageError("The file descriptor does not contain a usable path")

        path = descriptor.path
        if path.startswith("./"):
            path = path[2:]
        elif path.startswith("/"):
            path = path[1:]
        return await self.get_content(repository, path, ref, encoding)

    async def list_directory_files(
        self, repository: Repository, path: str = "", ref: Optional[str] = None
    ) -> List[ContentItem]:
        """Entries of the directory at `path` ('' is the repository root).

        A directory that does not exist lists as empty.
        """
        ref = resolve_effective_ref(repository, ref)
        path = path.strip("/")
        operation = f"list {path or '/'} in {repository.full_name} <{ref}>"
        try:
            data = await self._call(
                "GET",
                self._repo_url(repository, f"/contents/{quote(path)}"),
                operation=operation,
                params={"ref": ref},
            )
        except NotFound:
            return []
        if not isinstance(data, list):
            raise UsageError(f"{path} is a file in {repository.full_name}, not a directory")
        return [_to_content_item(self._validate(ContentItemResponse, item, operation)) for item in data]

    async def download_repository(
        self,
        repository: Repository,
        download_path: Optional[PathLike] = None,
        ref: Optional[str] = None,
        *,
        skip_existing: bool = True,
        overwrite_existing: bool = False,
    ) -> Optional[Path]:
        """Saves the tarball of `ref` into the folder `download_path`.

        The archive keeps the file name the remote gives it. An existing
        folder with content is emptied first with `overwrite_existing`, or
        left alone (and nothing is fetched) with `skip_existing`. Without
        `download_path` the tarball is fetched but not saved. Returns the
        path of the saved archive.
        """
        ref = resolve_effective_ref(repository, ref)

        if download_path is not None:
            if overwrite_existing:
                if self.filesystem.folder_exists(download_path):
                    self.log.debug(
                        f"Replacing contents of {repository.full_name} at existing path {download_path}"
                    )
                    self.filesystem.remove_directory(download_path)
            elif skip_existing and self.filesystem.is_populated_folder(download_path):
                self.log.debug(
                    f"Skip downloading {repository.full_name} as it already exists at path {download_path}"
                )
                return None

        operation = f"download the tarball of {repository.full_name} <{ref}>"
        url = self._repo_url(repository, f"/tarball/{_escape_ref(ref)}")
        try:
            response = await self.transport.send("GET", url, operation=operation, follow_redirects=True)
        except GitOpsError as e:
            self.log.error(f"Could not {operation}\n{e}")
            raise

        if download_path is None:
            self.log.info("Skip saving download to local file system")
            return None

        file_name = _attachment_file_name(response.headers.get("content-disposition"))
        if not file_name:
            file_name = f"{repository.owner_login}-{repository.name}.tar.gz"
        self.filesystem.create_folder(download_path)
        file_path = self.filesystem.write_file(Path(download_path) / file_name, response.content)
        value, measure = bytes_to_size(len(response.content))
        self.log.debug(f"Saved {repository.full_name} <{ref}> to {file_path} ({value} {measure})")
        return file_path

    # --- organizations and releases ---

    async def create_repository(
        self,
        organization: str,
        name: str,
        *,
        description: Optional[str] = None,
        private: Optional[bool] = None,
        visibility: Optional[str] = None,
        auto_init: Optional[bool] = None,
    ) -> Repository:
        """Creates the repository `name` in `organization`.

        With `auto_init` the remote makes an initial commit, so the default
        branch exists right away.
        """
        operation = f"create the repository {name} in {organization}"
        try:
            request = CreateRepositoryRequest(
                name=name,
                description=description,
                private=private,
                visibility=visibility,
                auto_init=auto_init,
            )
        except ValidationError as e:
            raise UsageError(f"Cannot {operation}: {e}") from e
        data = await self._call(
            "POST", f"/orgs/{organization}/repos", operation=operation, json=request.model_dump(exclude_none=True)
        )
        repository = _to_repository(self._validate(RepositoryResponse, data, operation))
        self.log.debug(f"Created {repository.full_name} on {repository.default_branch}")
        return repository

    async def list_repositories_for_organization(
        self,
        organization: str,
        include_forks: bool = False,
        include_archived: bool = False,
        include_disabled: bool = False,
        only_include: Optional[str] = None,
        exclude_repositories: Optional[Sequence[str]] = None,
        only_from_list: Optional[Sequence[str]] = None,
    ) -> List[Repository]:
        """Repositories of `organization` that pass the filters.

        `exclude_repositories` always wins. `only_from_list` restricts to the
        listed names and makes `only_include` (a regular expression) ignored.
        """
        operation = f"list repositories for {organization}"
        pattern = re.compile(only_include) if only_include and only_from_list is None else None
        excluded = set(exclude_repositories or [])

        repositories = []
        try:
            async for data in self.transport.paginate(
                f"/orgs/{organization}/repos", operation=operation, params={"type": "all"}
            ):
                response = self._validate(RepositoryResponse, data, operation)
                if response.fork and not include_forks:
                    continue
                if response.archived and not include_archived:
                    continue
                if response.disabled and not include_disabled:
                    continue
                if response.name in excluded:
                    continue
                if only_from_list is not None and response.name not in only_from_list:
                    continue
                if pattern is not None and not pattern.search(response.name):
                    continue
                repositories.append(_to_repository(response))
        except GitOpsError as e:
            self.log.error(f"Could not {operation}\n{e}")
            raise

        self.log.debug(f"Matched {len(repositories)} repositories for {organization}")
        return repositories

    async def list_release_tags(
        self,
        repository: Repository,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> List[str]:
        """Release tag names, newest first. Without `page` every page is read."""
        operation = f"list release tags of {repository.full_name}"
        url = self._repo_url(repository, "/releases")

        if page is not None:
            params = {"page": page}
            if per_page is not None:
                params["per_page"] = per_page
            data = await self._call("GET", url, operation=operation, params=params)
            return [self._validate(ReleaseResponse, release, operation).tag_name for release in data or []]

        tags = []
        try:
            async for release in self.transport.paginate(
                url, operation=operation, per_page=per_page or DEFAULT_PER_PAGE
            ):
                tags.append(self._validate(ReleaseResponse, release, operation).tag_name)
        except GitOpsError as e:
            self.log.error(f"Could not {operation}\n{e}")
            raise
        return tags

    async def list_last_release_tag(self, repository: Repository) -> Optional[str]:
        tags = await self.list_release_tags(repository, page=1, per_page=1)
        return tags[0] if tags else None

    async def list_last_50_release_tags(self, repository: Repository) -> List[str]:
        return await self.list_release_tags(repository, page=1, per_page=50)
