from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict


class ApiModel(BaseModel):
    # The remote API adds fields over time; keep only what we read
    model_config = ConfigDict(extra="ignore")


class OwnerResponse(ApiModel):
    login: str


class RepositoryResponse(ApiModel):
    name: str
    full_name: Optional[str] = None
    owner: OwnerResponse
    default_branch: Optional[str] = None
    fork: bool = False
    archived: bool = False
    disabled: bool = False


class GitObjectPointer(ApiModel):
    sha: str
    type: Optional[str] = None
    url: Optional[str] = None


class ReferenceResponse(ApiModel):
    ref: str
    url: Optional[str] = None
    object: GitObjectPointer


class CommitAuthor(ApiModel):
    name: Optional[str] = None
    email: Optional[str] = None
    date: Optional[str] = None


class CommitResponse(ApiModel):
    sha: str
    tree: GitObjectPointer
    parents: List[GitObjectPointer] = []
    message: str = ""
    author: Optional[CommitAuthor] = None
    committer: Optional[CommitAuthor] = None


class TreeEntryResponse(ApiModel):
    path: str
    mode: str
    type: str # 'blob', 'tree' or 'commit'
    sha: Optional[str] = None
    size: Optional[int] = None
    url: Optional[str] = None


class TreeResponse(ApiModel):
    sha: str
    url: Optional[str] = None
    tree: List[TreeEntryResponse] = []
    truncated: bool = False


class BlobResponse(ApiModel):
    sha: str
    content: str = ""
    encoding: str = "base64"
    size: Optional[int] = None


class ShortBlobResponse(ApiModel):
    sha: str
    url: Optional[str] = None


class ContentFileResponse(ApiModel):
    type: str = "file"
    path: str
    sha: str
    size: int = 0
    content: str = ""
    encoding: str = "base64"


class ContentItemResponse(ApiModel):
    name: str
    path: str
    type: str
    sha: Optional[str] = None
    size: Optional[int] = None
    download_url: Optional[str] = None


class ReleaseResponse(ApiModel):
    tag_name: str


class CreateBlobRequest(BaseModel):
    content: str
    encoding: Literal["utf-8", "base64"] = "utf-8"


class CreateTreeEntry(BaseModel):
    path: str
    mode: str
    type: str
    sha: Optional[str]


class CreateTreeRequest(BaseModel):
    tree: List[CreateTreeEntry]
    base_tree: Optional[str] = None


class CreateCommitRequest(BaseModel):
    message: str
    tree: str
    parents: List[str]


class CreateRepositoryRequest(BaseModel):
    name: str
    description: Optional[str] = None
    private: Optional[bool] = None
    visibility: Optional[Literal["public", "private", "internal"]] = None
    auto_init: Optional[bool] = None


class UpdateReferenceRequest(BaseModel):
    sha: str
    force: bool = True
