from typing import Optional


class GitOpsError(Exception):
    """Base class for every error raised by gitops."""


class UsageError(GitOpsError, ValueError):
    """The caller passed something that can never succeed. Not retryable."""


class InvalidReferenceFormat(UsageError):
    def __init__(self, ref: str):
        super().__init__(
            f'The reference "{ref}" does not have the format '
            f'"heads/<branch_name>" or "tags/<tag_name>"'
        )
        self.ref = ref


class MissingRepositoryOwner(UsageError):
    pass


class MissingToken(UsageError):
    pass


class NothingToUpload(UsageError):
    pass


class NotFound(GitOpsError, LookupError):
    """A ref, commit, tree or file path does not exist on the remote."""


class RemoteError(GitOpsError):
    """The remote API answered with a non-success status or could not be reached."""

    def __init__(self, operation: str, status_code: Optional[int] = None, detail: str = ""):
        message = operation
        if status_code is not None:
            message += f" [{status_code}]"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
        self.detail = detail


class UnreadableFile(GitOpsError):
    pass


class RefTipMoved(GitOpsError):
    def __init__(self, ref: str, expected_sha: str, actual_sha: str):
        super().__init__(
            f"{ref} moved from {expected_sha} to {actual_sha} while the new commit was being created"
        )
        self.ref = ref
        self.expected_sha = expected_sha
        self.actual_sha = actual_sha
