import re
from typing import Optional

from gitops.errors import InvalidReferenceFormat
from gitops.git_objects.models import Repository

REFERENCE_PATTERN = re.compile(r"^(heads|tags)/\S+$")


def validate_reference(ref: str) -> str:
    """Checks that `ref` looks like 'heads/<branch>' or 'tags/<tag>'."""
    if not isinstance(ref, str) or not REFERENCE_PATTERN.fullmatch(ref):
        raise InvalidReferenceFormat(str(ref))
    return ref


def resolve_effective_ref(repository: Repository, ref: Optional[str] = None) -> str:
    """Returns the ref an operation should work on.

    An explicit ref wins; otherwise the repository's default branch is used.
    """
    if ref is None:
        ref = f"heads/{repository.default_branch}"
    return validate_reference(ref)
