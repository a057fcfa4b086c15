import httpx
import pytest

from gitops.api.service import GitHubService
from gitops.errors import InvalidReferenceFormat, UsageError
from gitops.git_objects.models import Repository
from gitops.git_objects.refs import resolve_effective_ref, validate_reference

REPOSITORY = Repository(owner_login="acme", name="widgets", default_branch="develop")


@pytest.mark.parametrize("ref", ["heads/main", "heads/feat/new-feature", "tags/v1.2.3"])
def test_validate_reference_accepts_heads_and_tags(ref):
    assert validate_reference(ref) == ref


@pytest.mark.parametrize(
    "ref",
    ["main", "refs/heads/main", "heads/", "heads/has space", "branches/main", "", "HEADS/main"],
)
def test_validate_reference_rejects_malformed(ref):
    with pytest.raises(InvalidReferenceFormat):
        validate_reference(ref)


def test_invalid_reference_is_a_usage_error():
    with pytest.raises(UsageError):
        validate_reference("main")
    with pytest.raises(ValueError):
        validate_reference("main")


def test_resolve_effective_ref_defaults_to_default_branch():
    assert resolve_effective_ref(REPOSITORY) == "heads/develop"


def test_resolve_effective_ref_prefers_explicit_ref():
    assert resolve_effective_ref(REPOSITORY, "tags/v2") == "tags/v2"


def test_resolve_effective_ref_validates_explicit_ref():
    with pytest.raises(InvalidReferenceFormat):
        resolve_effective_ref(REPOSITORY, "develop")


@pytest.mark.asyncio
@pytest.mark.parametrize("ref", ["main", "refs/heads/main", "heads/a b"])
async def test_get_reference_fails_before_any_request(ref):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
    async with GitHubService(client) as service:
        with pytest.raises(InvalidReferenceFormat):
            await service.get_reference(REPOSITORY, ref)

    assert requests == []
