import httpx
import pytest
import pytest_asyncio

from fake_github import BASE_URL, FakeGitHub
from gitops.api.service import GitHubService
from gitops.api.transport import build_http_client
from gitops.config import Settings

WIDGETS_FILES = {
    "package.json": '{\n  "name": "widgets",\n  "version": "1.0.0"\n}\n',
    "README.md": "# widgets\n",
    "scripts/build.sh": ("#!/bin/sh\nnpm run build\n", "100755"),
    "src/index.js": "module.exports = require('./lib/util');\n",
    "src/lib/util.js": "module.exports = {};\n",
}


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def widgets(fake_github):
    return fake_github.create_repository("acme", "widgets", WIDGETS_FILES, default_branch="main")


@pytest.fixture
def repository(widgets):
    return widgets.as_repository()


@pytest_asyncio.fixture
async def service(fake_github):
    settings = Settings(token="test-token", api_base=BASE_URL)
    client = build_http_client(settings, transport=httpx.ASGITransport(app=fake_github.app))
    async with GitHubService(client) as service:
        yield service
