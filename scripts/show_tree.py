import asyncio
import sys
from typing import Optional

from gitops.api.service import GitHubService
from gitops.config import load_settings
from gitops.git_objects.models import Repository
from gitops.logging_config import OperationContext, setup_logging


async def main(full_name: str, ref: Optional[str] = None):
    owner, _, name = full_name.partition("/")
    if not owner or not name:
        print("Usage: python scripts/show_tree.py <owner>/<repo> [heads/<branch>]")
        return

    setup_logging("INFO")
    settings = load_settings()
    repository = Repository(owner_login=owner, name=name)
    context = OperationContext(command="show-tree", repository=repository.full_name)

    async with GitHubService.from_settings(settings, context=context) as service:
        print("Fetching tree...")
        flattened = await service.get_repository_full_git_tree(repository, ref, flatten=True)
        print(f"Loaded {len(flattened.entries)} files from tree {flattened.sha[:7]}.\n")
        for item in flattened.entries:
            print(f"{item.mode} {item.sha[:7]} ({item.tree_sha[:7]}) {item.path}")


if __name__ == "__main__":
    asyncio.run(main(*sys.argv[1:3]))
