import logging
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from gitops.config import Settings
from gitops.errors import NotFound, RemoteError

logger = logging.getLogger(__name__)

GITHUB_HEADERS_BASE = {
    "Accept": "application/vnd.github+json",
    "X-GitHub-Api-Version": "2022-11-28",
}
DEFAULT_PER_PAGE = 100


def build_http_client(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    headers = {
        **GITHUB_HEADERS_BASE,
        "Authorization": f"Bearer {settings.token}",
        "User-Agent": settings.user_agent,
    }
    return httpx.AsyncClient(
        base_url=settings.api_base,
        headers=headers,
        timeout=settings.timeout,
        verify=settings.verify_ssl,
        transport=transport,
    )


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return str(body)[:200]


class GitHubTransport:
    """Sends requests and turns non-success answers into gitops errors."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def send(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        follow_redirects: bool = False,
    ) -> httpx.Response:
        """Sends one request and returns the successful response as is."""
        logger.debug(f"{method} {url}")
        try:
            response = await self.client.request(
                method, url, params=params, json=json, follow_redirects=follow_redirects
            )
        except httpx.HTTPError as e:
            raise RemoteError(operation, detail=f"{type(e).__name__}: {e}") from e

        if response.status_code == 404:
            raise NotFound(f"{operation}: {_error_detail(response)}")
        if not response.is_success:
            raise RemoteError(operation, response.status_code, _error_detail(response))
        return response

    async def request(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Sends one request and returns the decoded JSON body, None when empty."""
        response = await self.send(method, url, operation=operation, params=params, json=json)
        if not response.content:
            return None
        return response.json()

    async def paginate(
        self,
        url: str,
        *,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> AsyncIterator[Any]:
        """Yields items page by page until a short page comes back."""
        page = 1
        while True:
            items = await self.request(
                "GET",
                url,
                operation=operation,
                params={**(params or {}), "per_page": per_page, "page": page},
            )
            items = items or []
            for item in items:
                yield item
            if len(items) < per_page:
                return
            page += 1

    async def aclose(self):
        await self.client.aclose()
