"""Async GitHub REST client for the Copilot metrics endpoints."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.github.com"
DEFAULT_API_VERSION = "2022-11-28"
DEFAULT_TIMEOUT_S = 30.0

# The metrics API returns at most 100 days per page; ranges here cap at 28.
_PER_PAGE = 100


class GitHubAPIError(RuntimeError):
    """Non-success response (or unusable body) from the GitHub API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubClient:
    """Thin wrapper over ``httpx.AsyncClient`` with GitHub headers."""

    def __init__(
        self,
        token: str = "",
        base_url: str = DEFAULT_API_BASE_URL,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = DEFAULT_TIMEOUT_S,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": api_version,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._client.headers.update(headers)
        self._base_url = base_url.rstrip("/")

    @property
    def has_token(self) -> bool:
        return "Authorization" in self._client.headers

    async def get_json(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``endpoint`` (relative to the base URL) and decode the JSON body.

        Raises:
            GitHubAPIError: on non-2xx responses or undecodable bodies.
        """
        url = f"{self._base_url}/{endpoint.lstrip('/')}"
        logger.debug("GET %s params=%s", url, params)
        resp = await self._client.get(url, params=params)
        if resp.is_error:
            raise GitHubAPIError(
                f"GitHub API {resp.status_code} for {endpoint}: {_error_message(resp)}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise GitHubAPIError(
                f"Invalid JSON from {endpoint}", status_code=resp.status_code
            ) from exc

    async def get_org_metrics(self, organization: str, since: str, until: str) -> Any:
        return await self.get_json(
            f"/orgs/{organization}/copilot/metrics",
            {"since": since, "until": until, "per_page": _PER_PAGE},
        )

    async def get_team_metrics(self, organization: str, team: str, since: str, until: str) -> Any:
        return await self.get_json(
            f"/orgs/{organization}/team/{team}/copilot/metrics",
            {"since": since, "until": until, "per_page": _PER_PAGE},
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200] or resp.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return resp.reason_phrase
