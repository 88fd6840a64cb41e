"""GitHub REST client used as reader, repository info source and issue reporter."""
from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx

from repo_scout.errors import RemoteError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"


class GitHubClient:
    """Thin async wrapper over the endpoints the agents need.

    ``repository`` is ``owner/name``. Without a token the client runs
    unauthenticated (rate limited, read-only). When a read is rejected with
    401 the client drops its token and retries once without it.
    """

    def __init__(
        self,
        repository: str,
        *,
        token: Optional[str] = None,
        branch: str = "main",
        api_url: str = DEFAULT_API_URL,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        owner, _, name = repository.partition("/")
        if not owner or not name:
            raise ValueError(f"repository must look like 'owner/name', got {repository!r}")
        self.owner = owner
        self.name = name
        self.branch = branch
        self._token = token or None
        self._client = httpx.AsyncClient(
            base_url=api_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )
        if self._token:
            logger.info("GitHub token authentication initialized")
        else:
            logger.warning("No GitHub authentication configured - read-only mode")

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    def _headers(self) -> Dict[str, str]:
        if self._token:
            return {"Authorization": f"Bearer {self._token}"}
        return {}

    async def _request(self, method: str, url: str, *, read_only: bool = True, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, headers=self._headers(), **kwargs)
            if response.status_code == 401 and read_only and self._token:
                logger.warning("GitHub auth failed, retrying unauthenticated (read-only)")
                self._token = None
                response = await self._client.request(method, url, headers=self._headers(), **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error("GitHub %s %s failed with status %d", method, url, status)
            raise RemoteError(f"GitHub {method} {url} failed with status {status}", status=status) from exc
        except httpx.HTTPError as exc:
            logger.error("GitHub %s %s failed: %s", method, url, exc)
            raise RemoteError(f"GitHub {method} {url} failed: {exc}") from exc
        except ValueError as exc:
            logger.error("GitHub %s %s returned a non-JSON body", method, url)
            raise RemoteError(f"GitHub {method} {url} returned invalid JSON: {exc}") from exc

    async def get_contents(self, path: str = "") -> Any:
        url = f"/repos/{self.owner}/{self.name}/contents/{path.strip('/')}".rstrip("/")
        return await self._request("GET", url, params={"ref": self.branch})

    async def list_files(self, path: str = "") -> List[Dict[str, Any]]:
        contents = await self.get_contents(path)
        if isinstance(contents, list):
            return contents
        return [contents]

    async def read_file(self, path: str) -> str:
        contents = await self.get_contents(path)
        if not isinstance(contents, dict) or contents.get("type") != "file":
            raise RemoteError(f"Path is not a file: {path}")
        raw = contents.get("content") or ""
        try:
            return base64.b64decode(raw).decode("utf-8")
        except ValueError as exc:
            raise RemoteError(f"Path is not a UTF-8 text file: {path}") from exc

    async def get_repo_info(self) -> Mapping[str, Any]:
        return await self._request("GET", f"/repos/{self.owner}/{self.name}")

    async def list_issues(self, state: str = "open") -> List[Mapping[str, Any]]:
        return await self._request(
            "GET",
            f"/repos/{self.owner}/{self.name}/issues",
            params={"state": state},
        )

    async def file_issue(
        self,
        title: str,
        body: str,
        labels: Sequence[str] = (),
    ) -> Mapping[str, Any]:
        issue = await self._request(
            "POST",
            f"/repos/{self.owner}/{self.name}/issues",
            read_only=False,
            json={"title": title, "body": body, "labels": list(labels)},
        )
        logger.info("GitHub issue created: #%s", issue.get("number"))
        return issue

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


__all__ = ["GitHubClient", "DEFAULT_API_URL"]
