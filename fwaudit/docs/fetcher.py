"""Remote content fetching for documentation trees hosted on GitHub.

Thin async wrapper over httpx. Every method degrades to an empty value on
failure and logs the URL; callers treat that as "nothing here".
"""

import asyncio
from dataclasses import dataclass
from typing import Any

import httpx

from fwaudit import __version__
from fwaudit.config_runtime import load_runtime_config
from fwaudit.utils.logging import logger

GITHUB_WEB = "https://github.com"


@dataclass(frozen=True)
class GitHubLocation:
    """owner/repo@branch:path parsed from a github.com tree or blob URL."""

    owner: str
    repo: str
    branch: str
    path: str

    def child(self, name: str) -> "GitHubLocation":
        path = f"{self.path}/{name}" if self.path else name
        return GitHubLocation(self.owner, self.repo, self.branch, path)

    @property
    def web_url(self) -> str:
        return f"{GITHUB_WEB}/{self.owner}/{self.repo}/tree/{self.branch}/{self.path}".rstrip("/")


def parse_github_url(url: str) -> GitHubLocation | None:
    """Split ``https://github.com/owner/repo/(tree|blob)/branch/path`` into parts."""
    if not url.startswith(GITHUB_WEB + "/"):
        return None
    parts = url[len(GITHUB_WEB) + 1:].strip("/").split("/")
    if len(parts) < 2:
        return None
    owner, repo = parts[0], parts[1]
    if len(parts) >= 4 and parts[2] in ("tree", "blob"):
        return GitHubLocation(owner, repo, parts[3], "/".join(parts[4:]))
    return GitHubLocation(owner, repo, "main", "/".join(parts[2:]))


def to_raw_url(url: str, raw_base: str = "https://raw.githubusercontent.com") -> str:
    """Rewrite a github.com page URL to its raw-content equivalent."""
    return (
        url.replace(GITHUB_WEB, raw_base.rstrip("/"))
        .replace("/blob/", "/")
        .replace("/tree/", "/")
    )


class GitHubContentFetcher:
    """Fetch directory listings and raw file text from GitHub.

    The httpx client is created lazily inside the running event loop and must
    be released with ``aclose`` (or ``async with``).
    """

    def __init__(self, config: dict[str, Any] | None = None, client: httpx.AsyncClient | None = None):
        self.config = config or load_runtime_config()
        github = self.config["github"]
        self.api_base = github["api_base"].rstrip("/")
        self.raw_base = github["raw_base"].rstrip("/")
        self.timeout = float(self.config["timeouts"]["url_fetch"])
        self._token = github.get("token", "")
        self._client = client
        self._owns_client = client is None
        self._semaphore: asyncio.Semaphore | None = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"User-Agent": f"fwaudit/{__version__}"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers=self._headers(),
            )
        return self._client

    def _get_semaphore(self) -> asyncio.Semaphore:
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.config["limits"]["max_concurrency"])
        return self._semaphore

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
        self._semaphore = None

    async def _get(self, url: str) -> httpx.Response | None:
        async with self._get_semaphore():
            try:
                resp = await self._get_client().get(url)
            except httpx.HTTPError as e:
                logger.warning("Fetch failed for {url}: {err}", url=url, err=e)
                return None
        if resp.status_code != 200:
            logger.warning("Fetch for {url} returned HTTP {code}", url=url, code=resp.status_code)
            return None
        return resp

    async def fetch_text(self, url: str) -> str:
        """Raw text at ``url``; empty string on any failure."""
        resp = await self._get(url)
        return resp.text if resp is not None else ""

    async def fetch_json(self, url: str) -> Any | None:
        resp = await self._get(url)
        if resp is None:
            return None
        try:
            return resp.json()
        except ValueError as e:
            logger.warning("Invalid JSON from {url}: {err}", url=url, err=e)
            return None

    def contents_url(self, location: GitHubLocation) -> str:
        return (
            f"{self.api_base}/repos/{location.owner}/{location.repo}"
            f"/contents/{location.path}?ref={location.branch}"
        )

    def raw_url(self, location: GitHubLocation) -> str:
        return f"{self.raw_base}/{location.owner}/{location.repo}/{location.branch}/{location.path}"

    async def list_directory(self, location: GitHubLocation) -> list[dict[str, Any]]:
        """Immediate children of a repository directory as GitHub contents entries.

        Each entry carries at least ``name``, ``type`` ("file" | "dir") and
        ``path``; ``download_url`` is present for files.
        """
        data = await self.fetch_json(self.contents_url(location))
        if not isinstance(data, list):
            if data is not None:
                logger.warning("Expected a directory listing at {path}", path=location.path)
            return []
        return [entry for entry in data if isinstance(entry, dict) and "name" in entry]

    async def file_metadata(self, location: GitHubLocation) -> dict[str, Any] | None:
        """Contents API metadata for a single file."""
        data = await self.fetch_json(self.contents_url(location))
        return data if isinstance(data, dict) else None

    async def fetch_file(self, location: GitHubLocation) -> str:
        return await self.fetch_text(self.raw_url(location))
