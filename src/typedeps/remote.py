"""Clients for remote sources, routed through the remote fetch cache."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import requests

from .cache import RemoteFetchCache, RemoteResponse

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
GITHUB_API_URL = "https://api.github.com"
RAW_LABEL = "raw"


class RawContentClient:
    """Fetch JSON documents, such as hosted `tsconfig.json` files, by URL."""

    def __init__(self, cache: RemoteFetchCache, session: requests.Session | None = None) -> None:
        """Initialize the client."""
        self.cache: RemoteFetchCache = cache
        self.session: requests.Session = session if session is not None else requests.Session()

    def _fetch(self, url: str) -> RemoteResponse:
        logger.debug("Fetching %s", url)
        response = self.session.get(url, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return RemoteResponse(data=response.json(), meta=response.headers)

    def get_json(self, url: str) -> Any:  # noqa: ANN401
        """Return the parsed JSON document at `url`.

        A missing document raises `requests.HTTPError` with a 404 status.

        """
        return self.cache.get_or_fetch(RAW_LABEL, {"url": url}, lambda: self._fetch(url))


def is_not_found(error: requests.RequestException) -> bool:
    """Check if a request failed because the remote document does not exist."""
    response = getattr(error, "response", None)
    return response is not None and response.status_code == 404  # noqa: PLR2004


class GithubClient:
    """Access the GitHub REST API for one repository, serving repeated calls from the cache."""

    def __init__(
        self,
        owner: str,
        repo: str,
        cache: RemoteFetchCache,
        session: requests.Session | None = None,
        api_url: str = GITHUB_API_URL,
    ) -> None:
        """Initialize the client."""
        self.owner: str = owner
        self.repo: str = repo
        self.cache: RemoteFetchCache = cache
        self.session: requests.Session = session if session is not None else requests.Session()
        self.api_url: str = api_url.rstrip("/")

    def repo_params(self, **params: Any) -> dict[str, Any]:  # noqa: ANN401
        """Add the owner and repository to the call parameters."""
        return {"owner": self.owner, "repo": self.repo, **params}

    def _call(
        self,
        label: str,
        path: str,
        params: dict[str, Any],
        query: Mapping[str, Any] | None = None,
    ) -> Any:  # noqa: ANN401
        def fetch() -> RemoteResponse:
            url = f"{self.api_url}/repos/{self.owner}/{self.repo}/{path}"
            logger.debug("Calling %s %s", label, url)
            response = self.session.get(url, params=query, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            return RemoteResponse(data=response.json(), meta=response.headers)

        return self.cache.get_or_fetch(label, params, fetch)

    def get_branches(self) -> Any:  # noqa: ANN401
        """List the branches of the repository."""
        return self._call("getBranches", "branches", self.repo_params())

    def get_branch(self, branch: str) -> Any:  # noqa: ANN401
        """Get a single branch."""
        return self._call("getBranch", f"branches/{branch}", self.repo_params(branch=branch))

    def get_commit(self, sha: str) -> Any:  # noqa: ANN401
        """Get a git commit object."""
        return self._call("getCommit", f"git/commits/{sha}", self.repo_params(sha=sha))

    def get_commits(self, sha: str) -> Any:  # noqa: ANN401
        """List the commits reachable from `sha`."""
        query = {"per_page": 100, "sha": sha}
        return self._call("getCommits", "commits", self.repo_params(**query), query)

    def get_path_commits(self, sha: str, path: str) -> Any:  # noqa: ANN401
        """List the commits reachable from `sha` that touch `path`."""
        query = {"per_page": 100, "sha": sha, "path": path}
        return self._call("getCommits", "commits", self.repo_params(**query), query)

    def get_tree(self, sha: str, recursive: bool = False) -> Any:  # noqa: ANN401, FBT001, FBT002
        """Get a git tree object."""
        query = {"recursive": 1} if recursive else None
        return self._call("getTree", f"git/trees/{sha}", self.repo_params(sha=sha, recursive=recursive), query)

    def get_blob(self, sha: str) -> Any:  # noqa: ANN401
        """Get a git blob object."""
        return self._call("getBlob", f"git/blobs/{sha}", self.repo_params(sha=sha))
