"""Tests for the cached remote clients."""

from unittest.mock import MagicMock

import pytest
import requests

from typedeps.cache import RemoteFetchCache
from typedeps.remote import GithubClient, RawContentClient, is_not_found


def mock_session(payload: object, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    response.headers = {"X-RateLimit-Limit": "5000", "X-RateLimit-Remaining": "4999"}
    if status_code >= 400:  # noqa: PLR2004
        error_response = requests.Response()
        error_response.status_code = status_code
        response.raise_for_status.side_effect = requests.HTTPError(response=error_response)
    session = MagicMock(spec=requests.Session)
    session.get.return_value = response
    return session


def test_raw_content_is_cached(memory_cache: RemoteFetchCache) -> None:
    """Test a hosted document is fetched once and then served from the cache."""
    session = mock_session({"tsd": {}})
    client = RawContentClient(memory_cache, session=session)
    url = "https://raw.githubusercontent.com/foo/bar/master/tsconfig.json"

    assert client.get_json(url) == {"tsd": {}}
    assert client.get_json(url) == {"tsd": {}}

    session.get.assert_called_once()
    assert session.get.call_args.args == (url,)
    assert memory_cache.rate.remaining == 4999
    assert RemoteFetchCache.get_key("raw", {"url": url}) in memory_cache.store


def test_raw_content_not_found(memory_cache: RemoteFetchCache) -> None:
    """Test a 404 raises an HTTPError recognized as not found, and nothing is cached."""
    client = RawContentClient(memory_cache, session=mock_session(None, status_code=404))
    with pytest.raises(requests.HTTPError) as excinfo:
        client.get_json("https://example.com/tsconfig.json")
    assert is_not_found(excinfo.value)
    assert len(memory_cache.store) == 0


def test_is_not_found() -> None:
    """Test only 404 responses count as not found."""
    response = requests.Response()
    response.status_code = 500
    assert not is_not_found(requests.HTTPError(response=response))
    assert not is_not_found(requests.ConnectionError())


def test_github_branch(memory_cache: RemoteFetchCache) -> None:
    """Test a branch lookup is cached under its owner, repository, and branch."""
    session = mock_session({"name": "main", "commit": {"sha": "abc"}})
    client = GithubClient("octocat", "hello", memory_cache, session=session)

    assert client.get_branch("main")["commit"]["sha"] == "abc"
    assert client.get_branch("main")["name"] == "main"

    session.get.assert_called_once()
    assert session.get.call_args.args == ("https://api.github.com/repos/octocat/hello/branches/main",)
    key = RemoteFetchCache.get_key("getBranch", {"owner": "octocat", "repo": "hello", "branch": "main"})
    assert key in memory_cache.store


def test_github_commits_query(memory_cache: RemoteFetchCache) -> None:
    """Test commit listings pass their query parameters."""
    session = mock_session([{"sha": "abc"}])
    client = GithubClient("octocat", "hello", memory_cache, session=session)

    client.get_commits("abc")
    client.get_path_commits("abc", "typings")

    assert session.get.call_count == 2
    assert session.get.call_args_list[0].kwargs["params"] == {"per_page": 100, "sha": "abc"}
    assert session.get.call_args_list[1].kwargs["params"] == {"per_page": 100, "sha": "abc", "path": "typings"}


def test_github_tree(memory_cache: RemoteFetchCache) -> None:
    """Test recursive and flat tree listings are cached separately."""
    session = mock_session({"tree": []})
    client = GithubClient("octocat", "hello", memory_cache, session=session, api_url="https://ghe.example.com/api/")

    client.get_tree("abc")
    client.get_tree("abc", recursive=True)

    assert session.get.call_count == 2
    assert session.get.call_args_list[0].args == ("https://ghe.example.com/api/repos/octocat/hello/git/trees/abc",)
    assert session.get.call_args_list[0].kwargs["params"] is None
    assert session.get.call_args_list[1].kwargs["params"] == {"recursive": 1}


@pytest.mark.integration
def test_github_live(memory_cache: RemoteFetchCache) -> None:
    """Test listing the branches of a public repository."""
    client = GithubClient("octocat", "Hello-World", memory_cache)
    branches = client.get_branches()
    assert any(branch["name"] == "master" for branch in branches)
    assert memory_cache.rate.limit > 0
