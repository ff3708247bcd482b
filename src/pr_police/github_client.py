from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

import requests

from .config import split_list


GITHUB_API_BASE = "https://api.github.com"
DEFAULT_PER_PAGE = 100
REQUEST_TIMEOUT = 30


class GitHubAPIError(Exception):
    """Error talking to the GitHub REST API."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubAPI:
    """Thin wrapper over the GitHub REST API for the read-only calls we need.

    Requests are issued once; there is no retry or rate limit handling.
    """

    def __init__(self, token: str, session: Optional[requests.Session] = None) -> None:
        self.session = session or requests.Session()
        self.session.headers["Authorization"] = f"token {token}"
        self.session.headers["Accept"] = "application/vnd.github+json"
        self.session.headers["User-Agent"] = "pr-police"

    def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        url = f"{GITHUB_API_BASE}{endpoint}"
        try:
            response = self.session.get(url, params=params, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise GitHubAPIError(f"Request to {endpoint} failed: {e}") from e

        if response.status_code >= 400:
            raise GitHubAPIError(
                f"GitHub API error on {endpoint}: {response.status_code} - {response.text[:200]}",
                response.status_code,
            )
        return response

    def _paginate(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        """Yield every item of a list endpoint, following page numbers until a short page."""
        params = dict(params or {})
        params.setdefault("per_page", DEFAULT_PER_PAGE)
        page = 1

        while True:
            params["page"] = page
            items = self._get(endpoint, params=params).json()
            if not items:
                break

            yield from items

            if len(items) < params["per_page"]:
                break
            page += 1

    def list_owner_repos(self, owner: str) -> List[str]:
        """Return full names of every repository of an organization or user."""
        try:
            items = list(self._paginate(f"/orgs/{owner}/repos", {"type": "all"}))
        except GitHubAPIError as e:
            if e.status_code != 404:
                raise
            # Not an organization, try it as a user account
            items = list(self._paginate(f"/users/{owner}/repos"))
        return [item["full_name"] for item in items]

    def expand_repos(self, repos: List[str]) -> List[str]:
        expanded: List[str] = []
        for repo in repos:
            if "/" in repo:
                expanded.append(repo)
            else:
                expanded.extend(self.list_owner_repos(repo))
        return expanded

    def list_open_pulls(self, repo: str) -> List[Dict[str, Any]]:
        return list(self._paginate(f"/repos/{repo}/pulls", {"state": "open"}))

    def fetch_pull_requests(self, repos: List[str], label_filter: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return raw open pull requests across ``repos``.

        ``repos`` entries are ``owner/repo``; a bare owner name expands to all of
        its repositories. ``label_filter`` is a comma separated label list and
        keeps only pull requests carrying every one of those labels.
        """
        wanted = set(split_list(label_filter))
        pulls: List[Dict[str, Any]] = []

        for repo in self.expand_repos(list(repos)):
            for pr in self.list_open_pulls(repo):
                names = {label.get("name") for label in pr.get("labels", [])}
                if wanted and not wanted.issubset(names):
                    continue
                pulls.append(pr)

        return pulls

    def get_pull_request(self, owner: str, repo: str, number: int) -> Dict[str, Any]:
        """Single pull request lookup; the payload carries ``mergeable`` (bool or None)."""
        return self._get(f"/repos/{owner}/{repo}/pulls/{number}").json()
