from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import pytest

from pr_police.config import Config, DeliveryTargets, FilterConfig, ScheduleConfig


def make_raw_pr(
    number: int,
    title: str = "Some change",
    repo: str = "acme/widgets",
    author: str = "alice",
    labels: Iterable[str] = (),
) -> Dict[str, Any]:
    """Minimal GitHub `pulls` list item."""
    return {
        "number": number,
        "title": title,
        "html_url": f"https://github.com/{repo}/pull/{number}",
        "user": {"login": author},
        "labels": [{"name": name} for name in labels],
        "base": {"repo": {"full_name": repo}},
    }


class FakeGitHub:
    """Stands in for both the pull request source and the mergeability lookup."""

    def __init__(self, pulls=None, mergeable: Optional[Dict[int, Any]] = None, fetch_error=None, failing=()):
        self.pulls = pulls or []
        self.mergeable = mergeable or {}
        self.fetch_error = fetch_error
        self.failing = set(failing)
        self.fetch_calls = []
        self.lookup_calls = []

    def fetch_pull_requests(self, repos, label_filter=None):
        self.fetch_calls.append((list(repos), label_filter))
        if self.fetch_error:
            raise self.fetch_error
        return list(self.pulls)

    def get_pull_request(self, owner, repo, number):
        self.lookup_calls.append((owner, repo, number))
        if number in self.failing:
            raise RuntimeError(f"lookup of #{number} failed")
        return {"number": number, "mergeable": self.mergeable.get(number)}


def make_config(
    channels=("general",),
    groups=(),
    exclude_labels=(),
    tracked_users=(),
    isolate_lookup_failures=False,
) -> Config:
    return Config(
        slack_token="xoxb-test",
        github_token="gh-test",
        repos=("acme/widgets",),
        schedule=ScheduleConfig(days_to_run=frozenset({"monday"}), times_to_run=frozenset({900})),
        filters=FilterConfig(
            exclude_labels=frozenset(exclude_labels),
            tracked_users=frozenset(tracked_users),
        ),
        targets=DeliveryTargets(channels=tuple(channels), groups=tuple(groups)),
        bot_icon="https://example.com/police.png",
        isolate_lookup_failures=isolate_lookup_failures,
    )


@pytest.fixture
def cfg() -> Config:
    return make_config()
