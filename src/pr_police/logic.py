from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from enum import Enum
import re
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from .config import FilterConfig


# https://github.com/<owner>/<repo>/pull/<number>
PULL_URL_REGEX = re.compile(r"^https?://[^/]+/(?P<owner>[^/]+)/(?P<repo>[^/]+)/pull/(?P<number>\d+)")

DEFAULT_LOOKUP_WORKERS = 8


class Mergeability(Enum):
    UNKNOWN = "unknown"
    MERGEABLE = "mergeable"
    CONFLICTED = "conflicted"

    @classmethod
    def from_api(cls, value: Optional[bool]) -> "Mergeability":
        # GitHub reports null while it is still computing the merge status
        if value is None:
            return cls.UNKNOWN
        return cls.MERGEABLE if value else cls.CONFLICTED


@dataclass(frozen=True)
class PullRequest:
    number: int
    title: str
    url: str
    repository: str
    author: Optional[str]
    labels: FrozenSet[str] = field(default_factory=frozenset)
    mergeable: Mergeability = Mergeability.UNKNOWN


class EnrichmentError(RuntimeError):
    """Raised when a mergeability lookup fails and failures are not isolated."""


def _repository_from_payload(raw: Dict[str, Any]) -> str:
    base_repo = (raw.get("base") or {}).get("repo") or {}
    if base_repo.get("full_name"):
        return base_repo["full_name"]
    match = PULL_URL_REGEX.match(raw.get("html_url") or "")
    return f"{match.group('owner')}/{match.group('repo')}" if match else ""


def pull_request_from_api(raw: Dict[str, Any]) -> PullRequest:
    """Build a PullRequest from a GitHub ``pulls`` list item."""
    user = raw.get("user")
    labels = raw.get("labels") or []
    return PullRequest(
        number=int(raw["number"]),
        title=raw.get("title") or "",
        url=raw.get("html_url") or "",
        repository=_repository_from_payload(raw),
        author=user.get("login") if isinstance(user, dict) else None,
        labels=frozenset(label["name"] for label in labels if isinstance(label, dict) and label.get("name")),
    )


def parse_pull_location(pr: PullRequest) -> Tuple[str, str, int]:
    """Return (owner, repo, number) for the secondary lookup, derived from the URL."""
    match = PULL_URL_REGEX.match(pr.url)
    if match:
        return match.group("owner"), match.group("repo"), int(match.group("number"))

    owner, _, repo = pr.repository.partition("/")
    if not owner or not repo:
        raise ValueError(f"Cannot derive repository for pull request {pr.url!r}")
    return owner, repo, pr.number


def _lookup_mergeability(lookup: Any, pr: PullRequest) -> Mergeability:
    owner, repo, number = parse_pull_location(pr)
    details = lookup.get_pull_request(owner, repo, number)
    return Mergeability.from_api(details.get("mergeable"))


def enrich_mergeability(
    pull_requests: Iterable[PullRequest],
    lookup: Any,
    isolate_failures: bool = False,
    max_workers: int = DEFAULT_LOOKUP_WORKERS,
) -> List[PullRequest]:
    """Resolve the merge status of every pull request concurrently.

    Every lookup is joined before returning and the result keeps input order.
    By default a single failed lookup fails the whole step with
    EnrichmentError. With ``isolate_failures`` the failed item keeps
    ``Mergeability.UNKNOWN`` instead.
    """
    pull_requests = list(pull_requests)
    if not pull_requests:
        return []

    with ThreadPoolExecutor(max_workers=min(max_workers, len(pull_requests))) as ex:
        futures = [ex.submit(_lookup_mergeability, lookup, pr) for pr in pull_requests]

        enriched: List[PullRequest] = []
        errors: List[str] = []
        for pr, fut in zip(pull_requests, futures):
            try:
                status = fut.result()
            except Exception as e:
                print(f"[ENRICH] Lookup failed for {pr.url}: {e}", flush=True)
                errors.append(pr.url)
                status = Mergeability.UNKNOWN
            enriched.append(replace(pr, mergeable=status))

    if errors and not isolate_failures:
        raise EnrichmentError(f"Mergeability lookup failed for {len(errors)} pull request(s): {', '.join(errors)}")

    return enriched


def filter_pull_requests(pull_requests: Iterable[PullRequest], filters: FilterConfig) -> List[PullRequest]:
    """Drop pull requests carrying an excluded label, then keep only tracked authors."""
    included = [pr for pr in pull_requests if not (pr.labels & filters.exclude_labels)]

    if filters.tracked_users:
        included = [pr for pr in included if pr.author in filters.tracked_users]

    return included
