from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Dict, FrozenSet, List, Optional, Tuple

from dotenv import load_dotenv


DEFAULT_DAYS_TO_RUN = "Monday,Tuesday,Wednesday,Thursday,Friday"
DEFAULT_TIMES_TO_RUN = "900"
DEFAULT_BOT_NAME = "Pr. Police"
CHECK_INTERVAL_SECONDS = 60  # Evaluate the schedule once per minute

REQUIRED_ENVS = ("SLACK_TOKEN", "GH_TOKEN", "GH_REPOS")


@dataclass(frozen=True)
class ScheduleConfig:
    days_to_run: FrozenSet[str]
    times_to_run: FrozenSet[int]
    timezone: Optional[str] = None  # IANA name, local time when unset


@dataclass(frozen=True)
class FilterConfig:
    exclude_labels: FrozenSet[str] = frozenset()
    tracked_users: FrozenSet[str] = frozenset()  # Empty means every author


@dataclass(frozen=True)
class DeliveryTargets:
    channels: Tuple[str, ...] = ()
    groups: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Config:
    slack_token: str
    github_token: str
    repos: Tuple[str, ...]
    schedule: ScheduleConfig
    filters: FilterConfig = field(default_factory=FilterConfig)
    targets: DeliveryTargets = field(default_factory=DeliveryTargets)
    labels: Optional[str] = None  # Label filter handed to the GitHub source
    slack_app_token: Optional[str] = None  # App-level token (xapp-...) for Socket Mode
    bot_name: str = DEFAULT_BOT_NAME
    bot_icon: Optional[str] = None
    workaround_phrase: Optional[str] = None
    isolate_lookup_failures: bool = False

    @property
    def bot_params(self) -> Dict[str, str]:
        """Display parameters attached to every outgoing Slack message."""
        params = {"username": self.bot_name}
        if self.bot_icon:
            params["icon_url"] = self.bot_icon
        return params


def split_list(raw: Optional[str]) -> List[str]:
    """Split a comma separated env value, dropping blanks."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def _parse_times(raw: str) -> FrozenSet[int]:
    times = set()
    for part in split_list(raw):
        try:
            times.add(int(part))
        except ValueError as e:
            raise RuntimeError(f"TIMES_TO_RUN entries must be integers like 930, got {part!r}") from e
    return frozenset(times)


def load_config() -> Config:
    """Load configuration from environment variables / .env file."""

    load_dotenv()

    missing = [name for name in REQUIRED_ENVS if not os.getenv(name)]
    if missing:
        raise RuntimeError(
            "Missing one of these required ENV vars: " + ",".join(REQUIRED_ENVS)
            + f" (unset: {','.join(missing)})"
        )

    days_to_run = frozenset(day.lower() for day in split_list(os.getenv("DAYS_TO_RUN") or DEFAULT_DAYS_TO_RUN))
    times_to_run = _parse_times(os.getenv("TIMES_TO_RUN") or DEFAULT_TIMES_TO_RUN)

    schedule = ScheduleConfig(
        days_to_run=days_to_run,
        times_to_run=times_to_run,
        timezone=os.getenv("TIMEZONE") or None,
    )

    filters = FilterConfig(
        exclude_labels=frozenset(split_list(os.getenv("GH_EXCLUDE_LABELS"))),
        tracked_users=frozenset(split_list(os.getenv("USERS_TRACKED"))),
    )

    targets = DeliveryTargets(
        channels=tuple(split_list(os.getenv("SLACK_CHANNELS"))),
        groups=tuple(split_list(os.getenv("SLACK_GROUPS"))),
    )

    isolate = os.getenv("GH_ISOLATE_LOOKUP_FAILURES", "false").lower() in {"1", "true", "yes", "y"}

    return Config(
        slack_token=os.environ["SLACK_TOKEN"],
        github_token=os.environ["GH_TOKEN"],
        repos=tuple(split_list(os.getenv("GH_REPOS"))),
        schedule=schedule,
        filters=filters,
        targets=targets,
        labels=os.getenv("GH_LABELS") or None,
        slack_app_token=os.getenv("SLACK_APP_TOKEN") or None,
        bot_name=os.getenv("SLACK_BOT_NAME") or DEFAULT_BOT_NAME,
        bot_icon=os.getenv("SLACK_BOT_ICON") or None,
        workaround_phrase=os.getenv("BOT_WORKAROUND_PHRASE") or None,
        isolate_lookup_failures=isolate,
    )
