"""Pr. Police: Slack reports of open GitHub pull requests."""

from .config import Config, DeliveryTargets, FilterConfig, ScheduleConfig, load_config
from .logic import Mergeability, PullRequest, enrich_mergeability, filter_pull_requests
from .reporting import Report, ReportKind, format_report
from .schedule import MinuteTicker, should_run
from .dispatch import broadcast, reply
from .events import EventKind, classify_event
from .github_client import GitHubAPI, GitHubAPIError
from .slack_client import SlackAPI
from .bot import PrPoliceBot, build_report

__all__ = [
    "Config",
    "DeliveryTargets",
    "FilterConfig",
    "ScheduleConfig",
    "load_config",
    "Mergeability",
    "PullRequest",
    "enrich_mergeability",
    "filter_pull_requests",
    "Report",
    "ReportKind",
    "format_report",
    "MinuteTicker",
    "should_run",
    "broadcast",
    "reply",
    "EventKind",
    "classify_event",
    "GitHubAPI",
    "GitHubAPIError",
    "SlackAPI",
    "PrPoliceBot",
    "build_report",
]
