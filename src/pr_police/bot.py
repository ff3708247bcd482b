"""Report pipeline and the Slack bot that runs it.

The pipeline is: fetch open pull requests -> resolve mergeability -> filter ->
format -> deliver. It runs either from the minute ticker (broadcast to every
configured destination) or from an inbound Slack message (reply to the
originating channel). Runs share no mutable state, so a scheduled run and an
interactive run may overlap.
"""

from __future__ import annotations

from datetime import datetime
import threading
from typing import Any, Dict, List, Mapping, Optional, Protocol

from slack_sdk import WebClient
from slack_sdk.socket_mode import SocketModeClient
from slack_sdk.socket_mode.request import SocketModeRequest
from slack_sdk.socket_mode.response import SocketModeResponse

from .config import Config
from .dispatch import broadcast, reply
from .events import EventKind, classify_event
from .github_client import GitHubAPI
from .logic import enrich_mergeability, filter_pull_requests, pull_request_from_api
from .messages import COMMANDS
from .reporting import Report, format_report
from .schedule import MinuteTicker
from .slack_client import SlackAPI


class PullRequestSource(Protocol):
    def fetch_pull_requests(self, repos: List[str], label_filter: Optional[str] = None) -> List[Dict[str, Any]]:
        ...


class MergeabilityLookup(Protocol):
    def get_pull_request(self, owner: str, repo: str, number: int) -> Dict[str, Any]:
        ...


class ChatSender(Protocol):
    def send_to_channel(self, channel: str, text: str, params: Optional[Mapping[str, str]] = None) -> Any:
        ...

    def send_to_group(self, group: str, text: str, params: Optional[Mapping[str, str]] = None) -> Any:
        ...

    def reply_to(self, channel_id: str, text: str, params: Optional[Mapping[str, str]] = None) -> Any:
        ...


def build_report(cfg: Config, source: PullRequestSource, lookup: MergeabilityLookup) -> Report:
    """Run fetch, enrich, filter and format. Never raises; failures become the no-data report."""
    print("[GITHUB] Checking for pull requests...", flush=True)

    try:
        raw = source.fetch_pull_requests(list(cfg.repos), cfg.labels)
    except Exception as e:
        print(f"[GITHUB] Could not fetch pull requests: {e}", flush=True)
        return format_report(None)

    try:
        pull_requests = [pull_request_from_api(item) for item in raw]
        enriched = enrich_mergeability(pull_requests, lookup, isolate_failures=cfg.isolate_lookup_failures)
    except Exception as e:
        print(f"[ENRICH] Dropping this run's pull requests: {e}", flush=True)
        return format_report(None)

    included = filter_pull_requests(enriched, cfg.filters)
    print(f"[INFO] {len(included)} of {len(enriched)} open pull request(s) included in report", flush=True)
    return format_report(included)


class PrPoliceBot:
    def __init__(
        self,
        cfg: Config,
        source: PullRequestSource,
        lookup: MergeabilityLookup,
        sender: ChatSender,
    ) -> None:
        self.cfg = cfg
        self.source = source
        self.lookup = lookup
        self.sender = sender
        self.ticker = MinuteTicker(cfg.schedule, self.on_tick)
        self._socket_client: Optional[SocketModeClient] = None

    @classmethod
    def from_config(cls, cfg: Config) -> "PrPoliceBot":
        github = GitHubAPI(cfg.github_token)
        return cls(cfg, source=github, lookup=github, sender=SlackAPI(cfg.slack_token))

    def build_report(self) -> Report:
        return build_report(self.cfg, self.source, self.lookup)

    def on_tick(self, now: Optional[datetime] = None) -> int:
        """Scheduled run: broadcast to every configured destination."""
        report = self.build_report()
        delivered = broadcast(report, self.cfg.targets, self.sender, self.cfg.bot_params)
        total = len(self.cfg.targets.channels) + len(self.cfg.targets.groups)
        print(f"[INFO] Scheduled report delivered to {delivered}/{total} destination(s)", flush=True)
        return delivered

    def handle_event(self, event: Mapping[str, Any]) -> EventKind:
        """Interactive run: reply to the channel the request came from."""
        kind = classify_event(event, COMMANDS, self.cfg.workaround_phrase)
        if not kind.is_interactive:
            return kind

        channel = event["channel"]
        print(f"[EVENT] {kind.value} in {channel}, building report", flush=True)
        reply(self.build_report(), channel, self.sender, self.cfg.bot_params)
        return kind

    def _process_socket_request(self, client: SocketModeClient, req: SocketModeRequest) -> None:
        if req.type != "events_api":
            return

        client.send_socket_mode_response(SocketModeResponse(envelope_id=req.envelope_id))

        event = req.payload.get("event", {})
        try:
            self.handle_event(event)
        except Exception as e:
            print(f"[ERROR] Failed to handle Slack event: {e}", flush=True)

    def start(self) -> None:
        if not self.cfg.slack_app_token:
            raise RuntimeError(
                "SLACK_APP_TOKEN must be set in environment or .env file to listen for Slack messages "
                "(App-Level Token with connections:write, xapp-...)."
            )

        self._socket_client = SocketModeClient(
            app_token=self.cfg.slack_app_token,
            web_client=WebClient(token=self.cfg.slack_token),
        )
        self._socket_client.socket_mode_request_listeners.append(self._process_socket_request)
        self._socket_client.connect()
        print("[INFO] Connected to Slack, listening for messages", flush=True)

        self.ticker.start()
        print(f"[INFO] Schedule: {sorted(self.cfg.schedule.days_to_run)} at {sorted(self.cfg.schedule.times_to_run)}", flush=True)

    def stop(self) -> None:
        self.ticker.stop()
        if self._socket_client is not None:
            self._socket_client.close()
            self._socket_client = None

    def run_forever(self) -> None:
        self.start()
        try:
            threading.Event().wait()
        except KeyboardInterrupt:
            print("\n[INFO] Shutting down", flush=True)
        finally:
            self.stop()
