from __future__ import annotations

from typing import Any, Mapping, Optional

from .config import DeliveryTargets
from .reporting import Report


def _deliver(send: Any, kind: str, destination: str, text: str, params: Optional[Mapping[str, str]]) -> bool:
    try:
        send(destination, text, params)
    except Exception as e:
        print(f"[DISPATCH] Failed to deliver report to {kind} {destination}: {e}", flush=True)
        return False

    print(f"[DISPATCH] Report delivered to {kind} {destination}", flush=True)
    return True


def broadcast(
    report: Report,
    targets: DeliveryTargets,
    sender: Any,
    params: Optional[Mapping[str, str]] = None,
) -> int:
    """Send the report to every configured channel and group.

    Each destination is attempted once and independently of the others.
    Returns the number of successful deliveries.
    """
    text = report.text
    delivered = 0

    for channel in targets.channels:
        delivered += _deliver(sender.send_to_channel, "channel", channel, text, params)

    for group in targets.groups:
        delivered += _deliver(sender.send_to_group, "group", group, text, params)

    return delivered


def reply(
    report: Report,
    channel: str,
    sender: Any,
    params: Optional[Mapping[str, str]] = None,
) -> bool:
    return _deliver(sender.reply_to, "channel", channel, report.text, params)
