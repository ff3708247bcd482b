from __future__ import annotations

import re
from typing import Dict, Mapping, Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError


# Conversation ids look like C024BE91L (channel), G024BE91L (group) or D024BE91L (DM)
CONVERSATION_ID_REGEX = re.compile(r"^[CGD][A-Z0-9]{8,}$")


class SlackAPI:
    """Thin wrapper over Slack WebClient for the messages the bot posts."""

    def __init__(self, token: str, client: Optional[WebClient] = None) -> None:
        self.client = client or WebClient(token=token)

    def resolve_conversation_id(self, name_or_id: str, types: str) -> str:
        """Return the id of a conversation given its name (with or without '#') or id."""
        if CONVERSATION_ID_REGEX.match(name_or_id):
            return name_or_id

        name = name_or_id.lstrip("#")
        cursor: Optional[str] = None

        while True:
            try:
                resp = self.client.conversations_list(
                    types=types,
                    exclude_archived=True,
                    limit=1000,
                    cursor=cursor,
                )
            except SlackApiError as e:
                raise RuntimeError(f"Failed to list conversations: {e.response.get('error', 'unknown')}") from e

            for ch in resp.get("channels", []):
                if ch.get("name") == name:
                    return ch["id"]

            cursor = resp.get("response_metadata", {}).get("next_cursor") or None
            if not cursor:
                break

        raise RuntimeError(f"No Slack conversation named {name!r} ({types}) is visible to the bot")

    def post_message(self, channel_id: str, text: str, params: Optional[Mapping[str, str]] = None) -> Dict:
        try:
            resp = self.client.chat_postMessage(channel=channel_id, text=text, **dict(params or {}))
        except SlackApiError as e:
            raise RuntimeError(f"Failed to post to {channel_id}: {e.response.get('error', 'unknown')}") from e
        return resp.data if hasattr(resp, "data") else dict(resp)

    def send_to_channel(self, channel: str, text: str, params: Optional[Mapping[str, str]] = None) -> Dict:
        channel_id = self.resolve_conversation_id(channel, types="public_channel")
        return self.post_message(channel_id, text, params)

    def send_to_group(self, group: str, text: str, params: Optional[Mapping[str, str]] = None) -> Dict:
        group_id = self.resolve_conversation_id(group, types="private_channel")
        return self.post_message(group_id, text, params)

    def reply_to(self, channel_id: str, text: str, params: Optional[Mapping[str, str]] = None) -> Dict:
        """Post to the channel an event came from; the id is used as-is."""
        return self.post_message(channel_id, text, params)
