from __future__ import annotations

from typing import Dict, FrozenSet

from .logic import Mergeability


PR_LIST_HEADER = "Hi! :wave: These pull requests need a review today:"
NO_PULL_REQUESTS = "No pull requests waiting for review. :tada:"
GITHUB_ERROR = "Could not reach GitHub, so I can't tell you which pull requests need review. :warning:"

# Glyph shown in front of each pull request line.
MERGEABILITY_GLYPHS: Dict[Mergeability, str] = {
    Mergeability.MERGEABLE: "✅",
    Mergeability.CONFLICTED: "🔴",
    Mergeability.UNKNOWN: "⭐",
}

# Message texts that request a report in any channel the bot is in.
COMMANDS: FrozenSet[str] = frozenset({
    "pr-police",
    "pr police",
    "!prs",
    "what needs review?",
    "@pr-police what needs review?",
})

# Bots cannot address this bot directly yet, so this mention text stands in
# for a bot-originated request.
WORKAROUND_PHRASE = "<@U017UT89TCN> what needs review?"
