from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from rich.console import Console

from .logic import Mergeability, PullRequest
from .messages import GITHUB_ERROR, MERGEABILITY_GLYPHS, NO_PULL_REQUESTS, PR_LIST_HEADER


class ReportKind(Enum):
    NO_DATA = "no_data"
    EMPTY = "empty"
    PULL_REQUESTS = "pull_requests"


@dataclass(frozen=True)
class Report:
    kind: ReportKind
    lines: Tuple[str, ...] = ()

    @property
    def text(self) -> str:
        if self.kind == ReportKind.NO_DATA:
            return GITHUB_ERROR
        if self.kind == ReportKind.EMPTY:
            return NO_PULL_REQUESTS
        return "\n".join(self.lines)


def glyph_for(mergeable: Mergeability) -> str:
    return MERGEABILITY_GLYPHS[mergeable]


def format_line(pr: PullRequest) -> str:
    return f"{glyph_for(pr.mergeable)} {pr.title} | {pr.url}"


def format_report(pull_requests: Optional[Sequence[PullRequest]]) -> Report:
    """Render filtered pull requests. ``None`` means the data could not be fetched."""
    if pull_requests is None:
        return Report(ReportKind.NO_DATA)

    if not pull_requests:
        return Report(ReportKind.EMPTY)

    lines = [PR_LIST_HEADER, ""]
    lines.extend(format_line(pr) for pr in pull_requests)
    return Report(ReportKind.PULL_REQUESTS, tuple(lines))


def print_report(report: Report, console: Optional[Console] = None) -> None:
    console = console or Console()

    if report.kind == ReportKind.NO_DATA:
        console.print(f"[bold red]{report.text}[/bold red]")
        return

    if report.kind == ReportKind.EMPTY:
        console.print(f"[bold yellow]{report.text}[/bold yellow]")
        return

    header, *rest = report.lines
    console.print(f"[bold underline]{header}[/bold underline]")
    for line in rest:
        # Titles may contain square brackets
        console.print(line, markup=False)
