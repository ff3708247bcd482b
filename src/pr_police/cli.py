from __future__ import annotations

import argparse

from rich.console import Console

from .bot import PrPoliceBot
from .config import load_config
from .dispatch import broadcast, reply
from .reporting import print_report


def main() -> None:
    console = Console()
    cfg = load_config()

    console.print(f"[bold]{cfg.bot_name}[/bold] watching {len(cfg.repos)} repo source(s)")
    if not cfg.targets.channels and not cfg.targets.groups:
        console.print("[yellow]No SLACK_CHANNELS or SLACK_GROUPS configured, scheduled reports go nowhere.[/yellow]")

    bot = PrPoliceBot.from_config(cfg)
    bot.run_forever()


def report_once() -> None:
    """Build one report now (CLI entry point).

    Prints it, and optionally sends it to every configured destination or to a
    single channel.
    """
    parser = argparse.ArgumentParser(description="Build the open pull request report once")
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--broadcast",
        action="store_true",
        help="Send the report to every configured channel and group",
    )
    group.add_argument(
        "--channel",
        help="Send the report to this channel id only",
    )
    args = parser.parse_args()

    console = Console()
    cfg = load_config()
    bot = PrPoliceBot.from_config(cfg)

    report = bot.build_report()
    print_report(report, console)

    if args.broadcast:
        delivered = broadcast(report, cfg.targets, bot.sender, cfg.bot_params)
        console.print(f"\nDelivered to [green]{delivered}[/green] destination(s)")
    elif args.channel:
        if reply(report, args.channel, bot.sender, cfg.bot_params):
            console.print(f"\nSent to [green]{args.channel}[/green]")


if __name__ == "__main__":
    main()
