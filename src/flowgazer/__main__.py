"""CLI entry point for offline feed inspection.

Replays a JSON-lines dump of relay events through a
[FeedContext][flowgazer.feed.context.FeedContext] and prints one tab, or
prints the subscription filters a client would send for a configuration.

Examples:
    ```bash
    python -m flowgazer replay events.jsonl --tab following
    python -m flowgazer replay events.jsonl --pubkey npub1... --tab likes --stats
    python -m flowgazer filters --config flowgazer.yaml
    ```
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from flowgazer.core.exceptions import ConfigurationError
from flowgazer.core.logger import Logger, configure_logging
from flowgazer.core.yaml import load_yaml
from flowgazer.feed.configs import FeedConfig
from flowgazer.feed.context import FeedContext
from flowgazer.feed.pipeline import FilterOptions
from flowgazer.models import Tab


DEFAULT_CONFIG = Path("flowgazer.yaml")

logger = Logger("cli")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(prog="flowgazer", description="Flowgazer feed inspector")
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help=f"Feed config path (default: {DEFAULT_CONFIG}, optional)",
    )
    parser.add_argument("--pubkey", help="Local identity (npub or hex); overrides the config")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level (default: from config, else INFO)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    replay = commands.add_parser("replay", help="Replay a JSON-lines event dump")
    replay.add_argument("events", type=Path, help="File with one NIP-01 event per line")
    replay.add_argument(
        "--tab", choices=[t.value for t in Tab], default=Tab.GLOBAL.value, help="Tab to print"
    )
    replay.add_argument("--client-only", action="store_true", help="Keep client-tagged notes only")
    replay.add_argument(
        "--no-verify", action="store_true", help="Skip signature verification (test dumps)"
    )
    replay.add_argument("--stats", action="store_true", help="Print store and router stats")

    commands.add_parser("filters", help="Print the live subscription filters as JSON")

    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> FeedConfig:
    """Build the feed config from the optional YAML file and CLI overrides."""
    data = load_yaml(args.config) if args.config.exists() else {}
    if args.pubkey:
        data.setdefault("session", {})["pubkey"] = args.pubkey
    return FeedConfig.from_dict(data)


def render_tab(feed: FeedContext, tab: Tab, *, client_only: bool) -> list[str]:
    """One line per visible event: timestamp, kind, author label, content."""
    lines = []
    for event in feed.router.get_visible_events(tab, FilterOptions(client_only=client_only)):
        content = event.content.replace("\n", " ")
        lines.append(
            f"{event.created_at} k{event.kind} {feed.store.get_display_name(event.pubkey)}: {content}"
        )
    return lines


async def replay(args: argparse.Namespace, config: FeedConfig) -> int:
    tab = Tab(args.tab)
    verifier = (lambda _event: True) if args.no_verify else None
    output: list[str] = []

    with FeedContext(config, verifier=verifier) as feed:

        def refresh() -> None:
            output[:] = render_tab(feed, tab, client_only=args.client_only)

        feed.scheduler.set_refresh(refresh)

        accepted = rejected = 0
        with args.events.open(encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                if feed.handle_raw(line):
                    accepted += 1
                else:
                    rejected += 1
        logger.info("replay_loaded", accepted=accepted, rejected=rejected)

        feed.router.switch_tab(tab)
        print("\n".join(output))

        if args.stats:
            print(json.dumps(feed.get_stats(), indent=2, default=str))
    return 0


async def main(argv: list[str] | None = None) -> int:
    """Main entry point: parse args, configure logging, run the command."""
    args = parse_args(argv)
    configure_logging(args.log_level or "INFO")

    try:
        config = load_config(args)
    except (ConfigurationError, FileNotFoundError) as e:
        logger.error("config_invalid", error=str(e))
        return 1

    configure_logging(args.log_level or config.logging.level, json_output=config.logging.json_output)

    if args.command == "filters":
        with FeedContext(config) as feed:
            filters = [f.to_dict() for f in feed.subscription_filters()]
        print(json.dumps(filters, indent=2))
        return 0

    try:
        return await replay(args, config)
    except OSError as e:
        logger.error("replay_failed", path=str(args.events), error=str(e))
        return 1


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
