import argparse
import logging
import sys

from rich.console import Console
from rich.table import Table

from .config import Config
from .constants import APP_NAME, VERSION
from .git_wrapper import GitError, GitRepo
from .ops import Kicker, StepResult, StepStatus

logger = logging.getLogger(APP_NAME)
console = Console()
err_console = Console(stderr=True)

_STATUS_STYLES = {
    StepStatus.OK: "[green]✔ ok[/green]",
    StepStatus.TOLERATED: "[yellow]⚠ tolerated[/yellow]",
    StepStatus.FATAL: "[red]✘ fatal[/red]",
}


def setup_logging(debug: bool) -> None:
    """Configures the logging subsystem.

    Args:
        debug (bool): If True, log every command at DEBUG level. Otherwise only
                      warnings and errors are shown.
    """
    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s: %(message)s", "%Y-%m-%d %H:%M:%S"
    )

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.handlers.clear()
    logger.addHandler(stream_handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    """Creates the argument parser.

    Single-dash long flags (`-debug`) are accepted alongside the usual
    double-dash spelling.
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Stage, commit, pull, push and sync tags in one go.",
        add_help=False,
    )
    parser.add_argument("-h", "-help", "--help", action="help", help="Show usage menu")
    parser.add_argument(
        "-version", "--version", action="store_true", help="Show version banner"
    )
    parser.add_argument(
        "-debug",
        "--debug",
        action="store_true",
        default=None,
        help="Enable additional logging",
    )

    overrides = parser.add_argument_group(
        "overrides", "Take precedence over KICK_* environment variables"
    )
    overrides.add_argument(
        "-message",
        "--message",
        dest="commit_message",
        metavar="MSG",
        help="Commit message (empty to let git open an editor)",
    )
    overrides.add_argument(
        "-nonce",
        "--nonce",
        action="store_true",
        default=None,
        help="Touch the nonce file to force a commit",
    )
    for name, dest, what in (
        ("fetch-all", "fetch_all", "Fetch tags from all remotes"),
        ("pull-all", "pull_all", "Pull from all remotes"),
        ("push-all", "push_all", "Push to all remotes"),
        ("sync-tags", "sync_tags", "Fetch and push tags"),
    ):
        overrides.add_argument(
            f"--{name}",
            dest=dest,
            action=argparse.BooleanOptionalAction,
            default=None,
            help=what,
        )

    return parser


def show_results(results: list[StepResult]) -> None:
    """Displays a table of step outcomes on stderr."""
    table = Table(title="kick", show_lines=False)
    table.add_column("Step", style="cyan")
    table.add_column("Result")
    table.add_column("Detail", style="dim")

    for result in results:
        detail = str(result.error) if result.error else ""
        table.add_row(result.step, _STATUS_STYLES[result.status], detail)

    err_console.print(table)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the kick CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        console.print(VERSION, highlight=False)
        return

    setup_logging(bool(args.debug))
    config = Config.load(
        debug=args.debug,
        nonce=args.nonce,
        fetch_all=args.fetch_all,
        pull_all=args.pull_all,
        push_all=args.push_all,
        sync_tags=args.sync_tags,
        commit_message=args.commit_message,
    )

    kicker = Kicker(config, GitRepo(debug=config.debug))
    try:
        kicker.run()
    except (GitError, OSError) as e:
        logger.error(f"{kicker.failed_step} failed: {e}")
        if config.debug:
            show_results(kicker.results)
        sys.exit(1)

    if config.debug:
        show_results(kicker.results)


if __name__ == "__main__":
    main()
