"""Main entry point for gitstuff."""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from . import __version__
from .config import Config, add_provider, default_config_path, load_config
from .crawler.client_manager import MultiClientManager
from .crawler.repo_manager import RepoManager
from .exceptions import ConfigurationError, GitError, GitStuffError, GroupNotFoundError
from .log import configure_logging
from .output import RepositoryPrinter

logger = logging.getLogger(__name__)

console = Console()


def _load(args) -> tuple[Config, MultiClientManager]:
    """Load the config and build a client for each provider in it."""
    try:
        config = load_config(args.config)
        return config, MultiClientManager.from_providers(config.providers)
    except ConfigurationError as e:
        raise ConfigurationError(f"failed to load config: {e} (run 'gitstuff config' first)") from e


def _report_errors(errors) -> None:
    for error in errors:
        console.print(
            f"[red]✗[/red] Error from {escape(error.provider)} provider: {escape(error.message)}"
        )


def run_list(args) -> None:
    """List repositories from every provider, flat or as a tree."""
    config, manager = _load(args)
    group = args.group or config.default_group()

    printer = RepositoryPrinter(
        RepoManager(config.base_dir),
        show_status=args.status,
        verbosity=args.verbose,
        console=console,
    )

    if args.tree:
        printer.print_trees(manager.build_repository_trees(), group)
        return

    if group:
        logger.info("Fetching repositories in group: %s", group)
        result = manager.list_repositories_in_group(group)
    else:
        result = manager.list_all_repositories()

    _report_errors(result.errors)
    printer.print_list(result.repositories)


def run_clone(args) -> None:
    """Clone one repository, a group, or everything."""
    config, manager = _load(args)
    if args.provider:
        manager = manager.select(args.provider)
    use_ssh = not args.https
    repos_manager = RepoManager(config.base_dir, use_ssh=use_ssh, update=args.update)

    if not args.target:
        logger.info("Cloning all repositories from all providers")
        result = manager.list_all_repositories()
        _report_errors(result.errors)
        console.print(f"Found {len(result.repositories)} repositories to clone/update\n")
        repos_manager.sync_repos(result.repositories)
        return

    if args.all:
        logger.info("Cloning all repositories in group: %s", args.target)
        result = manager.list_repositories_in_group(args.target)
        _report_errors(result.errors)
        if not result.repositories:
            raise GroupNotFoundError(args.target)
        console.print(
            f"Found {len(result.repositories)} repositories in group "
            f"'{escape(args.target)}' to clone/update\n"
        )
        repos_manager.sync_repos(result.repositories)
        return

    repo, errors = manager.find_repository(args.target)
    _report_errors(errors)
    console.print(f"Found repository: {escape(repo.full_path)} \\[{repo.provider}]")

    result = repos_manager.sync_repo(repo)
    if not result.success:
        raise GitError(result.error)

    if result.action == "skipped":
        console.print(f"⏭️  Repository already cloned at: {result.local_path}")
        console.print("   Use --update flag to pull latest changes")
    elif result.action == "updated":
        console.print("[green]✓[/green] Repository updated successfully")
    else:
        console.print(f"[green]✓[/green] Repository cloned to {result.local_path}")


def _prompt_missing(args) -> None:
    """Fill in whatever the flags left out by asking on the terminal."""
    if not args.provider:
        args.provider = Prompt.ask("Provider type", choices=["gitlab", "github"], default="gitlab")

    if not args.name:
        args.name = Prompt.ask(
            f"Provider name (identifier for this {args.provider} instance)",
            default=args.provider,
        )

    if not args.url:
        if args.provider == "gitlab":
            args.url = Prompt.ask("GitLab URL (e.g., https://gitlab.com or gitlab.example.com)")
        else:
            args.url = Prompt.ask(
                "GitHub URL (github.com or a GitHub Enterprise URL)",
                default="https://github.com",
            )

    if not args.token:
        label = "GitLab Access Token" if args.provider == "gitlab" else "GitHub Personal Access Token"
        args.token = Prompt.ask(label, password=True)

    if args.base_dir is None:
        args.base_dir = Prompt.ask(
            "Base directory for repositories (blank keeps the current one or ~/gitstuff-repos)",
            default="",
            show_default=False,
        )

    if args.insecure is None:
        args.insecure = args.provider == "gitlab" and Confirm.ask(
            "Skip SSL certificate verification?", default=False
        )

    if args.group is None:
        kind = "group" if args.provider == "gitlab" else "organization"
        args.group = Prompt.ask(
            f"Default {kind} to filter repositories (optional)",
            default="",
            show_default=False,
        )


def run_config(args) -> None:
    """Add or replace a provider, interactively unless flags cover everything."""
    path = Path(args.config) if args.config else default_config_path()
    interactive = not args.provider

    while True:
        if interactive:
            _prompt_missing(args)

        add_provider(
            name=args.name or args.provider,
            provider_type=args.provider,
            url=args.url,
            token=args.token,
            base_dir=args.base_dir or "",
            insecure=bool(args.insecure),
            group=args.group or "",
            path=path,
        )
        console.print(f"[green]✓[/green] Configuration saved to {path}")

        if not interactive or not Confirm.ask("Would you like to add another provider?", default=False):
            break

        for field in ("provider", "name", "url", "token", "insecure", "group"):
            setattr(args, field, None)
        args.base_dir = ""

    console.print("Configuration complete!")


def run_version(args) -> None:
    console.print(f"gitstuff version {__version__}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitstuff",
        description="gitstuff - list, clone and update repositories from GitLab and GitHub",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to configuration file (default: $GITSTUFF_CONFIG or ~/.gitstuff.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Verbose output (-v, -vv, -vvv for increasing levels)",
    )
    subparsers = parser.add_subparsers(dest="command")

    config_parser = subparsers.add_parser("config", help="Configure SCM provider settings")
    config_parser.add_argument("--provider", "-p", choices=["gitlab", "github"], help="Provider type")
    config_parser.add_argument("--name", "-n", help="Provider name (identifier)")
    config_parser.add_argument("--url", "-u", help="Provider instance URL")
    config_parser.add_argument("--token", "-t", help="Access token")
    config_parser.add_argument("--base-dir", "-d", help="Base directory for cloned repositories")
    config_parser.add_argument(
        "--insecure", "-k",
        action="store_true",
        default=None,
        help="Skip SSL certificate verification (self-signed certificates)",
    )
    config_parser.add_argument("--group", "-g", help="Default group/organization filter")
    config_parser.set_defaults(func=run_config)

    list_parser = subparsers.add_parser("list", help="List repositories from configured providers")
    list_parser.add_argument(
        "--tree", "-t",
        action="store_true",
        help="Display repositories in tree structure with groups",
    )
    list_parser.add_argument(
        "--status", "-s",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Show local repository status",
    )
    list_parser.add_argument("--group", "-g", default="", help="Only repositories in this group")
    list_parser.set_defaults(func=run_list)

    clone_parser = subparsers.add_parser(
        "clone",
        help="Clone repositories from configured providers",
        description=(
            "Clone a repository ('owner/repo' or just 'repo'), every repository in "
            "a group ('group --all'), or everything ('--all')."
        ),
    )
    clone_parser.add_argument("target", nargs="?", help="Repository path or group path")
    clone_parser.add_argument(
        "--all", "-a",
        action="store_true",
        help="Clone all repositories (or all in the given group)",
    )
    protocol = clone_parser.add_mutually_exclusive_group()
    protocol.add_argument("--ssh", "-s", action="store_true", help="Clone over SSH (default)")
    protocol.add_argument("--https", action="store_true", help="Clone over HTTPS")
    clone_parser.add_argument(
        "--update", "-u",
        action="store_true",
        help="Pull latest changes for already cloned repositories",
    )
    clone_parser.add_argument(
        "--provider", "-p",
        metavar="NAME",
        default="",
        help="Only use the provider with this configured name",
    )
    clone_parser.set_defaults(func=run_clone)

    version_parser = subparsers.add_parser("version", help="Print the version number")
    version_parser.set_defaults(func=run_version)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 0

    try:
        args.func(args)
    except GitStuffError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
