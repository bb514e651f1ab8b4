"""Local clone management: status checks, clone and pull."""

import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

from .models import Repository
from .paths import clone_path_for, resolve_path_for
from ..exceptions import GitError

logger = logging.getLogger(__name__)

console = Console()

CLONE_TIMEOUT = 600
PULL_TIMEOUT = 300
STATUS_TIMEOUT = 30


@dataclass
class GitStatus:
    """State of a local checkout."""
    exists: bool
    is_git_repo: bool = False
    current_branch: str = ""
    has_changes: bool = False


@dataclass
class SyncResult:
    """Outcome of cloning or updating one repository."""
    repo: Repository
    local_path: Path
    success: bool
    action: str = ""  # cloned | updated | skipped
    error: str | None = None


def _run_git(args: list[str], timeout: int, cwd: Path | None = None) -> str:
    cmd = ["git", *args]
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise GitError(f"git {args[0]} timed out after {timeout}s") from e
    except OSError as e:
        raise GitError(f"failed to run git: {e}") from e

    if result.returncode != 0:
        raise GitError(result.stderr.strip() or f"git {args[0]} exited with {result.returncode}")
    return result.stdout


def get_repository_status(repo_path: Path | str) -> GitStatus:
    """Inspect a directory: does it exist, is it a repo, branch, dirty tree."""
    repo_path = Path(repo_path)
    if not repo_path.exists():
        return GitStatus(exists=False)

    if not (repo_path / ".git").exists():
        return GitStatus(exists=True, is_git_repo=False)

    try:
        branch = _run_git(
            ["-C", str(repo_path), "rev-parse", "--abbrev-ref", "HEAD"], STATUS_TIMEOUT
        ).strip()
    except GitError as e:
        raise GitError(f"failed to get current branch: {e}") from e

    try:
        porcelain = _run_git(["-C", str(repo_path), "status", "--porcelain"], STATUS_TIMEOUT)
    except GitError as e:
        raise GitError(f"failed to check git status: {e}") from e

    return GitStatus(
        exists=True,
        is_git_repo=True,
        current_branch=branch,
        has_changes=bool(porcelain.strip()),
    )


def clone_repository(clone_url: str, target_path: Path | str) -> None:
    target_path = Path(target_path)
    try:
        target_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise GitError(f"failed to create target directory: {e}") from e

    _run_git(["clone", clone_url, str(target_path)], CLONE_TIMEOUT)


def pull_repository(repo_path: Path | str) -> None:
    repo_path = Path(repo_path)
    if not repo_path.is_dir():
        raise GitError(f"{repo_path} does not exist")
    _run_git(["-C", str(repo_path), "pull"], PULL_TIMEOUT)


class RepoManager:
    """Clones and updates repositories under a base directory."""

    def __init__(
        self,
        base_dir: Path | str,
        use_ssh: bool = True,
        update: bool = False,
    ):
        self.base_dir = Path(base_dir).expanduser()
        self.use_ssh = use_ssh
        self.update = update

    def get_repo_path(self, repo: Repository) -> Path:
        """Existing checkout location, new or legacy layout."""
        return resolve_path_for(self.base_dir, repo)

    def get_clone_path(self, repo: Repository) -> Path:
        return clone_path_for(self.base_dir, repo)

    def get_status(self, repo: Repository) -> GitStatus:
        return get_repository_status(self.get_repo_path(repo))

    def clone_url(self, repo: Repository) -> str:
        return repo.ssh_clone_url if self.use_ssh else repo.clone_url

    def sync_repo(self, repo: Repository) -> SyncResult:
        """Clone a repository, or pull it when ``update`` is set and it exists."""
        start = time.perf_counter()
        local_path = self.get_repo_path(repo)

        try:
            status = get_repository_status(local_path)
        except GitError as e:
            return SyncResult(repo, local_path, success=False, error=f"error checking status: {e}")

        if status.exists and status.is_git_repo:
            if not self.update:
                logger.debug("%s already cloned, skipping", repo.full_path)
                return SyncResult(repo, local_path, success=True, action="skipped")
            try:
                pull_repository(local_path)
            except GitError as e:
                return SyncResult(repo, local_path, success=False, error=f"failed to pull: {e}")
            logger.debug("Pull completed for %s (took %.2fs)", repo.full_path, time.perf_counter() - start)
            return SyncResult(repo, local_path, success=True, action="updated")

        if status.exists:
            return SyncResult(
                repo,
                local_path,
                success=False,
                error=f"directory {local_path} exists but is not a git repository",
            )

        clone_path = self.get_clone_path(repo)
        url = self.clone_url(repo)
        logger.debug(
            "Cloning %s over %s from %s", repo.full_path, "SSH" if self.use_ssh else "HTTPS", url
        )
        try:
            clone_repository(url, clone_path)
        except GitError as e:
            return SyncResult(repo, clone_path, success=False, error=f"failed to clone: {e}")

        logger.debug("Clone completed for %s (took %.2fs)", repo.full_path, time.perf_counter() - start)
        return SyncResult(repo, clone_path, success=True, action="cloned")

    def sync_repos(self, repos: list[Repository]) -> list[SyncResult]:
        """Clone or update repositories one after another."""
        results = []

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=console,
        ) as progress:
            task = progress.add_task("Syncing repos...", total=len(repos))

            for repo in repos:
                progress.update(task, description=f"{repo.full_path} [{repo.provider}]")
                result = self.sync_repo(repo)
                results.append(result)

                if not result.success:
                    progress.console.print(f"  [red]✗[/red] {repo.full_path}: {result.error}")
                elif result.action == "skipped":
                    progress.console.print(
                        f"  [dim]⏭[/dim]  {repo.full_path} already cloned (use --update to pull)"
                    )
                else:
                    progress.console.print(f"  [green]✓[/green] {repo.full_path} {result.action}")

                progress.advance(task)

        successful = sum(1 for r in results if r.success)
        console.print(
            f"\n[bold]Summary: {successful} successful, {len(results) - successful} failed[/bold]"
        )

        return results
