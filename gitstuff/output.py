"""Console rendering for repository lists and trees."""

from rich.console import Console
from rich.markup import escape

from .crawler.client_manager import ProviderTree
from .crawler.models import GroupNode, Repository
from .crawler.repo_manager import GitStatus, RepoManager
from .crawler.tree import find_group_in_tree
from .exceptions import GitError

COMMON_DEFAULT_BRANCHES = ("main", "master")


def is_default_branch(current_branch: str, default_branch: str) -> bool:
    if default_branch and current_branch == default_branch:
        return True
    return current_branch in COMMON_DEFAULT_BRANCHES


def compact_status(status: GitStatus, default_branch: str) -> str:
    """One-glyph status for tree rows; the branch shows only when unusual."""
    if not status.exists:
        return "❌ Not cloned"
    if not status.is_git_repo:
        return "⚠️ Not a git repo"

    result = "✅"
    if status.has_changes:
        result += " 🔄"
    if status.current_branch and not is_default_branch(status.current_branch, default_branch):
        result += f" ({status.current_branch})"
    return result


def long_status(status: GitStatus) -> str:
    if not status.exists:
        return "Status: ❌ Not cloned"
    if not status.is_git_repo:
        return "Status: ⚠️  Directory exists but not a git repository"

    line = "Status: ✅ Cloned"
    if status.current_branch:
        line += f" (branch: {status.current_branch})"
    if status.has_changes:
        line += " 🔄 Has uncommitted changes"
    return line


class RepositoryPrinter:
    """Prints repositories, optionally with their local clone status.

    ``verbosity`` is the ``-v`` count: 1 adds web and SSH URLs, 2 adds the
    clone URL, default branch and provider.
    """

    def __init__(
        self,
        manager: RepoManager,
        show_status: bool = True,
        verbosity: int = 0,
        console: Console | None = None,
    ):
        self.manager = manager
        self.show_status = show_status
        self.verbosity = verbosity
        self.console = console or Console()

    def _print(self, text: str) -> None:
        self.console.print(escape(text), highlight=False)

    def print_list(self, repos: list[Repository]) -> None:
        self._print(f"Found {len(repos)} repositories:\n")

        for repo in repos:
            self._print(f"📁 [{repo.provider}] {repo.full_path}")

            if self.verbosity >= 1:
                self._print(f"   Web URL: {repo.web_url}")
                self._print(f"   SSH URL: {repo.ssh_clone_url}")
            if self.verbosity >= 2:
                self._print(f"   Clone URL: {repo.clone_url}")
                self._print(f"   Default Branch: {repo.default_branch}")
                self._print(f"   Provider: {repo.provider}")

            if self.show_status:
                try:
                    self._print(f"   {long_status(self.manager.get_status(repo))}")
                except GitError as e:
                    self._print(f"   Status: ❌ Error checking status: {e}")

            self._print("")

    def _repo_line(self, repo: Repository, prefix: str) -> str:
        line = f"{prefix}📁 {repo.name}"
        if self.show_status:
            try:
                line += " - " + compact_status(self.manager.get_status(repo), repo.default_branch)
            except GitError as e:
                line += f" - ❌ Error: {e}"
        return line

    def _print_urls(self, repo: Repository, prefix: str) -> None:
        if self.verbosity >= 1:
            self._print(f"{prefix}   Web URL: {repo.web_url}")
            self._print(f"{prefix}   SSH URL: {repo.ssh_clone_url}")

    def print_group(self, node: GroupNode, indent: int = 0) -> None:
        prefix = "  " * indent
        self._print(f"{prefix}📂 {node.group.name}/")

        for repo in node.repositories:
            self._print(self._repo_line(repo, prefix + "  "))
            self._print_urls(repo, prefix + "  ")

        for sub_group in node.sub_groups.values():
            self.print_group(sub_group, indent + 1)

    def print_tree(self, provider_tree: ProviderTree, group_filter: str = "") -> None:
        client = provider_tree.client
        self._print(f"\n=== {client.provider_type.upper()} Provider ===")

        if provider_tree.error is not None:
            self._print(f"Error building tree for {client.label}: {provider_tree.error.message}")
            return

        tree = provider_tree.tree
        if group_filter:
            self._print(f"(filtered by group: {group_filter})")
            node = find_group_in_tree(tree, group_filter)
            if node is None:
                self._print(f"Group '{group_filter}' not found in {client.label}")
            else:
                self.print_group(node)
            return

        if tree.repositories:
            self._print("Root repositories:")
            for repo in tree.repositories:
                self._print(self._repo_line(repo, ""))
                self._print_urls(repo, "")

        for node in tree.groups.values():
            self.print_group(node)

    def print_trees(self, trees: list[ProviderTree], group_filter: str = "") -> None:
        self._print("Repository tree structure:")
        for provider_tree in trees:
            self.print_tree(provider_tree, group_filter)
