"""Common interface for provider clients."""

import logging
import time
from abc import ABC, abstractmethod

from .models import Repository, RepositoryTree, validate_full_path
from .tree import build_repository_tree
from ..exceptions import InvalidPathError

logger = logging.getLogger(__name__)


class SCMClient(ABC):
    """A source of repositories from one provider instance.

    Subclasses only fetch and normalize records; tree building is shared.
    """

    provider_type: str = ""
    # None means groups nest to any depth
    max_group_depth: int | None = None

    def __init__(self, name: str = ""):
        self.name = name or self.provider_type

    @property
    def label(self) -> str:
        """Provider type, plus the configured name when it differs."""
        if self.name and self.name != self.provider_type:
            return f"{self.provider_type} ({self.name})"
        return self.provider_type

    def get_provider_type(self) -> str:
        return self.provider_type

    @abstractmethod
    def list_all_repositories(self) -> list[Repository]:
        """Return every repository the token can access, sorted by full path."""

    @abstractmethod
    def list_repositories_in_group(self, group_path: str) -> list[Repository]:
        """Return repositories in ``group_path`` and its subgroups."""

    def build_repository_tree(self) -> RepositoryTree:
        repos = self.list_all_repositories()
        return build_repository_tree(repos, max_group_depth=self.max_group_depth)

    def _collect(self, items, convert) -> list[Repository]:
        """Convert API items, drop malformed paths and sort by full path."""
        start = time.perf_counter()
        repos = []
        for item in items:
            repo = convert(item)
            if repo is None:
                continue
            try:
                validate_full_path(repo.full_path)
            except InvalidPathError as e:
                logger.warning("Skipping %s repository: %s", self.label, e)
                continue
            repos.append(repo)

        repos.sort(key=lambda r: r.full_path)
        logger.debug(
            "Fetched %d repositories from %s (took %.2fs)",
            len(repos), self.label, time.perf_counter() - start,
        )
        return repos
