"""Client factory and multi-provider aggregation."""

import logging
from dataclasses import dataclass, field
from typing import Callable

from .base import SCMClient
from .github_client import GitHubClient
from .gitlab_client import GitLabClient
from .models import GITHUB, GITLAB, Repository, RepositoryTree
from ..config import ProviderConfig
from ..exceptions import (
    AmbiguousRepositoryError,
    ConfigurationError,
    ProviderError,
    RepositoryNotFoundError,
)

logger = logging.getLogger(__name__)


def create_client(provider: ProviderConfig) -> SCMClient:
    """Create the client matching a provider's type."""
    if provider.type == GITLAB:
        return GitLabClient(
            url=provider.url,
            token=provider.token,
            insecure=provider.insecure,
            name=provider.name,
        )
    if provider.type == GITHUB:
        return GitHubClient(
            url=provider.url,
            token=provider.token,
            insecure=provider.insecure,
            name=provider.name,
        )
    raise ConfigurationError(f"unsupported provider type: {provider.type}")


@dataclass
class AggregateResult:
    """Repositories gathered from every provider that answered."""
    repositories: list[Repository] = field(default_factory=list)
    errors: list[ProviderError] = field(default_factory=list)


@dataclass
class ProviderTree:
    """Tree for one provider, or the error that prevented building it."""
    client: SCMClient
    tree: RepositoryTree | None = None
    error: ProviderError | None = None


class MultiClientManager:
    """Runs an operation on every configured client, in order.

    A provider that fails is recorded and skipped; the others still run.
    """

    def __init__(self, clients: list[SCMClient] | None = None):
        self.clients: list[SCMClient] = list(clients or [])

    @classmethod
    def from_providers(cls, providers: list[ProviderConfig]) -> "MultiClientManager":
        return cls([create_client(p) for p in providers])

    def add_client(self, client: SCMClient) -> None:
        self.clients.append(client)

    def select(self, name: str) -> "MultiClientManager":
        """A manager limited to the client with the given configured name."""
        clients = [c for c in self.clients if c.name == name]
        if not clients:
            configured = ", ".join(c.name for c in self.clients)
            raise ConfigurationError(
                f"no provider named '{name}' (configured: {configured})"
            )
        return MultiClientManager(clients)

    def _call(
        self,
        client: SCMClient,
        operation: Callable[[SCMClient], list[Repository]],
        errors: list[ProviderError],
    ) -> list[Repository]:
        try:
            repos = operation(client)
        except ProviderError as e:
            logger.warning("Error from %s provider: %s", client.label, e.message)
            errors.append(e)
            return []
        logger.info("Found %d repositories in %s", len(repos), client.label)
        return repos

    def _gather(self, operation: Callable[[SCMClient], list[Repository]]) -> AggregateResult:
        result = AggregateResult()
        for client in self.clients:
            result.repositories.extend(self._call(client, operation, result.errors))
        return result

    def list_all_repositories(self) -> AggregateResult:
        return self._gather(lambda c: c.list_all_repositories())

    def list_repositories_in_group(self, group_path: str) -> AggregateResult:
        return self._gather(lambda c: c.list_repositories_in_group(group_path))

    def build_repository_trees(self) -> list[ProviderTree]:
        trees = []
        for client in self.clients:
            try:
                trees.append(ProviderTree(client=client, tree=client.build_repository_tree()))
            except ProviderError as e:
                logger.warning("Error building tree for %s: %s", client.label, e.message)
                trees.append(ProviderTree(client=client, error=e))
        return trees

    def find_repository(self, query: str) -> tuple[Repository, list[ProviderError]]:
        """Find one repository by full path, or by its trailing path segments.

        Exact matches win over suffix matches. Suffix matches are anchored
        on ``/`` so ``"app"`` matches ``"team/app"`` but not ``"team/webapp"``.
        More than one candidate at the winning level is an error naming the
        providers they came from; ``select`` narrows the search to one.
        """
        errors: list[ProviderError] = []
        found = [
            (client.name, repo)
            for client in self.clients
            for repo in self._call(client, lambda c: c.list_all_repositories(), errors)
        ]

        exact = [(name, r) for name, r in found if r.full_path == query]
        candidates = exact or [
            (name, r) for name, r in found if r.full_path.endswith("/" + query)
        ]

        if not candidates:
            raise RepositoryNotFoundError(query)
        if len(candidates) > 1:
            raise AmbiguousRepositoryError(
                query,
                [r for _, r in candidates],
                providers=[name for name, _ in candidates],
            )
        return candidates[0][1], errors
