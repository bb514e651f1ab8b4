"""GitHub API client for repository discovery."""

import logging
from urllib.parse import urlparse

import requests
from github import Auth, Consts, Github, GithubException

from .base import SCMClient
from .models import GITHUB, Repository
from .tree import filter_by_group
from ..exceptions import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)

PUBLIC_HOST = "github.com"
PER_PAGE = 100


def normalize_url(base_url: str) -> str:
    """Normalize a GitHub URL; Enterprise hosts get the ``/api/v3`` path."""
    if not base_url:
        raise ValueError("URL cannot be empty")

    if not base_url.startswith(("http://", "https://")):
        base_url = "https://" + base_url

    parsed = urlparse(base_url)
    if not parsed.netloc:
        raise ValueError("URL must have a valid host")

    if "/api/v3" not in parsed.path and parsed.netloc != PUBLIC_HOST:
        parsed = parsed._replace(path="/api/v3")

    return parsed.geturl()


class GitHubClient(SCMClient):
    """Client for interacting with GitHub API."""

    provider_type = GITHUB
    # Organizations don't nest
    max_group_depth = 1

    def __init__(
        self,
        url: str,
        token: str,
        insecure: bool = False,
        name: str = "",
    ):
        super().__init__(name)
        if not token:
            raise ConfigurationError("GitHub access token is required")
        if not url:
            raise ConfigurationError("GitHub base URL is required")

        try:
            normalized = normalize_url(url)
        except ValueError as e:
            raise ConfigurationError(f"invalid GitHub URL: {e}") from e

        if urlparse(normalized).netloc == PUBLIC_HOST:
            self.api_url = Consts.DEFAULT_BASE_URL
        else:
            self.api_url = normalized

        self.gh = Github(
            auth=Auth.Token(token),
            base_url=self.api_url,
            verify=not insecure,
            per_page=PER_PAGE,
        )

    def _to_repository(self, repo) -> Repository | None:
        """Convert a PyGithub repository, or None for ones we can't pull."""
        if not repo.full_name:
            return None
        permissions = repo.permissions
        if repo.private and permissions is not None and not permissions.pull:
            return None

        return Repository(
            id=str(repo.id),
            name=repo.name,
            full_path=repo.full_name,
            clone_url=repo.clone_url,
            ssh_clone_url=repo.ssh_url,
            default_branch=repo.default_branch or "",
            web_url=repo.html_url,
            provider=GITHUB,
        )

    def list_all_repositories(self) -> list[Repository]:
        """List every repository of the authenticated user."""
        logger.debug("Listing all repositories from %s", self.api_url)
        try:
            repos = self.gh.get_user().get_repos(sort="full_name", direction="asc")
            return self._collect(repos, self._to_repository)
        except (GithubException, requests.exceptions.RequestException) as e:
            raise ProviderError(self.label, f"failed to list repositories: {e}") from e

    def list_repositories_in_group(self, group_path: str) -> list[Repository]:
        """List repositories of an organization.

        Falls back to filtering the user's repositories when ``group_path``
        is not an organization (a user account, or a path below an owner).
        """
        if not group_path:
            return self.list_all_repositories()

        owner = group_path.split("/")[0]
        if owner == group_path:
            try:
                org = self.gh.get_organization(owner)
                repos = org.get_repos(type="all", sort="full_name", direction="asc")
                return filter_by_group(
                    self._collect(repos, self._to_repository), group_path
                )
            except GithubException as e:
                if e.status != 404:
                    raise ProviderError(
                        self.label,
                        f"failed to list repositories for organization {owner}: {e}",
                    ) from e
                logger.debug("%s is not an organization, filtering user repositories", owner)
            except requests.exceptions.RequestException as e:
                raise ProviderError(
                    self.label,
                    f"failed to list repositories for organization {owner}: {e}",
                ) from e

        return filter_by_group(self.list_all_repositories(), group_path)
