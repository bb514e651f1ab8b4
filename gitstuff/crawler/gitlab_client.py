"""GitLab API client for repository discovery."""

import logging
from urllib.parse import urlparse

import gitlab
import requests

from .base import SCMClient
from .models import GITLAB, Group, Repository
from .tree import filter_by_group
from ..exceptions import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)

PER_PAGE = 100


def normalize_url(base_url: str) -> str:
    """Add an ``https://`` scheme when missing and require a host."""
    if not base_url:
        raise ValueError("URL cannot be empty")

    if not base_url.startswith(("http://", "https://")):
        base_url = "https://" + base_url

    parsed = urlparse(base_url)
    if not parsed.netloc:
        raise ValueError("URL must have a valid host")

    return parsed.geturl()


class GitLabClient(SCMClient):
    """Client for interacting with GitLab API."""

    provider_type = GITLAB

    def __init__(
        self,
        url: str,
        token: str,
        insecure: bool = False,
        name: str = "",
    ):
        super().__init__(name)
        try:
            self.url = normalize_url(url)
        except ValueError as e:
            raise ConfigurationError(f"invalid GitLab URL: {e}") from e

        self.gl = gitlab.Gitlab(
            self.url,
            private_token=token,
            ssl_verify=not insecure,
            per_page=PER_PAGE,
        )

    def _to_repository(self, project) -> Repository:
        return Repository(
            id=str(project.id),
            name=project.name,
            full_path=project.path_with_namespace,
            clone_url=project.http_url_to_repo,
            ssh_clone_url=project.ssh_url_to_repo,
            default_branch=project.default_branch or "",
            web_url=project.web_url,
            provider=GITLAB,
        )

    def list_all_repositories(self) -> list[Repository]:
        """List every project the user is a member of."""
        logger.debug("Listing all projects from %s", self.url)
        try:
            projects = self.gl.projects.list(
                iterator=True,
                membership=True,
                order_by="path",
                sort="asc",
            )
            return self._collect(projects, self._to_repository)
        except (gitlab.exceptions.GitlabError, requests.exceptions.RequestException) as e:
            raise ProviderError(self.label, f"failed to list projects: {e}") from e

    def list_repositories_in_group(self, group_path: str) -> list[Repository]:
        """List projects of a group, subgroups included.

        An empty ``group_path`` lists everything.
        """
        if not group_path:
            return self.list_all_repositories()

        logger.debug("Listing projects in group %s from %s", group_path, self.url)
        try:
            group = self.gl.groups.get(group_path)
        except (gitlab.exceptions.GitlabError, requests.exceptions.RequestException) as e:
            raise ProviderError(self.label, f"failed to get group {group_path}: {e}") from e

        try:
            projects = group.projects.list(
                iterator=True,
                include_subgroups=True,
                order_by="path",
                sort="asc",
            )
            repos = self._collect(projects, self._to_repository)
        except (gitlab.exceptions.GitlabError, requests.exceptions.RequestException) as e:
            raise ProviderError(
                self.label, f"failed to list projects in group {group_path}: {e}"
            ) from e

        # Shared projects can show up under a group they don't live in
        return filter_by_group(repos, group_path)

    def get_repository(self, full_path: str) -> Repository:
        """Fetch a single project by its path with namespace."""
        try:
            project = self.gl.projects.get(full_path)
        except (gitlab.exceptions.GitlabError, requests.exceptions.RequestException) as e:
            raise ProviderError(self.label, f"failed to get project {full_path}: {e}") from e
        return self._to_repository(project)

    def list_groups(self) -> list[Group]:
        """List all groups visible to the user, ordered by path."""
        try:
            groups = self.gl.groups.list(
                iterator=True,
                all_available=True,
                order_by="path",
                sort="asc",
            )
            return [
                Group(
                    id=str(group.id),
                    name=group.name,
                    full_path=group.full_path,
                    provider=GITLAB,
                )
                for group in groups
            ]
        except (gitlab.exceptions.GitlabError, requests.exceptions.RequestException) as e:
            raise ProviderError(self.label, f"failed to list groups: {e}") from e
