"""Repository discovery across providers."""

from .models import Group, GroupNode, Repository, RepositoryTree
from .gitlab_client import GitLabClient
from .github_client import GitHubClient
from .client_manager import MultiClientManager, create_client
from .repo_manager import RepoManager
from .tree import build_repository_tree, filter_by_group, find_group_in_tree

__all__ = [
    "Group",
    "GroupNode",
    "Repository",
    "RepositoryTree",
    "GitLabClient",
    "GitHubClient",
    "MultiClientManager",
    "create_client",
    "RepoManager",
    "build_repository_tree",
    "filter_by_group",
    "find_group_in_tree",
]
