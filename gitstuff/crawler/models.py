"""Shared data models for provider clients."""

from dataclasses import dataclass, field

from ..exceptions import InvalidPathError

GITLAB = "gitlab"
GITHUB = "github"


@dataclass
class Repository:
    """Repository metadata, normalized across providers."""
    id: str
    name: str
    full_path: str
    clone_url: str
    ssh_clone_url: str
    default_branch: str
    web_url: str
    provider: str


@dataclass
class Group:
    """A group (GitLab) or organization (GitHub)."""
    id: str
    name: str
    full_path: str
    provider: str


@dataclass
class GroupNode:
    """A group with its subgroups and directly contained repositories."""
    group: Group
    sub_groups: dict[str, "GroupNode"] = field(default_factory=dict)
    repositories: list[Repository] = field(default_factory=list)


@dataclass
class RepositoryTree:
    """Top-level groups plus repositories that live outside any group."""
    groups: dict[str, GroupNode] = field(default_factory=dict)
    repositories: list[Repository] = field(default_factory=list)


def validate_full_path(full_path: str) -> str:
    """Reject paths with empty segments (``""``, ``"/a"``, ``"a/"``, ``"a//b"``)."""
    if not full_path or any(part == "" for part in full_path.split("/")):
        raise InvalidPathError(full_path)
    return full_path
