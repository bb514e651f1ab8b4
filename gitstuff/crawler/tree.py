"""Repository tree construction and group lookups."""

from typing import Iterable, Iterator

from .models import Group, GroupNode, Repository, RepositoryTree


def build_repository_tree(
    repos: Iterable[Repository],
    max_group_depth: int | None = None,
) -> RepositoryTree:
    """Build a nested group tree from a flat list of repositories.

    A repository whose full path has no ``/`` goes to the root list. For
    any other path, every segment but the last names a group, walked from
    the top level down and created on first use. ``max_group_depth`` caps
    how many leading segments become groups: GitHub passes ``1`` so the
    owner is the only group level.
    """
    tree = RepositoryTree()

    for repo in repos:
        parts = repo.full_path.split("/")
        if len(parts) == 1:
            tree.repositories.append(repo)
            continue

        group_parts = parts[:-1]
        if max_group_depth is not None:
            group_parts = group_parts[:max_group_depth]

        current = tree.groups
        node: GroupNode | None = None
        for i, part in enumerate(group_parts):
            if part not in current:
                current[part] = GroupNode(
                    group=Group(
                        id=part,
                        name=part,
                        full_path="/".join(parts[: i + 1]),
                        provider=repo.provider,
                    )
                )
            node = current[part]
            current = node.sub_groups

        node.repositories.append(repo)

    return tree


def find_group_in_tree(tree: RepositoryTree, group_path: str) -> GroupNode | None:
    """Return the node at ``group_path``, or None if any segment is missing."""
    current = tree.groups
    node = None

    for part in group_path.split("/"):
        node = current.get(part)
        if node is None:
            return None
        current = node.sub_groups

    return node


def iter_group_repositories(node: GroupNode) -> Iterator[Repository]:
    """Yield every repository in a group and, depth first, its subgroups."""
    yield from node.repositories
    for sub_group in node.sub_groups.values():
        yield from iter_group_repositories(sub_group)


def iter_tree_repositories(tree: RepositoryTree) -> Iterator[Repository]:
    """Yield every repository in the tree, root repositories first."""
    yield from tree.repositories
    for node in tree.groups.values():
        yield from iter_group_repositories(node)


def matches_group(full_path: str, group_path: str) -> bool:
    """Check whether ``full_path`` is ``group_path`` or lives beneath it."""
    return full_path == group_path or full_path.startswith(group_path + "/")


def filter_by_group(repos: Iterable[Repository], group_path: str) -> list[Repository]:
    """Keep repositories inside ``group_path`` (directly or in a subgroup)."""
    return [r for r in repos if matches_group(r.full_path, group_path)]
