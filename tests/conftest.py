"""Shared test fixtures."""

import io

import pytest
from rich.console import Console

from gitstuff.crawler.base import SCMClient
from gitstuff.crawler.models import Repository
from gitstuff.crawler.tree import filter_by_group
from gitstuff.exceptions import ProviderError


def _make_repo(full_path: str, provider: str = "gitlab", **overrides) -> Repository:
    """A Repository with URLs derived from its full path."""
    name = full_path.rsplit("/", 1)[-1]
    host = "gitlab.com" if provider == "gitlab" else "github.com"
    fields = dict(
        id=full_path,
        name=name,
        full_path=full_path,
        clone_url=f"https://{host}/{full_path}.git",
        ssh_clone_url=f"git@{host}:{full_path}.git",
        default_branch="main",
        web_url=f"https://{host}/{full_path}",
        provider=provider,
    )
    fields.update(overrides)
    return Repository(**fields)


class _FakeClient(SCMClient):
    """In-memory client returning canned repositories or raising an error."""

    def __init__(self, provider_type="gitlab", repos=None, error=None, name="", max_group_depth=None):
        self.provider_type = provider_type
        self.max_group_depth = max_group_depth
        super().__init__(name)
        self.repos = list(repos or [])
        self.error = error
        self.calls = []

    def _maybe_fail(self):
        if self.error:
            raise ProviderError(self.label, self.error)

    def list_all_repositories(self):
        self.calls.append(("all",))
        self._maybe_fail()
        return list(self.repos)

    def list_repositories_in_group(self, group_path):
        self.calls.append(("group", group_path))
        self._maybe_fail()
        return filter_by_group(self.repos, group_path)


@pytest.fixture
def scenario_repos():
    """Root repo, a group with two repos and a nested subgroup."""
    return [
        _make_repo("repo1"),
        _make_repo("group1/repo1"),
        _make_repo("group1/repo2"),
        _make_repo("group1/subgroup1/repo3"),
    ]


@pytest.fixture
def capture_console():
    """A rich Console writing plain text to a buffer."""
    buffer = io.StringIO()
    console = Console(file=buffer, force_terminal=False, color_system=None, width=400)
    return console


@pytest.fixture
def config_file(tmp_path):
    """Write a two-provider config file and return its path."""
    path = tmp_path / "gitstuff.yaml"
    path.write_text(
        "providers:\n"
        "  - name: gitlab-main\n"
        "    type: gitlab\n"
        "    url: https://gitlab.com\n"
        "    token: gl-token\n"
        "    group: my-group\n"
        "  - name: github-main\n"
        "    type: github\n"
        "    url: https://github.com\n"
        "    token: gh-token\n"
        "    insecure: true\n"
        f"local:\n  base_dir: {tmp_path / 'repos'}\n"
    )
    return path


@pytest.fixture
def make_repo():
    return _make_repo


@pytest.fixture
def fake_client():
    return _FakeClient
