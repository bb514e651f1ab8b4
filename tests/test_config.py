"""Tests for configuration loading, migration and saving."""

import os
import stat
from pathlib import Path

import pytest
import yaml

from gitstuff.config import add_provider, default_config_path, load_config
from gitstuff.exceptions import ConfigurationError


def test_load_multi_provider(config_file, tmp_path):
    config = load_config(config_file)

    assert [p.name for p in config.providers] == ["gitlab-main", "github-main"]
    gitlab, github = config.providers
    assert gitlab.type == "gitlab"
    assert gitlab.token == "gl-token"
    assert gitlab.insecure is False
    assert gitlab.group == "my-group"
    assert github.type == "github"
    assert github.insecure is True
    assert github.group == ""
    assert config.base_dir == tmp_path / "repos"


def test_default_group_is_first_configured(config_file):
    assert load_config(config_file).default_group() == "my-group"


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "missing.yaml")


def test_load_legacy_gitlab_config(tmp_path):
    path = tmp_path / "legacy.yaml"
    path.write_text(
        "gitlab:\n"
        "  url: https://gitlab.example.com\n"
        "  token: legacy-token\n"
        "  insecure: true\n"
        "  group: legacy-group\n"
        "local:\n"
        "  basedir: /legacy/dir\n"
    )

    config = load_config(path)

    assert len(config.providers) == 1
    provider = config.providers[0]
    assert provider.name == "gitlab"
    assert provider.type == "gitlab"
    assert provider.url == "https://gitlab.example.com"
    assert provider.token == "legacy-token"
    assert provider.insecure is True
    assert provider.group == "legacy-group"
    assert config.local.base_dir == "/legacy/dir"


def test_missing_base_dir_defaults_to_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    path = tmp_path / "c.yaml"
    path.write_text(
        "providers:\n  - {name: gh, type: github, url: https://github.com, token: t}\n"
    )

    config = load_config(path)

    assert config.local.base_dir == str(tmp_path / "gitstuff-repos")


def test_no_providers_is_an_error(tmp_path):
    path = tmp_path / "c.yaml"
    path.write_text("local:\n  base_dir: /x\n")

    with pytest.raises(ConfigurationError, match="no providers configured"):
        load_config(path)


def test_provider_without_token_is_an_error(tmp_path):
    path = tmp_path / "c.yaml"
    path.write_text("providers:\n  - {name: gl, type: gitlab, url: https://gitlab.com, token: ''}\n")

    with pytest.raises(ConfigurationError, match="url and token"):
        load_config(path)


def test_invalid_yaml(tmp_path):
    path = tmp_path / "c.yaml"
    path.write_text("providers: [unclosed\n")

    with pytest.raises(ConfigurationError, match="failed to parse"):
        load_config(path)


def test_invalid_shape(tmp_path):
    path = tmp_path / "c.yaml"
    path.write_text("providers:\n  - name: only-a-name\n")

    with pytest.raises(ConfigurationError, match="invalid config file"):
        load_config(path)


def test_unsupported_provider_type_in_file(tmp_path):
    path = tmp_path / "c.yaml"
    path.write_text("providers:\n  - {name: bb, type: bitbucket, url: https://bitbucket.org, token: t}\n")

    with pytest.raises(ConfigurationError, match="invalid config file"):
        load_config(path)


@pytest.mark.parametrize("text", ["local: basedir\n", "gitlab: https://gitlab.com\n"])
def test_scalar_section_is_an_error(tmp_path, text):
    path = tmp_path / "c.yaml"
    path.write_text("providers:\n  - {name: gl, type: gitlab, url: https://gitlab.com, token: t}\n" + text)

    with pytest.raises(ConfigurationError, match="must be a mapping"):
        load_config(path)


def test_saved_file_is_created_owner_only(tmp_path, monkeypatch):
    path = tmp_path / "c.yaml"
    # with chmod disabled the mode comes from file creation alone
    monkeypatch.setattr(os, "chmod", lambda *args, **kwargs: None)
    old_umask = os.umask(0o022)
    try:
        add_provider("gh", "github", "https://github.com", "secret", path=path)
    finally:
        os.umask(old_umask)

    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_saving_tightens_existing_file_mode(tmp_path):
    path = tmp_path / "c.yaml"
    path.write_text("")
    path.chmod(0o644)

    add_provider("gh", "github", "https://github.com", "secret", path=path)

    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_config_path_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("GITSTUFF_CONFIG", str(tmp_path / "custom.yaml"))
    assert default_config_path() == tmp_path / "custom.yaml"


def test_config_path_defaults_to_home(tmp_path, monkeypatch):
    monkeypatch.delenv("GITSTUFF_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert default_config_path() == Path(tmp_path) / ".gitstuff.yaml"


def test_add_provider_creates_file(tmp_path):
    path = tmp_path / "c.yaml"

    add_provider("gitlab-main", "gitlab", "https://gitlab.com", "gl-token", "/custom/dir",
                 group="my-group", path=path)

    config = load_config(path)
    assert config.providers[0].name == "gitlab-main"
    assert config.providers[0].group == "my-group"
    assert config.local.base_dir == "/custom/dir"
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_add_second_provider_keeps_base_dir(tmp_path):
    path = tmp_path / "c.yaml"
    add_provider("gitlab-main", "gitlab", "https://gitlab.com", "gl", "/shared/dir", path=path)
    add_provider("github-main", "github", "https://github.com", "gh", "", insecure=True,
                 group="my-org", path=path)

    config = load_config(path)

    assert [p.name for p in config.providers] == ["gitlab-main", "github-main"]
    assert config.providers[1].insecure is True
    assert config.local.base_dir == "/shared/dir"


def test_add_provider_replaces_same_name(tmp_path):
    path = tmp_path / "c.yaml"
    add_provider("main", "gitlab", "https://gitlab.com", "old", "/d", path=path)
    add_provider("main", "gitlab", "https://gitlab.com", "new", path=path)

    data = yaml.safe_load(path.read_text())

    assert len(data["providers"]) == 1
    assert data["providers"][0]["token"] == "new"


def test_add_provider_to_legacy_file_migrates_it(tmp_path):
    path = tmp_path / "c.yaml"
    path.write_text("gitlab:\n  url: https://gitlab.old\n  token: t\nlocal:\n  basedir: /old\n")

    add_provider("github", "github", "https://github.com", "gh", path=path)

    data = yaml.safe_load(path.read_text())
    assert "gitlab" not in data
    assert [p["name"] for p in data["providers"]] == ["gitlab", "github"]
    assert data["local"]["base_dir"] == "/old"


@pytest.mark.parametrize(
    "name, provider_type, url, token, message",
    [
        ("", "gitlab", "https://gitlab.com", "token", "provider name is required"),
        ("test", "", "https://gitlab.com", "token", "provider type is required"),
        ("test", "bitbucket", "https://bitbucket.org", "token", "unsupported provider type"),
        ("test", "gitlab", "", "token", "provider URL is required"),
        ("test", "gitlab", "https://gitlab.com", "", "provider token is required"),
    ],
)
def test_add_provider_validation(tmp_path, name, provider_type, url, token, message):
    path = tmp_path / "c.yaml"

    with pytest.raises(ConfigurationError, match=message):
        add_provider(name, provider_type, url, token, path=path)

    assert not path.exists()
