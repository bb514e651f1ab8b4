"""Configuration loading and saving.

The config file is YAML::

    providers:
      - name: gitlab-main
        type: gitlab
        url: https://gitlab.com
        token: glpat-...
        insecure: false
        group: my-group
    local:
      base_dir: ~/gitstuff-repos

Older files only had a single ``gitlab:`` section; those are migrated to a
one-provider config when loaded.
"""

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GITSTUFF_CONFIG"
CONFIG_FILENAME = ".gitstuff.yaml"
DEFAULT_BASE_DIRNAME = "gitstuff-repos"
PROVIDER_TYPES = ("gitlab", "github")


class ProviderConfig(BaseModel):
    """Credentials and defaults for one provider instance."""
    name: str
    type: Literal["gitlab", "github"]
    url: str
    token: str
    insecure: bool = False
    group: str = ""


class LocalConfig(BaseModel):
    """Where repositories are cloned."""
    base_dir: str = ""


class Config(BaseModel):
    """The whole configuration file."""
    providers: list[ProviderConfig] = Field(default_factory=list)
    local: LocalConfig = Field(default_factory=LocalConfig)

    @property
    def base_dir(self) -> Path:
        return Path(self.local.base_dir).expanduser()

    def default_group(self) -> str:
        """First non-empty provider group, used when no --group is given."""
        for provider in self.providers:
            if provider.group:
                return provider.group
        return ""


def default_config_path() -> Path:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / CONFIG_FILENAME


def default_base_dir() -> str:
    return str(Path.home() / DEFAULT_BASE_DIRNAME)


def _migrate_legacy(data: dict) -> dict:
    """Turn the single-GitLab layout into the providers layout."""
    legacy = data.get("gitlab") or {}
    local = data.get("local") or {}
    logger.info("Migrating legacy GitLab-only configuration")
    return {
        "providers": [
            {
                "name": "gitlab",
                "type": "gitlab",
                "url": legacy.get("url", ""),
                "token": legacy.get("token", ""),
                "insecure": bool(legacy.get("insecure", False)),
                "group": legacy.get("group") or "",
            }
        ],
        "local": {"base_dir": local.get("base_dir") or local.get("basedir") or ""},
    }


def _read_file(path: Path) -> Config:
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"failed to parse config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must contain a mapping")

    for section in ("gitlab", "local"):
        if data.get(section) is not None and not isinstance(data[section], dict):
            raise ConfigurationError(f"'{section}' in config file {path} must be a mapping")

    if "providers" not in data and "gitlab" in data:
        data = _migrate_legacy(data)

    local = data.get("local") or {}
    if "basedir" in local and "base_dir" not in local:
        data["local"] = {"base_dir": local["basedir"]}

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"invalid config file {path}: {e}") from e


def load_config(path: Path | str | None = None) -> Config:
    """Load and validate the configuration.

    Raises ConfigurationError when the file is missing, unreadable, or has
    no usable provider.
    """
    path = Path(path) if path else default_config_path()
    if not path.exists():
        raise ConfigurationError(f"config file not found: {path}")

    logger.debug("Using config file: %s", path)
    config = _read_file(path)

    if not config.providers:
        raise ConfigurationError("no providers configured")

    for provider in config.providers:
        if not provider.url or not provider.token:
            raise ConfigurationError(
                f"provider '{provider.name}' must have a url and token"
            )

    if not config.local.base_dir:
        config.local.base_dir = default_base_dir()

    logger.debug("Loaded configuration with %d providers", len(config.providers))
    return config


def validate_provider(name: str, provider_type: str, url: str, token: str) -> None:
    if not name:
        raise ConfigurationError("provider name is required")
    if not provider_type:
        raise ConfigurationError("provider type is required")
    if provider_type not in PROVIDER_TYPES:
        raise ConfigurationError(f"unsupported provider type: {provider_type}")
    if not url:
        raise ConfigurationError("provider URL is required")
    if not token:
        raise ConfigurationError("provider token is required")


def save_config(config: Config, path: Path | str | None = None) -> Path:
    """Write the config as YAML, readable by the owner only."""
    path = Path(path) if path else default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        yaml.safe_dump(config.model_dump(), f, sort_keys=False)
    # an existing file keeps its old mode through O_CREAT
    os.chmod(path, 0o600)
    return path


def add_provider(
    name: str,
    provider_type: str,
    url: str,
    token: str,
    base_dir: str = "",
    insecure: bool = False,
    group: str = "",
    path: Path | str | None = None,
) -> Config:
    """Add a provider to the config file, replacing one with the same name.

    An existing base directory is kept unless ``base_dir`` is given.
    """
    validate_provider(name, provider_type, url, token)

    path = Path(path) if path else default_config_path()
    config = _read_file(path) if path.exists() else Config()

    provider = ProviderConfig(
        name=name,
        type=provider_type,
        url=url,
        token=token,
        insecure=insecure,
        group=group,
    )

    for i, existing in enumerate(config.providers):
        if existing.name == name:
            config.providers[i] = provider
            break
    else:
        config.providers.append(provider)

    if base_dir:
        config.local.base_dir = base_dir
    elif not config.local.base_dir:
        config.local.base_dir = default_base_dir()

    saved = save_config(config, path)
    logger.info("Configuration saved to %s", saved)
    return config
