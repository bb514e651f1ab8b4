"""Local path resolution for cloned repositories."""

import logging
from pathlib import Path

from ..log import TRACE
from .models import Repository

logger = logging.getLogger(__name__)


def resolve_repository_path(base_dir: Path | str, provider: str, full_path: str) -> Path:
    """Find where a repository lives locally.

    Checks the provider-namespaced layout (``base_dir/provider/full_path``)
    first, then the legacy layout (``base_dir/full_path``). When neither
    exists the provider path is returned, since that is where a fresh clone
    goes.
    """
    base_dir = Path(base_dir)
    provider_path = base_dir / provider / full_path

    logger.log(TRACE, "Checking provider-based path: %s", provider_path)
    if provider_path.exists():
        logger.debug("Found repository at provider-based path: %s", provider_path)
        return provider_path

    legacy_path = base_dir / full_path
    logger.log(TRACE, "Checking legacy path: %s", legacy_path)
    if legacy_path.exists():
        logger.debug("Found repository at legacy path: %s", legacy_path)
        return legacy_path

    logger.debug("Repository not cloned yet, using provider-based path: %s", provider_path)
    return provider_path


def get_clone_path(base_dir: Path | str, provider: str, full_path: str) -> Path:
    """Target directory for a new clone, always in the provider layout."""
    path = Path(base_dir) / provider / full_path
    logger.debug("Clone path for %s: %s", full_path, path)
    return path


def resolve_path_for(base_dir: Path | str, repo: Repository) -> Path:
    return resolve_repository_path(base_dir, repo.provider, repo.full_path)


def clone_path_for(base_dir: Path | str, repo: Repository) -> Path:
    return get_clone_path(base_dir, repo.provider, repo.full_path)
