"""gitstuff exception classes."""


class GitStuffError(Exception):
    """Base exception for all gitstuff errors."""


class ConfigurationError(GitStuffError):
    """Raised when the configuration file is missing or invalid."""


class ProviderError(GitStuffError):
    """Raised when a provider API call fails."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        self.message = message
        super().__init__(f"{provider}: {message}")


class RepositoryNotFoundError(GitStuffError):
    """Raised when no configured provider has a matching repository."""

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(
            f"repository '{query}' not found in any configured provider"
        )


class AmbiguousRepositoryError(GitStuffError):
    """Raised when a repository query matches more than one repository.

    ``providers`` holds the configured provider name of each candidate.
    """

    def __init__(self, query: str, candidates: list, providers: list[str] | None = None) -> None:
        self.query = query
        self.candidates = candidates
        self.providers = providers or [r.provider for r in candidates]
        names = ", ".join(
            f"[{p}] {r.full_path}" for p, r in zip(self.providers, candidates)
        )
        super().__init__(
            f"repository '{query}' is ambiguous, matches: {names} "
            f"(use --provider NAME to pick one)"
        )


class GitError(GitStuffError):
    """Raised when a git subprocess fails."""


class InvalidPathError(GitStuffError):
    """Raised when a provider returns a malformed full path."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"invalid repository path: {path!r}")


class GroupNotFoundError(GitStuffError):
    """Raised when a group yields no repositories in any provider."""

    def __init__(self, group_path: str) -> None:
        self.group_path = group_path
        super().__init__(f"no repositories found in group '{group_path}'")
