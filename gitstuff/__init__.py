"""gitstuff: list, clone and update repositories from GitLab and GitHub."""

__version__ = "0.3.0"
