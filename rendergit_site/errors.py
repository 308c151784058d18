"""Shared exception types for rendergit-site."""


class RendergitSiteError(Exception):
    """Base exception for all rendergit-site errors."""


class ConfigError(RendergitSiteError):
    """Configuration is invalid or missing."""


class RevisionError(RendergitSiteError):
    """A requested revision could not be resolved to a commit."""


class RepositoryError(RendergitSiteError):
    """A git query failed or returned something unusable."""

    def __init__(self, message: str, cmd: list[str] | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.cmd = cmd or []
        self.stderr = stderr


class OutputError(RendergitSiteError):
    """Writing the generated site to disk failed."""
