"""Exceptions raised while building the site."""

from __future__ import annotations

__all__ = ["BuildError", "ConfigError", "ContentError", "TemplateNotFoundError"]


class BuildError(Exception):
    """Raised when the build cannot continue."""


class ConfigError(BuildError):
    """Raised when a configuration file is unreadable or invalid."""


class ContentError(BuildError):
    """Raised when a source document cannot be turned into a post."""

    def __init__(self, message: str, *, path: object = None) -> None:
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)
        self.path = path


class TemplateNotFoundError(BuildError):
    """Raised when a page or layout template is missing."""
