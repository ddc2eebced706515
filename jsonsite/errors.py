from __future__ import annotations


class SiteError(Exception):
    """Base class for errors that abort a build."""


class ConfigError(SiteError):
    pass


class DataError(SiteError):
    pass


class TemplateNotFound(SiteError):
    def __init__(self, path) -> None:
        super().__init__(f"Template not found: {path}")
        self.path = path
