"""Project scanning errors."""


class ProjectError(Exception):
    """Raised when a project's config file or content directory cannot be read."""
