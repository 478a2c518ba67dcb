"""Error hierarchy for kubeup.

Every failure raised by the upgrade core derives from ``KubeupError`` and is
also an instance of the closest built-in exception, so callers can catch
either form.
"""

from typing import Optional

__all__ = [
    "KubeupError",
    "ParseError",
    "TargetIOError",
    "NodeLookupError",
    "QueryError",
    "EncodingError",
    "MutationError",
    "ConfigurationError",
]


class KubeupError(Exception):
    """Base exception for all kubeup errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParseError(KubeupError, ValueError):
    """A version string or command output could not be parsed."""


class TargetIOError(KubeupError, OSError):
    """A file could not be read from or written to the target node."""


class NodeLookupError(KubeupError, LookupError):
    """A node or version is not known to the cluster."""


class QueryError(KubeupError):
    """Cluster state could not be retrieved."""


class EncodingError(KubeupError):
    """A kubeadm configuration could not be serialized."""


class MutationError(KubeupError):
    """A remote action failed on the target node."""

    def __init__(self, action: str, message: str, stderr: Optional[str] = None):
        super().__init__(f"{action}: {message}")
        self.action = action
        self.stderr = stderr


class ConfigurationError(KubeupError):
    """Settings could not be loaded or are invalid."""
