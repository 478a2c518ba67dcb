"""Kubernetes component version model."""

import re
from functools import total_ordering

from pydantic import BaseModel

from ..errors import ParseError

# kubelet may trail kube-apiserver by at most this many minor releases
KUBELET_MAX_MINOR_SKEW = 3

_BUILD_SUFFIX = re.compile(r"[-+].*$")


@total_ordering
class ClusterVersion(BaseModel):
    """A ``major.minor.patch`` version of a cluster component."""

    major: int
    minor: int
    patch: int

    class Config:
        frozen = True

    @classmethod
    def parse(cls, text: str) -> "ClusterVersion":
        """Parse a dotted version such as ``1.30.2`` or ``v1.30.2``."""
        if not isinstance(text, str):
            raise ParseError(f"Invalid version: {text!r}")

        stripped = text.strip()
        if stripped.startswith("v"):
            stripped = stripped[1:]

        parts = stripped.split(".")
        if len(parts) != 3 or not all(part.isdecimal() for part in parts):
            raise ParseError(f"Invalid version: {text!r}")

        return cls(major=int(parts[0]), minor=int(parts[1]), patch=int(parts[2]))

    @classmethod
    def parse_git_version(cls, text: str) -> "ClusterVersion":
        """Parse a git version, dropping pre-release and build suffixes.

        ``v1.30.2+k3s1`` and ``v1.30.2-eks-1234`` both become ``1.30.2``.
        """
        if not isinstance(text, str):
            raise ParseError(f"Invalid version: {text!r}")
        return cls.parse(_BUILD_SUFFIX.sub("", text.strip()))

    def _key(self) -> tuple:
        return (self.major, self.minor, self.patch)

    def __lt__(self, other: "ClusterVersion") -> bool:
        if not isinstance(other, ClusterVersion):
            return NotImplemented
        return self._key() < other._key()

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def minor_version(self) -> str:
        """Return the ``major.minor`` release line, e.g. ``1.30``."""
        return f"{self.major}.{self.minor}"

    def at_least(self, other: "ClusterVersion") -> bool:
        return self >= other


def kubelet_tolerates(
    kubelet: ClusterVersion,
    api_server: ClusterVersion,
    max_minor_skew: int = KUBELET_MAX_MINOR_SKEW,
) -> bool:
    """Check whether a kubelet may talk to an API server of the given version.

    The kubelet must share the API server's major version, must not be on a
    newer minor release, and must not trail it by more than ``max_minor_skew``
    minor releases.
    """
    if kubelet.major != api_server.major:
        return False
    skew = api_server.minor - kubelet.minor
    return 0 <= skew <= max_minor_skew
