"""Internal git helpers - not part of public API."""

from teo.git._internal.access import RepoAccess

__all__ = ["RepoAccess"]
