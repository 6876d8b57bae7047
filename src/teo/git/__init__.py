"""Git operations module."""

from teo.git.errors import (
    GitError,
    NotARepositoryError,
    PathNotFoundError,
    RefNotFoundError,
)
from teo.git.models import DiffSummary, FileDiffStat
from teo.git.ops import GitOps

__all__ = [
    # Main class
    "GitOps",
    # Errors
    "GitError",
    "NotARepositoryError",
    "RefNotFoundError",
    "PathNotFoundError",
    # Models
    "DiffSummary",
    "FileDiffStat",
]
