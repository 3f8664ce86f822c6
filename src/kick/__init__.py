"""kick: one-shot git synchronization.

This package stages and commits local changes, pulls and pushes branch
history, and syncs tags, delegating all version control to the `git` binary.
"""

from . import (
    cli,
    config,
    constants,
    git_wrapper,
    ops,
)
from .constants import VERSION as __version__

__all__ = [
    "__version__",
    "cli",
    "config",
    "constants",
    "git_wrapper",
    "ops",
]
