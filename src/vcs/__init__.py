"""Version-control line oracles."""

from vcs.git import (
    GitFilterError,
    GitUser,
    OracleUnavailable,
    get_current_user,
    is_git_repository,
)
from vcs.oracles import LineAuthors, OracleCache, UncommittedRanges

__all__ = [
    "GitFilterError",
    "GitUser",
    "LineAuthors",
    "OracleCache",
    "OracleUnavailable",
    "UncommittedRanges",
    "get_current_user",
    "is_git_repository",
]
