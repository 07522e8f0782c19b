"""Domain error taxonomy.

Services and repositories raise these; routers translate them into HTTP
responses. Nothing in the core recovers from them locally.
"""

from __future__ import annotations


class GradebookError(Exception):
    """Base class for every error the core raises on purpose."""


class ValidationError(GradebookError, ValueError):
    """Malformed or out-of-range input: empty payload, bad score, bad shape."""


class NotFoundError(GradebookError, LookupError):
    """A referenced course, assignment, enrollment or submission is missing."""


class ConflictError(GradebookError):
    """A concurrent write won the race, or a uniqueness rule was violated.

    The caller should reload and retry.
    """
