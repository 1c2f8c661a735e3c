"""
Memory Journal Backend — Shared-Secret Checks
===============================================

What:  Password checks for groups, posts and comments.
Why:   There are no user accounts. Each entity carries a secret chosen by its
       author; whoever presents the same string may edit or delete it.
How:   Exact string comparison via secrets.compare_digest (constant time).
"""

import secrets
from typing import Optional

from journal.exceptions import ForbiddenError, PasswordMismatchError


def secret_matches(stored: str, supplied: Optional[str]) -> bool:
    """True when the supplied secret is exactly the stored one."""
    if supplied is None:
        return False
    return secrets.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))


def require_secret(stored: str, supplied: Optional[str], resource: str, resource_id: str) -> None:
    """
    Guard for protected mutations (PATCH/PUT/DELETE).

    Raises:
        ForbiddenError (403) on mismatch
    """
    if not secret_matches(stored, supplied):
        raise ForbiddenError(context={"resource": resource, "resource_id": resource_id})


def verify_secret(stored: str, supplied: Optional[str], resource: str, resource_id: str) -> None:
    """
    Check used by the verify-password endpoints. Reads only; never mutates.

    Raises:
        PasswordMismatchError (401) on mismatch
    """
    if not secret_matches(stored, supplied):
        raise PasswordMismatchError(context={"resource": resource, "resource_id": resource_id})
