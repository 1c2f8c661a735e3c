"""
Memory Journal Backend — Custom Exception Hierarchy
=====================================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions let services signal "not found" or "wrong password"
       without knowing about HTTP; global handlers pick the status code.
How:   Each exception class carries a user-facing message and an optional
       context dict. Handlers registered in main.py return `{"message": ...}`
       with the matching status code. Context is logged, never returned.
Who:   Raised by services and middleware; caught by global handlers.

Exception Hierarchy:
    JournalError (base)
    ├── ValidationError          → 400 Bad Request
    ├── PasswordMismatchError    → 401 Unauthorized (verify-password endpoints)
    ├── ForbiddenError           → 403 Forbidden (mutation with wrong secret)
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error

User-facing messages are Korean to match the existing web client.
"""

from typing import Any, Dict, Optional

# ── Client-facing messages ────────────────────────────────────────────────
MSG_BAD_REQUEST = "잘못된 요청입니다"
MSG_NOT_FOUND = "존재하지 않습니다"
MSG_WRONG_PASSWORD = "비밀번호가 틀렸습니다"
MSG_SERVER_ERROR = "서버 에러가 발생했습니다"


class JournalError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = MSG_SERVER_ERROR,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(JournalError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, malformed ids, unsupported upload types.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = MSG_BAD_REQUEST,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class PasswordMismatchError(JournalError):
    """
    Raised by the verify-password endpoints when the supplied secret is wrong.

    HTTP:    401 Unauthorized

    Kept separate from ForbiddenError because the two endpoints families
    answer differently: verify-password says "you are not authorized" (401),
    a protected mutation says "you may not do this" (403).
    """

    def __init__(
        self,
        message: str = MSG_WRONG_PASSWORD,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(JournalError):
    """
    Raised when a protected mutation (update/delete) carries the wrong secret.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = MSG_WRONG_PASSWORD,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(JournalError):
    """
    Raised when a requested entity does not exist.

    HTTP:    404 Not Found

    The resource name and id go into the context for logs; the client only
    sees the message, which defaults to the generic "존재하지 않습니다".
    Callers pass a specific message where the client distinguishes causes
    (e.g. a missing parent group while deleting a post).
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: str = MSG_NOT_FOUND,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class FileStorageError(JournalError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = MSG_SERVER_ERROR,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(JournalError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the driver error
    is logged server-side only.
    """

    def __init__(
        self,
        message: str = MSG_SERVER_ERROR,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(JournalError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"요청이 너무 많습니다. {retry_after}초 후에 다시 시도해주세요."
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
