"""
Error kinds raised by the record stores and mapped to HTTP responses.
"""

from __future__ import annotations


class PlayerFeedError(Exception):
    """Base error carrying the HTTP status and the message shown to callers."""

    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class BadRequestError(PlayerFeedError):
    status_code = 400
    default_detail = "Bad request"


class ConflictError(BadRequestError):
    status_code = 409
    default_detail = "Resource already exists"


class UnauthorizedError(PlayerFeedError):
    status_code = 401
    default_detail = "Unauthorized"


class NotFoundError(PlayerFeedError):
    status_code = 404
    default_detail = "Not found"


class UpstreamError(PlayerFeedError):
    """
    A store or object-store call failed.

    The detail stays generic; the underlying boto error is chained as
    ``__cause__`` so it shows up in logs without reaching the caller.
    """

    status_code = 500
    default_detail = "Upstream service failure"
