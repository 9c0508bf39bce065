"""Errors raised by the lending services, each tied to an HTTP status."""

from __future__ import annotations


class AppError(Exception):
    """An error with a user-facing message and optional detail lines."""

    status_code = 500

    def __init__(self, message, *args):
        super().__init__(message)
        self.message = message
        self.errors = list(args)

    def __str__(self):
        return self.message

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r}, errors={self.errors!r})"

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.message == other.message and self.errors == other.errors

    def __hash__(self):
        return hash((type(self), self.message, tuple(self.errors)))


class NotFoundError(AppError):
    """The requested record does not exist."""

    status_code = 404


class ForbiddenError(AppError):
    """The caller may not perform the request."""

    status_code = 403


class BadRequestError(AppError):
    """The request is malformed or violates a business rule."""

    status_code = 400


class InternalServerError(AppError):
    """The server failed to complete the request."""

    status_code = 500