"""Exception taxonomy shared by the store backends, the core operations and the HTTP layer."""

from __future__ import annotations


class SnipboxError(Exception):
    """Base class for every error raised by snipbox itself."""

    status_code = 500

    def __init__(self, message: str = "") -> None:
        self.message = message or (self.__doc__ or self.__class__.__name__).strip()
        super().__init__(self.message)


class SnippetNotFoundError(SnipboxError):
    """Snippet not found."""

    status_code = 404


class SnippetValidationError(SnipboxError):
    """Invalid snippet request."""

    status_code = 400


class SnippetConflictError(SnipboxError):
    """A snippet with this filename already exists."""

    status_code = 409


class TokenError(SnipboxError):
    """Stale token: the anti-forgery token is missing, invalid or expired."""

    status_code = 403


class AuthError(SnipboxError):
    """Authentication required."""

    status_code = 401


class StorageError(SnipboxError):
    """The snippet storage could not be read or written."""

    status_code = 500
