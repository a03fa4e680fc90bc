"""Exceptions that data fetchers raise to produce classified GraphQL errors.

Each class fixes the GraphQL error classification its errors carry. When one
escapes a data fetcher, ``AppExceptionResolver`` turns it into a field error:
``detail`` becomes the message, ``extra`` the error extensions, and the
``classification`` extension comes from the class.

Requests that never reach GraphQL execution, such as the metrics endpoint or
the GraphiQL page, render the same exceptions as RFC 7807 problem details
through ``app.exception_handlers``, using ``status_code``, ``type`` and
``title``.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, ClassVar


class AppException(Exception):
    """Base of the classified exceptions; classified as ``INTERNAL_ERROR``.

    Subclasses set ``classification``, ``status_code`` and the problem
    ``type``; an instance carries the message and extensions of one error.

    Example:
        raise NotFoundException(
            "Project 'spring-data' not found", extra={"slug": "spring-data"}
        )

    resolves to::

        {"message": "Project 'spring-data' not found", "path": ["project"],
         "extensions": {"slug": "spring-data", "classification": "NOT_FOUND"}}
    """

    classification: ClassVar[str] = "INTERNAL_ERROR"
    default_status: ClassVar[int] = 500
    default_type: ClassVar[str] = "about:blank"

    def __init__(
        self,
        detail: str,
        *,
        status_code: int | None = None,
        type: str | None = None,
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.detail = detail
        self.status_code = status_code or self.default_status
        self.type = type or self.default_type
        self.title = title or _phrase(self.status_code)
        self.instance = instance
        self.extra = dict(extra or {})
        super().__init__(detail)


def _phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


class NotFoundException(AppException):
    """A field's target does not exist; classified as ``NOT_FOUND``."""

    classification = "NOT_FOUND"
    default_status = 404
    default_type = "not-found"


class BadRequestException(AppException):
    """Arguments a fetcher cannot act on; classified as ``BAD_REQUEST``."""

    classification = "BAD_REQUEST"
    default_status = 400
    default_type = "bad-request"


class ValidationException(BadRequestException):
    """An argument value failed validation.

    Still a ``BAD_REQUEST`` error in GraphQL; a problem detail reports 422.

    Example:
        raise ValidationException(
            "Version must follow semver", extra={"field": "version", "value": "v1"}
        )
    """

    default_status = 422
    default_type = "validation-error"


class UnauthorizedException(AppException):
    """The caller is not authenticated; classified as ``UNAUTHORIZED``."""

    classification = "UNAUTHORIZED"
    default_status = 401
    default_type = "unauthorized"


class ForbiddenException(AppException):
    """The caller may not read the field; classified as ``FORBIDDEN``.

    Example:
        raise ForbiddenException(
            "Releases are visible to maintainers only",
            extra={"required_role": "maintainer"},
        )
    """

    classification = "FORBIDDEN"
    default_status = 403
    default_type = "forbidden"


class InternalServerException(AppException):
    """A backing service failed; classified as ``INTERNAL_ERROR``."""

    default_type = "internal-error"
