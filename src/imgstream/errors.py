"""User-facing error types shared across imgstream operations."""

from __future__ import annotations

from typing import Any, Type, TypeVar

E = TypeVar("E", bound="UserError")


class ImageStreamError(Exception):
    """Base exception for imgstream operations."""


class UserError(ImageStreamError):
    """Error meant to be shown to a person, built from a title and description.

    Attributes:
        title: Short headline describing what went wrong.
        description: Longer explanation with the relevant details.
    """

    def __init__(self, title: str, description: str = "") -> None:
        self.title = title
        self.description = description
        message = f"{title}: {description}" if description else title
        super().__init__(message)


class TruncatedInputError(UserError):
    """Raised when a read returns fewer bytes than requested.

    Attributes:
        count: Number of bytes requested.
        offset: Byte offset the read started from.
        bytes_read: Number of bytes actually read.
    """

    def __init__(
        self, title: str, description: str = "", *, count: int, offset: int, bytes_read: int
    ) -> None:
        self.count = count
        self.offset = offset
        self.bytes_read = bytes_read
        super().__init__(title, description)


def create_user_error(
    title: str,
    description: str = "",
    *,
    error_class: Type[E] | None = None,
    **details: Any,
) -> E | UserError:
    """Build a user-facing error from a title and description.

    Args:
        title: Short headline describing what went wrong.
        description: Longer explanation with the relevant details.
        error_class: `UserError` subclass to instantiate; defaults to `UserError`.
        **details: Extra keyword arguments required by `error_class`.

    Returns:
        UserError: The constructed error, ready to be raised.
    """
    if error_class is None:
        return UserError(title, description, **details)
    return error_class(title, description, **details)


__all__ = ["ImageStreamError", "UserError", "TruncatedInputError", "create_user_error"]
