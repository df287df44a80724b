from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

DEFAULT_STATUS = 500
DEFAULT_MESSAGE = "Oh No, Something Went Wrong!"
PAGE_NOT_FOUND = "Page Not Found!"


class ErrorKind(str, Enum):
    CLIENT = "client_error"
    NOT_FOUND = "not_found"
    AUTH_DENIED = "auth_denied"  # logged, then answered with flash + redirect
    INTERNAL = "internal"


@dataclass
class AppError(Exception):
    """Raise to render the uniform error page.

    ``message`` and ``status_code`` may be left empty; the terminal handler
    fills in the defaults.
    """

    kind: ErrorKind
    message: Optional[str] = None
    status_code: Optional[int] = None

    def __str__(self) -> str:
        return self.message or self.kind.value

    @classmethod
    def client(cls, message: str) -> "AppError":
        return cls(ErrorKind.CLIENT, message, 400)

    @classmethod
    def not_found(cls, message: str = PAGE_NOT_FOUND) -> "AppError":
        return cls(ErrorKind.NOT_FOUND, message, 404)

    @classmethod
    def internal(cls, message: Optional[str] = None) -> "AppError":
        return cls(ErrorKind.INTERNAL, message)

    def normalized(self) -> "AppError":
        """Copy with the default status and message applied."""
        return AppError(
            kind=self.kind,
            message=self.message or DEFAULT_MESSAGE,
            status_code=self.status_code or DEFAULT_STATUS,
        )
