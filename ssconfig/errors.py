"""
Error types raised while loading a configuration document.
"""

import enum
from typing import Optional


class ErrorKind(enum.Enum):
    MISSING_FIELD = "missing field"
    MALFORMED = "malformed"
    INVALID = "invalid"
    JSON_PARSING_ERROR = "json parsing error"
    IO_ERROR = "io error"


class ConfigError(Exception):
    """
    Base error for configuration loading.

    `desc` is a fixed description of the failure, `detail` optionally
    carries the offending value or the underlying error text.
    """

    kind: ErrorKind = ErrorKind.INVALID

    def __init__(self, desc: str, detail: Optional[str] = None):
        super().__init__(desc if detail is None else f"{desc} {detail}")
        self.desc = desc
        self.detail = detail

    def __repr__(self):
        return f"{type(self).__name__}({self.desc!r}, {self.detail!r})"


class MissingFieldError(ConfigError):
    """A required key is absent."""

    kind = ErrorKind.MISSING_FIELD


class MalformedError(ConfigError):
    """A key is present but holds the wrong JSON type."""

    kind = ErrorKind.MALFORMED


class InvalidError(ConfigError):
    """A value has the right type but is not acceptable."""

    kind = ErrorKind.INVALID


class JsonParsingError(ConfigError):
    kind = ErrorKind.JSON_PARSING_ERROR


class ConfigIOError(ConfigError):
    kind = ErrorKind.IO_ERROR
