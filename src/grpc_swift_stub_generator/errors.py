"""Exception types raised while generating gRPC Swift code."""

from __future__ import annotations

from enum import Enum
from typing import override


class CodeGenErrorCode(Enum):
    """Machine-readable reasons for rejecting a code generation request."""

    NON_UNIQUE_SERVICE_NAME = "nonUniqueServiceName"
    NON_UNIQUE_METHOD_NAME = "nonUniqueMethodName"
    INVALID_KIND = "invalidKind"


class CodeGenError(Exception):
    """Raised when a code generation request fails validation.

    No code is generated for a request that raises this error.

    Attributes:
        code: The reason the request was rejected.
        message: Human-readable explanation naming the offending identifier.
    """

    def __init__(self, code: CodeGenErrorCode, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code.value}: {message}")

    @override
    def __repr__(self) -> str:
        return f"CodeGenError(code={self.code!r}, message={self.message!r})"


class OptionsError(ValueError):
    """Raised when generator options (plugin parameters, mapping files) are invalid."""

    pass
