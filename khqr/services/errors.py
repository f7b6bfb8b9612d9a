"""Shared codec error definitions and the Result container."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ErrorCode(str, enum.Enum):
    REQUIRED_FIELD = "REQUIRED_FIELD"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_ACCOUNT = "INVALID_ACCOUNT"
    INVALID_QR = "INVALID_QR"
    CRC_INVALID = "CRC_INVALID"


@dataclass(slots=True)
class KHQRError(Exception):
    code: ErrorCode
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:  # noqa: D401 override
        return f"{self.code.value}: {self.message}"


def err_invalid_qr(message: str | None = None, details: dict[str, Any] | None = None) -> KHQRError:
    return KHQRError(code=ErrorCode.INVALID_QR, message=message or "Invalid QR code format", details=details)


def err_invalid_format(message: str | None = None, details: dict[str, Any] | None = None) -> KHQRError:
    return KHQRError(code=ErrorCode.INVALID_FORMAT, message=message or "Invalid format", details=details)


def err_crc_invalid(details: dict[str, Any] | None = None) -> KHQRError:
    return KHQRError(code=ErrorCode.CRC_INVALID, message="CRC checksum is invalid", details=details)


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Success/failure container returned by every public entry point."""

    result: T | None = None
    error: KHQRError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.result  # type: ignore[return-value]


def success(value: T) -> Result[T]:
    return Result(result=value)


def failed(
    error_or_message: KHQRError | str,
    details: dict[str, Any] | None = None,
    code: ErrorCode = ErrorCode.INVALID_FORMAT,
) -> Result[Any]:
    if isinstance(error_or_message, KHQRError):
        return Result(error=error_or_message)
    return Result(error=KHQRError(code=code, message=error_or_message, details=details))
