"""Public KHQR entry points.

Every function returns a ``Result``: codec errors and unexpected exceptions
are logged and converted at this boundary, so callers never see a raw
exception.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping, TypeVar

from .khqr_encoder import EncodedPayload
from .monitoring import observe_operation, record_codec_error
from .schemas import DecodedKHQRData, IndividualInfo, MerchantInfo
from .services.decoder import decode_payload
from .services.errors import ErrorCode, KHQRError, Result, failed, success
from .services.generator import generate_payload
from .services.verifier import VerifyResult, verify_string

T = TypeVar("T")

logger = logging.getLogger("khqr.api")

_UNEXPECTED_FAILURES = {
    "generate": ("Generation failed", ErrorCode.INVALID_FORMAT),
    "decode": ("Decoding failed", ErrorCode.INVALID_FORMAT),
    "verify": ("KHQR verification failed", ErrorCode.INVALID_QR),
}


def _run(operation: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> Result[T]:
    start = time.perf_counter()
    try:
        value = func(*args, **kwargs)
    except KHQRError as exc:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.warning(
            "codec error",
            extra={"code": exc.code.value, "operation": operation, "duration_ms": round(duration_ms, 3)},
        )
        record_codec_error(exc.code.value, operation)
        observe_operation(operation, "error", duration_ms)
        return failed(exc)
    except Exception as exc:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.exception(
            "unhandled codec exception",
            extra={"operation": operation, "duration_ms": round(duration_ms, 3)},
        )
        prefix, code = _UNEXPECTED_FAILURES[operation]
        record_codec_error(code.value, operation)
        observe_operation(operation, "error", duration_ms)
        return failed(f"{prefix}: {exc}", details={"cause": str(exc)}, code=code)

    observe_operation(operation, "success", (time.perf_counter() - start) * 1000)
    return success(value)


def generate_khqr(
    info: IndividualInfo | MerchantInfo | Mapping[str, Any],
    *,
    now_ms: int | None = None,
) -> Result[EncodedPayload]:
    """Generate a KHQR string and its MD5 content hash."""

    return _run("generate", generate_payload, info, now_ms=now_ms)


def decode_khqr(qr_string: str, *, strict: bool = False) -> Result[DecodedKHQRData]:
    """Decode a KHQR string into structured data."""

    return _run("decode", decode_payload, qr_string, strict=strict)


def verify_khqr_string(qr_string: str) -> Result[VerifyResult]:
    """Report whether a KHQR string is well formed and carries a matching CRC."""

    return _run("verify", verify_string, qr_string)
