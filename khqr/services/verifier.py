"""KHQR string verification service."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..crc import crc16_ccitt
from ..validators import validate_qr_string
from .decoder import decode_payload
from .errors import KHQRError, err_invalid_qr

logger = logging.getLogger("khqr.verifier")

CRC_MISMATCH = "CRC checksum mismatch"


@dataclass(slots=True)
class VerifyResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    actual_crc: str | None = None
    expected_crc: str | None = None


def verify_string(qr_string: Any) -> VerifyResult:
    """Check shape, CRC and decodability of a KHQR string.

    Strings that are not KHQR-shaped still produce a report with
    ``is_valid=False``; only missing or non-string input raises.
    """

    if not qr_string or not isinstance(qr_string, str):
        raise err_invalid_qr("QR string must be a non-empty string")

    normalized = qr_string.strip()
    format_validation = validate_qr_string(normalized)
    errors = list(format_validation.errors)

    actual_crc: str | None = None
    expected_crc: str | None = None

    if format_validation.is_valid:
        actual_crc = normalized[-4:].upper()
        expected_crc = crc16_ccitt(normalized[:-4])

        if expected_crc != actual_crc:
            errors.append(CRC_MISMATCH)
        else:
            try:
                decode_payload(normalized)
            except KHQRError as exc:
                errors.append(exc.message)

    if errors:
        logger.debug("khqr string rejected", extra={"errors": errors})
    return VerifyResult(is_valid=not errors, errors=errors, actual_crc=actual_crc, expected_crc=expected_crc)
