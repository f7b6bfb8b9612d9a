"""KHQR generation service."""
from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from ..config import settings
from ..khqr_encoder import EncodedPayload, build_items, encode_payload
from ..schemas import IndividualInfo, MerchantInfo, coerce_account_info
from ..validators import current_timestamp_ms, validate_individual_info, validate_merchant_info
from .errors import KHQRError, err_invalid_format

logger = logging.getLogger("khqr.generator")


def generate_payload(
    info: IndividualInfo | MerchantInfo | Mapping[str, Any],
    *,
    now_ms: int | None = None,
) -> EncodedPayload:
    """Validate an account record and encode it as a KHQR string.

    Raises ``KHQRError`` carrying every validation failure at once.
    """

    try:
        record = coerce_account_info(info)
    except ValidationError as exc:
        messages = [f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()]
        raise err_invalid_format(", ".join(messages), details={"errors": messages}) from exc

    now = now_ms if now_ms is not None else current_timestamp_ms()
    if isinstance(record, MerchantInfo):
        report = validate_merchant_info(record, now)
    else:
        report = validate_individual_info(record, now)

    if not report.is_valid:
        logger.debug(
            "account record rejected",
            extra={"account_type": record.account_type, "errors": report.errors},
        )
        raise KHQRError(code=report.code, message=", ".join(report.errors), details={"errors": report.errors})

    items = build_items(
        record,
        currency=record.currency or settings.default_currency,
        category_code=record.merchant_category_code or settings.default_merchant_category_code,
        now_ms=now,
    )
    encoded = encode_payload(items)
    logger.debug(
        "khqr generated",
        extra={"account_type": record.account_type, "static": record.is_static, "md5": encoded.md5},
    )
    return encoded
