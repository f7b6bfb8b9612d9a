"""KHQR decoding service."""
from __future__ import annotations

import logging
from typing import Any

from .. import constants as tags
from ..config import settings
from ..crc import crc16_ccitt
from ..schemas import (
    AdditionalData,
    DecodedKHQRData,
    LanguageTemplate,
    MerchantAccountInfo,
    TimestampInfo,
)
from ..tlv import TagParseFailure, iter_tlv, parse_tag
from .errors import err_crc_invalid, err_invalid_format, err_invalid_qr

logger = logging.getLogger("khqr.decoder")

# (parent tag, sub-tag) -> field name. Sub-tag 01 is free-form account
# information under tag 29 and the merchant id under tag 30.
SUBTAG_FIELDS: dict[tuple[str, str], str] = {
    (tags.MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL, tags.BAKONG_ACCOUNT_IDENTIFIER): "bakong_account_id",
    (tags.MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL, tags.ACCOUNT_INFORMATION): "account_information",
    (tags.MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL, tags.ACQUIRING_BANK): "acquiring_bank",
    (tags.MERCHANT_ACCOUNT_INFORMATION_MERCHANT, tags.BAKONG_ACCOUNT_IDENTIFIER): "bakong_account_id",
    (tags.MERCHANT_ACCOUNT_INFORMATION_MERCHANT, tags.ACCOUNT_INFORMATION): "merchant_id",
    (tags.MERCHANT_ACCOUNT_INFORMATION_MERCHANT, tags.ACQUIRING_BANK): "acquiring_bank",
    (tags.ADDITIONAL_DATA, tags.BILL_NUMBER): "bill_number",
    (tags.ADDITIONAL_DATA, tags.MOBILE_NUMBER): "mobile_number",
    (tags.ADDITIONAL_DATA, tags.STORE_LABEL): "store_label",
    (tags.ADDITIONAL_DATA, tags.TERMINAL_LABEL): "terminal_label",
    (tags.ADDITIONAL_DATA, tags.PURPOSE_OF_TRANSACTION): "purpose_of_transaction",
    (tags.MERCHANT_INFORMATION_LANGUAGE_TEMPLATE, tags.LANGUAGE_PREFERENCE): "language_preference",
    (tags.MERCHANT_INFORMATION_LANGUAGE_TEMPLATE, tags.MERCHANT_NAME_ALTERNATE_LANGUAGE): "merchant_name_alternate_language",
    (tags.MERCHANT_INFORMATION_LANGUAGE_TEMPLATE, tags.MERCHANT_CITY_ALTERNATE_LANGUAGE): "merchant_city_alternate_language",
    (tags.TIMESTAMP, tags.CREATION_TIMESTAMP): "creation_timestamp",
    (tags.TIMESTAMP, tags.EXPIRATION_TIMESTAMP): "expiration_timestamp",
}

_INTEGER_FIELDS = frozenset({"creation_timestamp", "expiration_timestamp"})

_SCALAR_FIELDS = {
    tags.PAYLOAD_FORMAT_INDICATOR: "payload_format_indicator",
    tags.POINT_OF_INITIATION_METHOD: "point_of_initiation_method",
    tags.UNIONPAY_MERCHANT_ACCOUNT: "union_pay_merchant",
    tags.MERCHANT_CATEGORY_CODE: "merchant_category_code",
    tags.TRANSACTION_CURRENCY: "transaction_currency",
    tags.TRANSACTION_AMOUNT: "transaction_amount",
    tags.COUNTRY_CODE: "country_code",
    tags.MERCHANT_NAME: "merchant_name",
    tags.MERCHANT_CITY: "merchant_city",
    tags.CRC: "crc",
}


def parse_subtags(value: str, parent_tag: str) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for item in iter_tlv(value):
        name = SUBTAG_FIELDS.get((parent_tag, item.tag))
        if name is None:
            continue
        if name in _INTEGER_FIELDS:
            if not (item.value.isascii() and item.value.isdigit()):
                logger.debug("non-numeric timestamp dropped", extra={"field": name})
                continue
            fields[name] = int(item.value)
        else:
            fields[name] = item.value
    return fields


def split_top_level(qr_string: str) -> dict[str, str]:
    """Collect known top-level tags, stopping at the end or at a repeated tag."""

    collected: dict[str, str] = {}
    offset = 0
    last_tag: str | None = None
    while offset < len(qr_string):
        parsed = parse_tag(qr_string, offset)
        if isinstance(parsed, TagParseFailure):
            remaining = qr_string[offset:]
            raise err_invalid_format(
                "QR string has invalid TLV format",
                details={
                    "cause": parsed.reason,
                    "index": offset,
                    "segment": remaining[: settings.error_segment_length],
                },
            )
        if parsed.tag == last_tag:
            break
        if parsed.tag in tags.TOP_LEVEL_TAGS:
            collected[parsed.tag] = parsed.value
        offset = len(qr_string) - len(parsed.rest)
        last_tag = parsed.tag
    return collected


def decode_payload(qr_string: Any, *, strict: bool = False) -> DecodedKHQRData:
    """Decode a KHQR string into ``DecodedKHQRData``.

    With ``strict`` the trailing CRC must also match the payload.
    """

    if not isinstance(qr_string, str) or not qr_string.strip():
        raise err_invalid_qr("QR string must be a non-empty string")

    collected = split_top_level(qr_string)
    fields: dict[str, Any] = {}
    merged_account: dict[str, Any] = {}

    for tag, value in collected.items():
        if tag in _SCALAR_FIELDS:
            fields[_SCALAR_FIELDS[tag]] = value
        elif tag in (tags.MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL, tags.MERCHANT_ACCOUNT_INFORMATION_MERCHANT):
            account = parse_subtags(value, tag)
            if account.get("bakong_account_id"):
                # a string carrying both 29 and 30 keeps sub-fields from each
                merged_account.update(account)
                fields["merchant_account_info"] = MerchantAccountInfo(**merged_account)
                fields["merchant_type"] = (
                    "merchant" if tag == tags.MERCHANT_ACCOUNT_INFORMATION_MERCHANT else "individual"
                )
        elif tag == tags.ADDITIONAL_DATA:
            fields["additional_data"] = AdditionalData(**parse_subtags(value, tag))
        elif tag == tags.MERCHANT_INFORMATION_LANGUAGE_TEMPLATE:
            fields["language_template"] = LanguageTemplate(**parse_subtags(value, tag))
        elif tag == tags.TIMESTAMP:
            stamps = parse_subtags(value, tag)
            if stamps:
                fields["timestamp"] = TimestampInfo(**stamps)

    if strict:
        actual = qr_string[-4:].upper()
        expected = crc16_ccitt(qr_string[:-4])
        if not tags.CRC_SUFFIX_PATTERN.search(qr_string) or actual != expected:
            raise err_crc_invalid(details={"actual_crc": actual, "expected_crc": expected})

    logger.debug("khqr decoded", extra={"tags": sorted(collected)})
    return DecodedKHQRData(**fields)
