"""Field validation rules for KHQR records and strings.

Each rule returns ``None`` when the value is acceptable and an error message
otherwise. The aggregators run every applicable rule and collect all failures.
"""
from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from .config import settings
from .constants import (
    BAKONG_ACCOUNT_ID_PATTERN,
    CRC_SUFFIX_PATTERN,
    DYNAMIC_QR_PREFIX,
    MAX_LENGTHS,
    MAX_TLV_VALUE_LENGTH,
    MERCHANT_CATEGORY_CODE_PATTERN,
    STATIC_QR_PREFIX,
)
from .schemas import BaseAccountInfo, IndividualInfo, MerchantInfo
from .services.errors import ErrorCode

_LABELS = {
    "bakong_account_id": "Bakong Account ID",
    "merchant_name": "Merchant Name",
    "merchant_city": "Merchant City",
    "merchant_id": "Merchant ID",
    "acquiring_bank": "Acquiring Bank",
    "account_information": "Account Information",
    "bill_number": "Bill Number",
    "mobile_number": "Mobile Number",
    "store_label": "Store Label",
    "terminal_label": "Terminal Label",
    "purpose_of_transaction": "Purpose of Transaction",
    "language_preference": "Language Preference",
    "merchant_name_alternate_language": "Merchant Name Alternate Language",
    "merchant_city_alternate_language": "Merchant City Alternate Language",
    "upi_merchant_account": "UPI Merchant Account",
}

_SHARED_LENGTH_FIELDS = (
    "bakong_account_id",
    "merchant_name",
    "merchant_city",
    "bill_number",
    "mobile_number",
    "store_label",
    "terminal_label",
    "purpose_of_transaction",
    "language_preference",
    "merchant_name_alternate_language",
    "merchant_city_alternate_language",
    "upi_merchant_account",
)


@dataclass(slots=True)
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    codes: list[ErrorCode] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def code(self) -> ErrorCode:
        """Error code shared by all collected errors, else ``INVALID_FORMAT``."""

        distinct = set(self.codes)
        if len(distinct) == 1:
            return distinct.pop()
        return ErrorCode.INVALID_FORMAT

    def add(self, message: str | None, code: ErrorCode) -> None:
        if message:
            self.errors.append(message)
            self.codes.append(code)


def current_timestamp_ms() -> int:
    return int(time.time() * 1000)


def required(value: str | None, field_name: str) -> str | None:
    if not value or not value.strip():
        return f"{field_name} is required"
    return None


def max_length(value: str | None, max_len: int, field_name: str) -> str | None:
    if value and len(value) > max_len:
        return f"{field_name} must not exceed {max_len} characters"
    return None


def amount(value: float | None, currency: str) -> str | None:
    if value is None or value == 0:
        return None
    if not math.isfinite(value):
        return "Amount must be a finite number"
    if value < 0:
        return "Amount cannot be negative"

    try:
        exact = Decimal(str(value))
    except InvalidOperation:
        return "Amount must be a number"

    # integer digits, plus the point and cents for USD, must fit one element
    if exact.adjusted() + 1 + (3 if currency == "USD" else 0) > MAX_TLV_VALUE_LENGTH:
        return "Amount is too large"

    if currency == "KHR":
        if exact != exact.to_integral_value():
            return "KHR amount must be a whole number"
    elif currency == "USD":
        exponent = exact.normalize().as_tuple().exponent
        if isinstance(exponent, int) and exponent < -2:
            return "USD amount cannot have more than 2 decimal places"
    return None


def bakong_account_id(account_id: str | None) -> str | None:
    # emptiness and length are reported by ``required`` and ``max_length``
    if not account_id:
        return None
    if not BAKONG_ACCOUNT_ID_PATTERN.fullmatch(account_id):
        return "Bakong account ID contains invalid characters"
    return None


def merchant_category_code(code: str | None) -> str | None:
    if code and not MERCHANT_CATEGORY_CODE_PATTERN.fullmatch(code):
        return "Merchant category code must be 4 digits"
    return None


def currency(value: str) -> str | None:
    if value not in ("KHR", "USD"):
        return "Currency must be KHR or USD"
    return None


def expiration_timestamp(timestamp: int | None, is_dynamic: bool, now_ms: int | None = None) -> str | None:
    if not is_dynamic:
        return None
    if not timestamp:
        return "Expiration timestamp is required for dynamic QR"
    if timestamp <= (now_ms if now_ms is not None else current_timestamp_ms()):
        return "Expiration timestamp must be in the future"
    return None


def _validate_shared(info: BaseAccountInfo, report: ValidationResult, now_ms: int | None) -> None:
    report.add(required(info.bakong_account_id, _LABELS["bakong_account_id"]), ErrorCode.REQUIRED_FIELD)
    report.add(required(info.merchant_name, _LABELS["merchant_name"]), ErrorCode.REQUIRED_FIELD)
    report.add(required(info.merchant_city, _LABELS["merchant_city"]), ErrorCode.REQUIRED_FIELD)

    report.add(bakong_account_id(info.bakong_account_id), ErrorCode.INVALID_ACCOUNT)

    for name in _SHARED_LENGTH_FIELDS:
        report.add(max_length(getattr(info, name), MAX_LENGTHS[name], _LABELS[name]), ErrorCode.INVALID_FORMAT)

    resolved_currency = info.currency or settings.default_currency
    report.add(currency(resolved_currency), ErrorCode.INVALID_FORMAT)
    report.add(amount(info.amount, resolved_currency), ErrorCode.INVALID_AMOUNT)
    report.add(merchant_category_code(info.merchant_category_code), ErrorCode.INVALID_FORMAT)

    timestamp_error = expiration_timestamp(info.expiration_timestamp, not info.is_static, now_ms)
    code = ErrorCode.INVALID_FORMAT if info.expiration_timestamp else ErrorCode.REQUIRED_FIELD
    report.add(timestamp_error, code)


def validate_individual_info(info: IndividualInfo, now_ms: int | None = None) -> ValidationResult:
    report = ValidationResult()
    _validate_shared(info, report, now_ms)
    for name in ("account_information", "acquiring_bank"):
        report.add(max_length(getattr(info, name), MAX_LENGTHS[name], _LABELS[name]), ErrorCode.INVALID_FORMAT)
    return report


def validate_merchant_info(info: MerchantInfo, now_ms: int | None = None) -> ValidationResult:
    report = ValidationResult()
    _validate_shared(info, report, now_ms)
    report.add(required(info.merchant_id, _LABELS["merchant_id"]), ErrorCode.REQUIRED_FIELD)
    report.add(required(info.acquiring_bank, _LABELS["acquiring_bank"]), ErrorCode.REQUIRED_FIELD)
    for name in ("merchant_id", "acquiring_bank"):
        report.add(max_length(getattr(info, name), MAX_LENGTHS[name], _LABELS[name]), ErrorCode.INVALID_FORMAT)
    return report


def validate_qr_string(qr_string: str | None) -> ValidationResult:
    """Basic structural check: minimum length and a trailing ``6304`` CRC tag."""

    report = ValidationResult()
    if not qr_string:
        report.add("QR string is required", ErrorCode.INVALID_QR)
        return report

    if len(qr_string) < settings.min_qr_length:
        report.add("QR string is too short", ErrorCode.INVALID_FORMAT)
    if not CRC_SUFFIX_PATTERN.search(qr_string):
        report.add("Invalid CRC format", ErrorCode.INVALID_FORMAT)
    return report


def is_static_qr(qr_string: str | None) -> bool:
    return bool(qr_string) and qr_string.startswith(STATIC_QR_PREFIX)


def is_dynamic_qr(qr_string: str | None) -> bool:
    return bool(qr_string) and qr_string.startswith(DYNAMIC_QR_PREFIX)
