"""KHQR wire-level constants: EMV tag ids, defaults and field limits."""
from __future__ import annotations

import re
from typing import Final

# Top-level tags
PAYLOAD_FORMAT_INDICATOR: Final = "00"
POINT_OF_INITIATION_METHOD: Final = "01"
UNIONPAY_MERCHANT_ACCOUNT: Final = "15"
MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL: Final = "29"
MERCHANT_ACCOUNT_INFORMATION_MERCHANT: Final = "30"
MERCHANT_CATEGORY_CODE: Final = "52"
TRANSACTION_CURRENCY: Final = "53"
TRANSACTION_AMOUNT: Final = "54"
COUNTRY_CODE: Final = "58"
MERCHANT_NAME: Final = "59"
MERCHANT_CITY: Final = "60"
ADDITIONAL_DATA: Final = "62"
CRC: Final = "63"
MERCHANT_INFORMATION_LANGUAGE_TEMPLATE: Final = "64"
TIMESTAMP: Final = "99"

TOP_LEVEL_TAGS: Final = frozenset(
    {
        PAYLOAD_FORMAT_INDICATOR,
        POINT_OF_INITIATION_METHOD,
        UNIONPAY_MERCHANT_ACCOUNT,
        MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL,
        MERCHANT_ACCOUNT_INFORMATION_MERCHANT,
        MERCHANT_CATEGORY_CODE,
        TRANSACTION_CURRENCY,
        TRANSACTION_AMOUNT,
        COUNTRY_CODE,
        MERCHANT_NAME,
        MERCHANT_CITY,
        ADDITIONAL_DATA,
        CRC,
        MERCHANT_INFORMATION_LANGUAGE_TEMPLATE,
        TIMESTAMP,
    }
)

# Sub-tags of 29/30
BAKONG_ACCOUNT_IDENTIFIER: Final = "00"
ACCOUNT_INFORMATION: Final = "01"
ACQUIRING_BANK: Final = "02"

# Sub-tags of 62
BILL_NUMBER: Final = "01"
MOBILE_NUMBER: Final = "02"
STORE_LABEL: Final = "03"
TERMINAL_LABEL: Final = "07"
PURPOSE_OF_TRANSACTION: Final = "08"

# Sub-tags of 64
LANGUAGE_PREFERENCE: Final = "00"
MERCHANT_NAME_ALTERNATE_LANGUAGE: Final = "01"
MERCHANT_CITY_ALTERNATE_LANGUAGE: Final = "02"

# Sub-tags of 99
CREATION_TIMESTAMP: Final = "00"
EXPIRATION_TIMESTAMP: Final = "01"

PAYLOAD_FORMAT_VERSION: Final = "01"
STATIC_QR: Final = "11"
DYNAMIC_QR: Final = "12"
COUNTRY_CODE_KH: Final = "KH"
CRC_PREFIX: Final = f"{CRC}04"

CURRENCY_CODES: Final = {"KHR": "116", "USD": "840"}

MAX_TLV_VALUE_LENGTH: Final = 99

MAX_LENGTHS: Final = {
    "bakong_account_id": 32,
    "merchant_name": 25,
    "merchant_city": 15,
    "merchant_id": 32,
    "acquiring_bank": 32,
    "account_information": 32,
    "bill_number": 25,
    "mobile_number": 25,
    "store_label": 25,
    "terminal_label": 25,
    "purpose_of_transaction": 25,
    "language_preference": 2,
    "merchant_name_alternate_language": 25,
    "merchant_city_alternate_language": 15,
    "upi_merchant_account": MAX_TLV_VALUE_LENGTH,
}

BAKONG_ACCOUNT_ID_PATTERN: Final = re.compile(r"[a-zA-Z0-9._@-]+")
MERCHANT_CATEGORY_CODE_PATTERN: Final = re.compile(r"[0-9]{4}")
CRC_SUFFIX_PATTERN: Final = re.compile(r"6304[A-Fa-f0-9]{4}\Z")
STATIC_QR_PREFIX: Final = f"{PAYLOAD_FORMAT_INDICATOR}02{PAYLOAD_FORMAT_VERSION}{POINT_OF_INITIATION_METHOD}02{STATIC_QR}"
DYNAMIC_QR_PREFIX: Final = f"{PAYLOAD_FORMAT_INDICATOR}02{PAYLOAD_FORMAT_VERSION}{POINT_OF_INITIATION_METHOD}02{DYNAMIC_QR}"
