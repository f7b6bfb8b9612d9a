"""KHQR tag builders and ordered payload assembly."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from hashlib import md5
from typing import Iterable, Iterator

from . import constants as tags
from .crc import checksum
from .schemas import BaseAccountInfo, IndividualInfo, MerchantInfo
from .tlv import TLVItem, build_tlv


@dataclass(frozen=True)
class EncodedPayload:
    qr: str
    md5: str

    @property
    def crc(self) -> str:
        return self.qr[-4:]


def _composite(tag: str, subitems: Iterable[TLVItem]) -> TLVItem | None:
    value = build_tlv(subitems)
    return TLVItem(tag=tag, value=value) if value else None


def _present(pairs: Iterable[tuple[str, str | None]]) -> Iterator[TLVItem]:
    for subtag, value in pairs:
        if value:
            yield TLVItem(tag=subtag, value=value)


def payload_format_indicator() -> TLVItem:
    return TLVItem(tag=tags.PAYLOAD_FORMAT_INDICATOR, value=tags.PAYLOAD_FORMAT_VERSION)


def point_of_initiation_method(is_static: bool) -> TLVItem:
    return TLVItem(tag=tags.POINT_OF_INITIATION_METHOD, value=tags.STATIC_QR if is_static else tags.DYNAMIC_QR)


def unionpay_merchant_account(account: str) -> TLVItem:
    return TLVItem(tag=tags.UNIONPAY_MERCHANT_ACCOUNT, value=account)


def merchant_account_information(info: IndividualInfo | MerchantInfo) -> TLVItem:
    """Tag 29 for individual accounts, tag 30 for merchant accounts."""

    if isinstance(info, MerchantInfo):
        tag = tags.MERCHANT_ACCOUNT_INFORMATION_MERCHANT
        account_information = info.merchant_id
    else:
        tag = tags.MERCHANT_ACCOUNT_INFORMATION_INDIVIDUAL
        account_information = info.account_information

    subitems = [TLVItem(tag=tags.BAKONG_ACCOUNT_IDENTIFIER, value=info.bakong_account_id)]
    subitems.extend(
        _present(
            [
                (tags.ACCOUNT_INFORMATION, account_information),
                (tags.ACQUIRING_BANK, info.acquiring_bank),
            ]
        )
    )
    return TLVItem(tag=tag, value=build_tlv(subitems))


def merchant_category_code(code: str) -> TLVItem:
    return TLVItem(tag=tags.MERCHANT_CATEGORY_CODE, value=code)


def transaction_currency(currency: str) -> TLVItem:
    return TLVItem(tag=tags.TRANSACTION_CURRENCY, value=tags.CURRENCY_CODES[currency])


def format_amount(amount: float, currency: str) -> str:
    """KHR amounts are whole numbers, USD amounts carry exactly two decimals."""

    exact = Decimal(str(amount))
    quantum = Decimal("1") if currency == "KHR" else Decimal("0.01")
    with localcontext() as ctx:
        # quantize needs every integer digit plus the cents
        ctx.prec = max(ctx.prec, exact.adjusted() + 3)
        return format(exact.quantize(quantum, rounding=ROUND_HALF_UP), "f")


def transaction_amount(amount: float, currency: str) -> TLVItem:
    return TLVItem(tag=tags.TRANSACTION_AMOUNT, value=format_amount(amount, currency))


def country_code() -> TLVItem:
    return TLVItem(tag=tags.COUNTRY_CODE, value=tags.COUNTRY_CODE_KH)


def merchant_name(name: str) -> TLVItem:
    return TLVItem(tag=tags.MERCHANT_NAME, value=name)


def merchant_city(city: str) -> TLVItem:
    return TLVItem(tag=tags.MERCHANT_CITY, value=city)


def additional_data(info: BaseAccountInfo) -> TLVItem | None:
    fields = info.additional_data()
    return _composite(
        tags.ADDITIONAL_DATA,
        _present(
            [
                (tags.BILL_NUMBER, fields["bill_number"]),
                (tags.MOBILE_NUMBER, fields["mobile_number"]),
                (tags.STORE_LABEL, fields["store_label"]),
                (tags.TERMINAL_LABEL, fields["terminal_label"]),
                (tags.PURPOSE_OF_TRANSACTION, fields["purpose_of_transaction"]),
            ]
        ),
    )


def language_template(info: BaseAccountInfo) -> TLVItem | None:
    fields = info.language_template()
    return _composite(
        tags.MERCHANT_INFORMATION_LANGUAGE_TEMPLATE,
        _present(
            [
                (tags.LANGUAGE_PREFERENCE, fields["language_preference"]),
                (tags.MERCHANT_NAME_ALTERNATE_LANGUAGE, fields["merchant_name_alternate_language"]),
                (tags.MERCHANT_CITY_ALTERNATE_LANGUAGE, fields["merchant_city_alternate_language"]),
            ]
        ),
    )


def timestamp(creation_ms: int, expiration_ms: int) -> TLVItem:
    value = build_tlv(
        [
            TLVItem(tag=tags.CREATION_TIMESTAMP, value=str(creation_ms)),
            TLVItem(tag=tags.EXPIRATION_TIMESTAMP, value=str(expiration_ms)),
        ]
    )
    return TLVItem(tag=tags.TIMESTAMP, value=value)


def build_items(
    info: IndividualInfo | MerchantInfo,
    *,
    currency: str,
    category_code: str,
    now_ms: int,
) -> list[TLVItem]:
    """Return the elements of a KHQR payload in wire order, without the CRC."""

    is_static = info.is_static
    items: list[TLVItem | None] = [
        payload_format_indicator(),
        point_of_initiation_method(is_static),
        unionpay_merchant_account(info.upi_merchant_account) if info.upi_merchant_account else None,
        merchant_account_information(info),
        merchant_category_code(category_code),
        transaction_currency(currency),
        None if is_static else transaction_amount(info.amount, currency),  # type: ignore[arg-type]
        country_code(),
        merchant_name(info.merchant_name),
        merchant_city(info.merchant_city),
        additional_data(info),
        language_template(info),
        None if is_static or not info.expiration_timestamp else timestamp(now_ms, info.expiration_timestamp),
    ]
    return [item for item in items if item is not None]


def encode_payload(items: Iterable[TLVItem]) -> EncodedPayload:
    """Append the CRC element and derive the MD5 content hash."""

    payload_no_crc = build_tlv(items)
    crc = checksum(payload_no_crc)
    final_payload = f"{payload_no_crc}{tags.CRC_PREFIX}{crc}"
    return EncodedPayload(qr=final_payload, md5=md5(final_payload.encode("utf-8")).hexdigest())
