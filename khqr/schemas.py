"""Pydantic models for KHQR account records and decoded payloads."""
from __future__ import annotations

from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from .constants import DYNAMIC_QR, STATIC_QR

AccountType = Literal["individual", "merchant"]
CurrencyType = Literal["KHR", "USD"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class BaseAccountInfo(_CamelModel):
    """Fields shared by individual and merchant accounts.

    Required fields default to empty strings so that missing values reach the
    field validators and are reported together with every other problem.
    """

    bakong_account_id: str = Field(default="", alias="bakongAccountID")
    merchant_name: str = ""
    merchant_city: str = ""
    currency: str | None = None
    amount: float | None = None
    merchant_category_code: str | None = None
    bill_number: str | None = None
    mobile_number: str | None = None
    store_label: str | None = None
    terminal_label: str | None = None
    purpose_of_transaction: str | None = None
    language_preference: str | None = None
    merchant_name_alternate_language: str | None = None
    merchant_city_alternate_language: str | None = None
    upi_merchant_account: str | None = None
    # epoch milliseconds
    expiration_timestamp: int | None = None

    @property
    def is_static(self) -> bool:
        return not self.amount

    def additional_data(self) -> dict[str, str | None]:
        return {
            "bill_number": self.bill_number,
            "mobile_number": self.mobile_number,
            "store_label": self.store_label,
            "terminal_label": self.terminal_label,
            "purpose_of_transaction": self.purpose_of_transaction,
        }

    def language_template(self) -> dict[str, str | None]:
        return {
            "language_preference": self.language_preference,
            "merchant_name_alternate_language": self.merchant_name_alternate_language,
            "merchant_city_alternate_language": self.merchant_city_alternate_language,
        }


class IndividualInfo(BaseAccountInfo):
    account_type: Literal["individual"] = "individual"
    account_information: str | None = None
    acquiring_bank: str | None = None


class MerchantInfo(BaseAccountInfo):
    account_type: Literal["merchant"] = "merchant"
    merchant_id: str = Field(default="", alias="merchantID")
    acquiring_bank: str = ""


AccountInfo = Annotated[Union[IndividualInfo, MerchantInfo], Field(discriminator="account_type")]

_account_adapter: TypeAdapter[IndividualInfo | MerchantInfo] = TypeAdapter(AccountInfo)


def coerce_account_info(data: IndividualInfo | MerchantInfo | Mapping[str, Any]) -> IndividualInfo | MerchantInfo:
    """Build an account record from a model or a plain mapping.

    Mappings without an explicit ``accountType`` are classified as merchant
    accounts when they carry a string merchant id.
    """

    if isinstance(data, (IndividualInfo, MerchantInfo)):
        return data

    payload = dict(data)
    if "account_type" in payload:
        payload.setdefault("accountType", payload.pop("account_type"))
    if "accountType" not in payload:
        merchant_id = payload.get("merchantID", payload.get("merchant_id"))
        payload["accountType"] = "merchant" if isinstance(merchant_id, str) else "individual"
    return _account_adapter.validate_python(payload)


class MerchantAccountInfo(_CamelModel):
    model_config = ConfigDict(frozen=True)

    bakong_account_id: str = Field(alias="bakongAccountID")
    merchant_id: str | None = Field(default=None, alias="merchantID")
    acquiring_bank: str | None = None
    account_information: str | None = None


class AdditionalData(_CamelModel):
    model_config = ConfigDict(frozen=True)

    bill_number: str | None = None
    mobile_number: str | None = None
    store_label: str | None = None
    terminal_label: str | None = None
    purpose_of_transaction: str | None = None


class LanguageTemplate(_CamelModel):
    model_config = ConfigDict(frozen=True)

    language_preference: str | None = None
    merchant_name_alternate_language: str | None = None
    merchant_city_alternate_language: str | None = None


class TimestampInfo(_CamelModel):
    model_config = ConfigDict(frozen=True)

    creation_timestamp: int | None = None
    expiration_timestamp: int | None = None


class DecodedKHQRData(_CamelModel):
    """Structured view of a decoded KHQR string."""

    model_config = ConfigDict(frozen=True)

    payload_format_indicator: str | None = None
    point_of_initiation_method: str | None = None
    merchant_type: AccountType | None = None
    merchant_account_info: MerchantAccountInfo | None = None
    union_pay_merchant: str | None = None
    merchant_category_code: str | None = None
    transaction_currency: str | None = None
    transaction_amount: str | None = None
    country_code: str | None = None
    merchant_name: str | None = None
    merchant_city: str | None = None
    additional_data: AdditionalData | None = None
    language_template: LanguageTemplate | None = None
    timestamp: TimestampInfo | None = None
    crc: str | None = None

    @property
    def is_static(self) -> bool:
        return self.point_of_initiation_method == STATIC_QR

    @property
    def is_dynamic(self) -> bool:
        return self.point_of_initiation_method == DYNAMIC_QR
