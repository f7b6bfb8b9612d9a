"""
tests/test_validators.py
Tests for field validation rules and their aggregation.
"""
import pytest

from khqr import validators
from khqr.schemas import IndividualInfo, MerchantInfo
from khqr.services.errors import ErrorCode

from conftest import FUTURE_MS, NOW_MS


class TestFieldRules:
    """Tests for the individual rule functions."""

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_required_rejects_blank(self, value):
        """Missing and whitespace-only values are rejected."""
        assert validators.required(value, "Merchant Name") == "Merchant Name is required"

    def test_required_accepts_value(self):
        assert validators.required("x", "Merchant Name") is None

    def test_max_length(self):
        """Values over the limit name the field and the limit."""
        assert validators.max_length("a" * 16, 15, "Merchant City") == "Merchant City must not exceed 15 characters"
        assert validators.max_length("a" * 15, 15, "Merchant City") is None

    @pytest.mark.parametrize("account_id", ["user@aclb", "john_doe@aclb", "a.b-c@bank"])
    def test_account_id_charset_accepts(self, account_id):
        assert validators.bakong_account_id(account_id) is None

    @pytest.mark.parametrize("account_id", ["user name@aclb", "user#1", "ユーザー@aclb", "user@aclb\n"])
    def test_account_id_charset_rejects(self, account_id):
        assert validators.bakong_account_id(account_id) == "Bakong account ID contains invalid characters"

    def test_category_code(self):
        """Category code must be exactly four digits when present."""
        assert validators.merchant_category_code(None) is None
        assert validators.merchant_category_code("5411") is None
        assert validators.merchant_category_code("541") == "Merchant category code must be 4 digits"
        assert validators.merchant_category_code("54a1") == "Merchant category code must be 4 digits"
        assert validators.merchant_category_code("5411\n") == "Merchant category code must be 4 digits"

    def test_currency(self):
        assert validators.currency("KHR") is None
        assert validators.currency("USD") is None
        assert validators.currency("EUR") == "Currency must be KHR or USD"

    def test_amount_absent_or_zero(self):
        assert validators.amount(None, "USD") is None
        assert validators.amount(0, "KHR") is None

    def test_amount_negative(self):
        assert validators.amount(-1, "KHR") == "Amount cannot be negative"

    def test_khr_amount_must_be_whole(self):
        assert validators.amount(50000, "KHR") is None
        assert validators.amount(50000.0, "KHR") is None
        assert validators.amount(100.5, "KHR") == "KHR amount must be a whole number"

    def test_usd_amount_decimals(self):
        assert validators.amount(25.5, "USD") is None
        assert validators.amount(99.99, "USD") is None
        assert validators.amount(100.555, "USD") == "USD amount cannot have more than 2 decimal places"

    def test_amount_must_be_finite(self):
        assert validators.amount(float("inf"), "USD") == "Amount must be a finite number"

    def test_amount_must_fit_one_element(self):
        """The formatted amount may not exceed 99 characters."""
        assert validators.amount(1e27, "USD") is None
        assert validators.amount(1e95, "USD") is None
        assert validators.amount(1e96, "USD") == "Amount is too large"
        assert validators.amount(1e98, "KHR") is None
        assert validators.amount(1e99, "KHR") == "Amount is too large"

    def test_expiration_only_checked_for_dynamic(self):
        assert validators.expiration_timestamp(None, is_dynamic=False) is None

    def test_expiration_required_for_dynamic(self):
        assert (
            validators.expiration_timestamp(None, is_dynamic=True, now_ms=NOW_MS)
            == "Expiration timestamp is required for dynamic QR"
        )

    def test_expiration_must_be_in_future(self):
        assert (
            validators.expiration_timestamp(NOW_MS, is_dynamic=True, now_ms=NOW_MS)
            == "Expiration timestamp must be in the future"
        )
        assert validators.expiration_timestamp(FUTURE_MS, is_dynamic=True, now_ms=NOW_MS) is None


class TestAggregation:
    """Tests for the record-level aggregators."""

    def test_valid_individual(self):
        info = IndividualInfo(bakong_account_id="user@aclb", merchant_name="Test", merchant_city="Phnom Penh")
        report = validators.validate_individual_info(info, NOW_MS)
        assert report.is_valid
        assert report.errors == []

    def test_collects_every_failure(self):
        """Validation does not stop at the first problem."""
        info = IndividualInfo(
            bakong_account_id="bad id",
            merchant_name="N" * 26,
            merchant_city="Phnom Penh",
            merchant_category_code="12",
        )
        report = validators.validate_individual_info(info, NOW_MS)
        assert not report.is_valid
        assert report.errors == [
            "Bakong account ID contains invalid characters",
            "Merchant Name must not exceed 25 characters",
            "Merchant category code must be 4 digits",
        ]
        assert report.code == ErrorCode.INVALID_FORMAT

    def test_shared_code_is_reported(self):
        """When all failures share a code, that code is the aggregate code."""
        report = validators.validate_individual_info(IndividualInfo(merchant_name="x", merchant_city="y"), NOW_MS)
        assert report.errors == ["Bakong Account ID is required"]
        assert report.code == ErrorCode.REQUIRED_FIELD

    def test_merchant_required_fields(self):
        info = MerchantInfo(bakong_account_id="shop@aclb", merchant_name="Shop", merchant_city="Phnom Penh")
        report = validators.validate_merchant_info(info, NOW_MS)
        assert report.errors == ["Merchant ID is required", "Acquiring Bank is required"]
        assert report.code == ErrorCode.REQUIRED_FIELD

    def test_merchant_field_lengths(self):
        info = MerchantInfo(
            bakong_account_id="shop@aclb",
            merchant_name="Shop",
            merchant_city="Phnom Penh",
            merchant_id="M" * 33,
            acquiring_bank="ACQ",
        )
        report = validators.validate_merchant_info(info, NOW_MS)
        assert report.errors == ["Merchant ID must not exceed 32 characters"]

    def test_purpose_of_transaction_length(self):
        info = IndividualInfo(
            bakong_account_id="user@aclb",
            merchant_name="Test",
            merchant_city="Phnom Penh",
            purpose_of_transaction="p" * 26,
        )
        report = validators.validate_individual_info(info, NOW_MS)
        assert report.errors == ["Purpose of Transaction must not exceed 25 characters"]


class TestQrStringShape:
    """Tests for the structural QR string check."""

    def test_missing(self):
        report = validators.validate_qr_string("")
        assert report.errors == ["QR string is required"]

    def test_too_short_and_no_crc(self):
        report = validators.validate_qr_string("000201")
        assert report.errors == ["QR string is too short", "Invalid CRC format"]

    def test_crc_suffix(self):
        assert validators.validate_qr_string("0002010102116304ABCD").is_valid
        assert validators.validate_qr_string("0002010102116304abcd").is_valid
        assert not validators.validate_qr_string("0002010102116304XYZ1").is_valid
        assert not validators.validate_qr_string("0002010102116304ABCD\n").is_valid

    def test_static_and_dynamic_prefixes(self):
        assert validators.is_static_qr("0002010102116304ABCD")
        assert not validators.is_dynamic_qr("0002010102116304ABCD")
        assert validators.is_dynamic_qr("0002010102126304ABCD")
        assert not validators.is_static_qr(None)
