"""
tests/test_verify.py
Tests for KHQR string verification.
"""
import pytest

from khqr.api import generate_khqr, verify_khqr_string
from khqr.crc import crc16_ccitt
from khqr.services.errors import ErrorCode


@pytest.fixture
def valid_qr(individual):
    return generate_khqr(individual).unwrap().qr


class TestVerifyValid:
    """Well formed strings."""

    def test_generated_string_is_valid(self, valid_qr):
        report = verify_khqr_string(valid_qr).unwrap()
        assert report.is_valid
        assert report.errors == []
        assert report.actual_crc == report.expected_crc == valid_qr[-4:]

    def test_surrounding_whitespace_ignored(self, valid_qr):
        assert verify_khqr_string(f"  {valid_qr}\n").unwrap().is_valid

    def test_lower_case_crc_accepted(self, valid_qr):
        report = verify_khqr_string(valid_qr[:-4] + valid_qr[-4:].lower()).unwrap()
        assert report.is_valid
        assert report.actual_crc == valid_qr[-4:]

    def test_idempotent(self, valid_qr):
        first = verify_khqr_string(valid_qr).unwrap()
        second = verify_khqr_string(valid_qr).unwrap()
        assert (first.is_valid, first.actual_crc, first.expected_crc) == (
            second.is_valid,
            second.actual_crc,
            second.expected_crc,
        )


class TestVerifyInvalid:
    """Strings that fail verification still produce a report."""

    def test_replaced_crc(self, valid_qr):
        tampered = valid_qr[:-4] + "ABCD"
        report = verify_khqr_string(tampered).unwrap()
        assert not report.is_valid
        assert "CRC checksum mismatch" in report.errors
        assert report.actual_crc == "ABCD"
        assert report.expected_crc == valid_qr[-4:]

    @pytest.mark.parametrize("position", [-4, -3, -2, -1])
    def test_any_crc_character_flip(self, valid_qr, position):
        chars = list(valid_qr)
        chars[position] = "0" if chars[position] != "0" else "1"
        report = verify_khqr_string("".join(chars)).unwrap()
        assert not report.is_valid
        assert "CRC checksum mismatch" in report.errors

    def test_not_khqr_shaped(self):
        report = verify_khqr_string("hello").unwrap()
        assert not report.is_valid
        assert report.errors == ["QR string is too short", "Invalid CRC format"]
        assert report.actual_crc is None
        assert report.expected_crc is None

    def test_whitespace_only(self):
        report = verify_khqr_string("   ").unwrap()
        assert report.errors == ["QR string is required"]

    def test_decode_error_folded_into_report(self):
        """A matching CRC over a malformed stream still fails verification."""
        body = "0002015999abc6304"
        qr = body + crc16_ccitt(body)
        report = verify_khqr_string(qr).unwrap()
        assert not report.is_valid
        assert report.errors == ["QR string has invalid TLV format"]


class TestVerifyHardErrors:
    """Missing input is an error, not a report."""

    @pytest.mark.parametrize("value", [None, "", 42])
    def test_missing_input(self, value):
        verified = verify_khqr_string(value)
        assert verified.result is None
        assert verified.error.code == ErrorCode.INVALID_QR
