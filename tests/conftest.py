"""Shared fixtures for the KHQR test suite."""
import pytest

NOW_MS = 1_760_000_000_000
FUTURE_MS = NOW_MS + 3_600_000


@pytest.fixture
def now_ms():
    """Fixed clock used for generation."""
    return NOW_MS


@pytest.fixture
def future_ms():
    """Expiration one hour after the fixed clock."""
    return FUTURE_MS


@pytest.fixture
def individual():
    """Minimal static individual account."""
    return {
        "bakongAccountID": "user@aclb",
        "merchantName": "Test User",
        "merchantCity": "Phnom Penh",
    }


@pytest.fixture
def merchant():
    """Minimal static merchant account."""
    return {
        "bakongAccountID": "merchant@aclb",
        "merchantName": "Merchant Shop",
        "merchantCity": "Phnom Penh",
        "merchantID": "SHOP001",
        "acquiringBank": "ACQ001",
    }
