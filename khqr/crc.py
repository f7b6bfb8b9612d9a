"""CRC16-CCITT (FALSE variant) used by the KHQR tag 63."""
from __future__ import annotations

from .constants import CRC_PREFIX

CRC16_POLY = 0x1021
CRC16_INIT = 0xFFFF


def crc16_ccitt(data: str) -> str:
    """Compute CRC16-CCITT (0x1021, init 0xFFFF) over the UTF-8 bytes of ``data``."""

    checksum = CRC16_INIT
    for ch in data.encode("utf-8"):
        checksum ^= ch << 8
        for _ in range(8):
            if checksum & 0x8000:
                checksum = (checksum << 1) ^ CRC16_POLY
            else:
                checksum <<= 1
            checksum &= 0xFFFF
    return f"{checksum:04X}"


def checksum(payload: str) -> str:
    """Return the tag 63 value for a payload that does not yet carry ``6304``."""

    return crc16_ccitt(f"{payload}{CRC_PREFIX}")
