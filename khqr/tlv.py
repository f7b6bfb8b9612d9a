"""Utility helpers to build and parse EMV-style TLV payloads."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from .constants import MAX_TLV_VALUE_LENGTH


class TLVLengthError(ValueError):
    """Raised when a value does not fit the two-digit length field."""


@dataclass(frozen=True)
class TLVItem:
    tag: str
    value: str

    def serialize(self) -> str:
        if len(self.value) > MAX_TLV_VALUE_LENGTH:
            raise TLVLengthError(
                f"Value for tag {self.tag} is {len(self.value)} characters, limit is {MAX_TLV_VALUE_LENGTH}"
            )
        length = f"{len(self.value):02d}"
        return f"{self.tag}{length}{self.value}"


@dataclass(frozen=True)
class ParsedTag:
    tag: str
    length: int
    value: str
    rest: str


@dataclass(frozen=True)
class TagParseFailure:
    reason: str
    offset: int


def format_tag(tag: str, value: str) -> str:
    return TLVItem(tag=tag, value=value).serialize()


def build_tlv(items: Iterable[TLVItem]) -> str:
    """Serialize iterable of TLV items into EMV string."""

    return "".join(item.serialize() for item in items)


def parse_tag(data: str, offset: int = 0) -> ParsedTag | TagParseFailure:
    """Parse the element starting at ``offset``.

    Malformed input is reported as a ``TagParseFailure`` instead of raising,
    so callers can branch on the returned type.
    """

    if len(data) < offset + 4:
        return TagParseFailure(reason="Invalid tag format: insufficient length", offset=offset)

    tag = data[offset : offset + 2]
    raw_length = data[offset + 2 : offset + 4]
    if not (raw_length.isascii() and raw_length.isdigit()):
        return TagParseFailure(reason=f"Invalid length field {raw_length!r} for tag {tag!r}", offset=offset)

    length = int(raw_length)
    value_start = offset + 4
    value_end = value_start + length
    if value_end > len(data):
        return TagParseFailure(reason=f"Invalid TLV length: tag {tag!r} exceeds payload", offset=offset)

    return ParsedTag(tag=tag, length=length, value=data[value_start:value_end], rest=data[value_end:])


def iter_tlv(payload: str) -> Iterator[ParsedTag]:
    """Yield elements of a composite value, stopping at the first malformed one."""

    remaining = payload
    while remaining:
        parsed = parse_tag(remaining)
        if isinstance(parsed, TagParseFailure):
            return
        yield parsed
        remaining = parsed.rest
