from __future__ import annotations

import struct

from scapy.utils import mac2str, str2mac  # type: ignore

from ouidb.errors import InvalidAddress
from ouidb.models import MAX_U48

MAC_LEN = 6


def to_u48(data: bytes) -> int:
    """Pack six network-order bytes into a 48-bit integer."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidAddress(f"expected bytes, got {type(data).__name__}")
    if len(data) != MAC_LEN:
        raise InvalidAddress(f"MAC address must be {MAC_LEN} bytes, got {len(data)}")
    return int.from_bytes(bytes(data), "big")


def parse_text(text: str) -> int:
    """Parse a colon separated MAC such as ``00:50:c2:00:1f:ff``."""
    try:
        data = mac2str(text.strip())
    except (ValueError, struct.error, AttributeError) as exc:
        raise InvalidAddress(f"could not parse MAC address from str: {text!r}") from exc
    if len(data) != MAC_LEN:
        raise InvalidAddress(f"could not parse MAC address from str: {text!r}")
    return to_u48(data)


def format_u48(value: int) -> str:
    if not 0 <= value <= MAX_U48:
        raise InvalidAddress(f"value {value:#x} is outside the 48-bit range")
    return str2mac(value.to_bytes(MAC_LEN, "big"))
