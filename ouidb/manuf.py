"""Reader for the Wireshark ``manuf`` vendor registry.

Data lines hold two to four tab separated fields::

    00:50:C2                Ieee            IEEE Registration Authority
    00:50:C2:00:10:00/36    Superior        Superior Electronics Corp   # comment

The first field is a hex prefix with an optional ``/MASK`` (default 24),
followed by the short name, an optional long name and an optional comment.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator, Optional, Union

from ouidb.errors import DatabaseFileError, InvalidBlock, OuiError, ParseError
from ouidb.models import (
    DEFAULT_PREFIX_LEN,
    MAX_PREFIX_LEN,
    MAX_U48,
    MIN_PREFIX_LEN,
    AddressBlock,
    ParsedRecord,
    VendorEntry,
)

_FIELD_SEP = re.compile(r"\t+")
_HEX_SEPARATORS = str.maketrans("", "", ":-.")
_HEX_DIGITS = re.compile(r"[0-9A-Fa-f]+")
_DECIMAL = re.compile(r"[0-9]+")


def _clean_field(field: str) -> str:
    return field.replace("#", "").strip()


def _parse_mask(text: str) -> int:
    if not _DECIMAL.fullmatch(text):
        raise ParseError(f"could not parse mask: {text!r}")
    mask = int(text)
    if not MIN_PREFIX_LEN <= mask <= MAX_PREFIX_LEN:
        raise ParseError(f"incorrect mask value: {mask}")
    return mask


def _parse_prefix(text: str) -> int:
    digits = text.translate(_HEX_SEPARATORS)
    if not _HEX_DIGITS.fullmatch(digits):
        raise ParseError(f"could not parse stripped OUI: {digits!r}")
    return int(digits, 16)


def parse_line(line: str) -> Optional[ParsedRecord]:
    """Parse one manuf line, returning None for blank and comment lines."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    fields = [_clean_field(field) for field in _FIELD_SEP.split(stripped)]
    fields = [field for field in fields if field]
    if not 2 <= len(fields) <= 4:
        raise ParseError(f"unexpected number of fields extracted: {fields!r}")

    prefix_and_mask = fields[0].split("/")
    if len(prefix_and_mask) == 1:
        mask = DEFAULT_PREFIX_LEN
    elif len(prefix_and_mask) == 2:
        mask = _parse_mask(prefix_and_mask[1].strip())
    else:
        raise ParseError(f"invalid number of mask separators: {fields[0]!r}")

    return ParsedRecord(
        prefix=_parse_prefix(prefix_and_mask[0].strip()),
        mask=mask,
        short_name=fields[1],
        long_name=fields[2] if len(fields) >= 3 else None,
        comment=fields[3] if len(fields) == 4 else None,
    )


def build_block(record: ParsedRecord) -> AddressBlock:
    """Turn a parsed record into the closed range of addresses it covers.

    /24 prefixes are written as three octets in the file and are shifted
    into the top of the 48-bit space; every other mask is written out in
    full and used as is.
    """
    mask = record.mask
    if mask == DEFAULT_PREFIX_LEN:
        lo = record.prefix << 24
    else:
        lo = record.prefix
    if lo > MAX_U48:
        raise InvalidBlock(f"block start {lo:#x} exceeds 48 bits (/{mask})")
    host_bits = MAX_U48 >> mask
    if lo & host_bits:
        raise InvalidBlock(f"block start {lo:#x} has bits set below /{mask}")
    return AddressBlock(lo=lo, hi=lo | host_bits, prefix_len=mask)


def iter_manuf(path: Union[str, Path]) -> Iterator[tuple[AddressBlock, VendorEntry]]:
    """Yield ``(block, entry)`` pairs from a manuf file in file order.

    The first malformed line stops iteration with a ParseError or
    InvalidBlock naming the file, line number and line text.
    """
    try:
        handle = open(path, "r", encoding="utf-8")
    except OSError as exc:
        raise DatabaseFileError(f"could not open database file: {path}") from exc

    with handle:
        lineno = 0
        while True:
            try:
                line = handle.readline()
            except (OSError, UnicodeDecodeError) as exc:
                raise DatabaseFileError(
                    f"could not read data line {lineno + 1} of {path}"
                ) from exc
            if not line:
                break
            lineno += 1
            try:
                record = parse_line(line)
                if record is None:
                    continue
                block = build_block(record)
            except OuiError as exc:
                raise type(exc)(f"{path}:{lineno}: {exc} (line: {line.rstrip()!r})") from exc
            yield block, record.to_entry()
