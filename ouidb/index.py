"""Ordered range index answering longest-match vendor lookups.

Keys are ``(lo, hi)`` address intervals kept in ascending order.  Every
interval is an aligned prefix block, so for a query ``q`` and a prefix
length ``p`` the only block that can contain ``q`` starts at ``q`` with its
low ``48 - p`` bits cleared.  Lookup probes one key per prefix length
present in the index rather than scanning all keys.
"""
from __future__ import annotations

import struct
from types import MappingProxyType
from typing import Iterable, Iterator, Optional

from pydantic import ValidationError

from ouidb.errors import DecodeError, IndexInconsistent, InvalidAddress, InvalidBlock
from ouidb.log import TRACE, get_logger
from ouidb.models import MAX_U48, AddressBlock, VendorEntry

logger = get_logger("index")

MAGIC = b"OUIX"
FORMAT_VERSION = 1
MAX_MATCHES = 2

_HEADER = struct.Struct("<4sBQ")
_KEY = struct.Struct("<QQ")
_LENGTH = struct.Struct("<I")
_TAG = struct.Struct("<B")


class OuiIndex:
    """Sealed mapping from address blocks to vendor entries.

    Instances are built once through :meth:`build` or :meth:`from_export`
    and expose no mutation afterwards.
    """

    __slots__ = ("_entries", "_blocks", "_prefix_lens")

    def __init__(self, entries: dict[AddressBlock, VendorEntry]) -> None:
        blocks = sorted(entries)
        self._blocks: tuple[AddressBlock, ...] = tuple(blocks)
        self._entries = MappingProxyType({block.key: entries[block] for block in blocks})
        self._prefix_lens = tuple(sorted({block.prefix_len for block in blocks}))

    @classmethod
    def build(cls, pairs: Iterable[tuple[AddressBlock, VendorEntry]]) -> "OuiIndex":
        """Insert every pair and seal the result.

        A repeated ``(lo, hi)`` key replaces the earlier entry.
        """
        building: dict[AddressBlock, VendorEntry] = {}
        for block, entry in pairs:
            try:
                block = AddressBlock.from_bounds(block.lo, block.hi)
            except ValueError as exc:
                raise InvalidBlock(str(exc)) from exc
            if logger.isEnabledFor(TRACE):
                logger.log(
                    TRACE,
                    "Inserting entry for vendor: Range %d-%d is %r",
                    block.lo,
                    block.hi,
                    entry,
                )
            building[block] = entry
        return cls(building)

    def __len__(self) -> int:
        return len(self._blocks)

    def is_empty(self) -> bool:
        return not self._blocks

    def __iter__(self) -> Iterator[tuple[AddressBlock, VendorEntry]]:
        for block in self._blocks:
            yield block, self._entries[block.key]

    def matches(self, value: int) -> list[tuple[AddressBlock, VendorEntry]]:
        """All blocks containing ``value``, widest first."""
        found = []
        for prefix_len in self._prefix_lens:
            host_bits = MAX_U48 >> prefix_len
            lo = value & ~host_bits
            entry = self._entries.get((lo, lo | host_bits))
            if entry is not None:
                found.append((AddressBlock(lo=lo, hi=lo | host_bits, prefix_len=prefix_len), entry))
        return found

    def lookup(self, value: int) -> Optional[VendorEntry]:
        """Return the most specific entry containing ``value``, or None."""
        if not 0 <= value <= MAX_U48:
            raise InvalidAddress(f"value {value:#x} is outside the 48-bit range")
        found = self.matches(value)
        if len(found) > MAX_MATCHES:
            ranges = ", ".join(f"{block.lo:#014x}-{block.hi:#014x}" for block, _ in found)
            raise IndexInconsistent(
                f"more than two oui matches for {value:#014x} - possible database error? {ranges}"
            )
        if not found:
            return None
        return found[-1][1].model_copy()

    def export(self) -> bytes:
        chunks = [_HEADER.pack(MAGIC, FORMAT_VERSION, len(self._blocks))]
        for block, entry in self:
            chunks.append(_KEY.pack(block.lo, block.hi))
            chunks.append(_pack_str(entry.short_name))
            chunks.append(_pack_optional(entry.long_name))
            chunks.append(_pack_optional(entry.comment))
        return b"".join(chunks)

    @classmethod
    def from_export(cls, data: bytes) -> "OuiIndex":
        reader = _Reader(data)
        magic, version, count = reader.unpack(_HEADER)
        if magic != MAGIC:
            raise DecodeError(f"bad magic {magic!r}, expected {MAGIC!r}")
        if version != FORMAT_VERSION:
            raise DecodeError(f"unsupported format version {version}")

        entries: dict[AddressBlock, VendorEntry] = {}
        previous: Optional[tuple[int, int]] = None
        for position in range(count):
            lo, hi = reader.unpack(_KEY)
            if previous is not None and (lo, hi) <= previous:
                raise DecodeError(f"entry {position}: keys are not in ascending order")
            previous = (lo, hi)
            try:
                block = AddressBlock.from_bounds(lo, hi)
            except ValueError as exc:
                raise DecodeError(f"entry {position}: {exc}") from exc
            short_name = reader.read_str()
            long_name = reader.read_optional()
            comment = reader.read_optional()
            try:
                entries[block] = VendorEntry(
                    short_name=short_name, long_name=long_name, comment=comment
                )
            except ValidationError as exc:
                raise DecodeError(f"entry {position}: invalid vendor entry") from exc
        if reader.remaining:
            raise DecodeError(f"{reader.remaining} trailing bytes after {count} entries")
        return cls(entries)


def _pack_str(value: str) -> bytes:
    encoded = value.encode("utf-8")
    return _LENGTH.pack(len(encoded)) + encoded


def _pack_optional(value: Optional[str]) -> bytes:
    if value is None:
        return _TAG.pack(0)
    return _TAG.pack(1) + _pack_str(value)


class _Reader:
    def __init__(self, data: bytes) -> None:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise DecodeError(f"expected bytes, got {type(data).__name__}")
        self._data = memoryview(bytes(data))
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def take(self, size: int) -> bytes:
        if size > self.remaining:
            raise DecodeError(
                f"truncated data: need {size} bytes at offset {self._offset}, have {self.remaining}"
            )
        chunk = self._data[self._offset:self._offset + size].tobytes()
        self._offset += size
        return chunk

    def unpack(self, layout: struct.Struct) -> tuple:
        return layout.unpack(self.take(layout.size))

    def read_str(self) -> str:
        (length,) = self.unpack(_LENGTH)
        raw = self.take(length)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"invalid UTF-8 string before offset {self._offset}") from exc

    def read_optional(self) -> Optional[str]:
        (tag,) = self.unpack(_TAG)
        if tag == 0:
            return None
        if tag != 1:
            raise DecodeError(f"invalid option tag {tag} before offset {self._offset}")
        return self.read_str()
