from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

MAX_U48 = 0xFFFF_FFFF_FFFF
MIN_PREFIX_LEN = 8
MAX_PREFIX_LEN = 48
DEFAULT_PREFIX_LEN = 24


class VendorEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    short_name: str
    long_name: Optional[str] = None
    comment: Optional[str] = None

    @field_validator("short_name")
    @classmethod
    def _short_name_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("short_name must not be empty")
        return value


@dataclass(frozen=True, order=True)
class AddressBlock:
    """Closed interval ``[lo, hi]`` of 48-bit addresses covered by a prefix."""

    lo: int
    hi: int
    prefix_len: int

    @property
    def key(self) -> tuple[int, int]:
        return (self.lo, self.hi)

    @property
    def size(self) -> int:
        return self.hi - self.lo + 1

    def contains(self, value: int) -> bool:
        return self.lo <= value <= self.hi

    @classmethod
    def from_bounds(cls, lo: int, hi: int) -> "AddressBlock":
        """Rebuild a block from its bounds, recovering the prefix length.

        Raises ValueError when ``[lo, hi]`` is not an aligned power-of-two
        range inside the 48-bit space with a prefix length in [8, 48].
        """
        if not 0 <= lo <= hi <= MAX_U48:
            raise ValueError(f"bounds out of range: {lo:#x}-{hi:#x}")
        size = hi - lo + 1
        if size & (size - 1):
            raise ValueError(f"range size is not a power of two: {lo:#x}-{hi:#x}")
        prefix_len = MAX_PREFIX_LEN - (size.bit_length() - 1)
        if prefix_len < MIN_PREFIX_LEN:
            raise ValueError(f"prefix length /{prefix_len} below /{MIN_PREFIX_LEN}")
        if lo & (size - 1):
            raise ValueError(f"range start {lo:#x} not aligned to /{prefix_len}")
        return cls(lo=lo, hi=hi, prefix_len=prefix_len)


@dataclass(frozen=True)
class ParsedRecord:
    prefix: int
    mask: int
    short_name: str
    long_name: Optional[str] = None
    comment: Optional[str] = None

    @property
    def field_count(self) -> int:
        return 2 + (self.long_name is not None) + (self.comment is not None)

    def to_entry(self) -> VendorEntry:
        return VendorEntry(
            short_name=self.short_name,
            long_name=self.long_name,
            comment=self.comment,
        )
