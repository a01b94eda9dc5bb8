"""Tests for ouidb.index (longest-match lookup and binary export)."""
from __future__ import annotations

import struct

import pytest

from ouidb.errors import DecodeError, IndexInconsistent, InvalidAddress, InvalidBlock
from ouidb.index import FORMAT_VERSION, MAGIC, OuiIndex
from ouidb.manuf import build_block, parse_line
from ouidb.models import AddressBlock, VendorEntry


def _pairs(*lines: str) -> list[tuple[AddressBlock, VendorEntry]]:
    pairs = []
    for line in lines:
        record = parse_line(line)
        pairs.append((build_block(record), record.to_entry()))
    return pairs


@pytest.fixture
def nested_index() -> OuiIndex:
    return OuiIndex.build(
        _pairs(
            "00:50:C2\tParent\tIEEE Registration Authority",
            "00:50:C2:00:10:00/36\tChild",
            "00:00:18\tFoo\tFoo, Inc.\t# comment",
            "00:11:22:33:44:55/48\tSingle",
        )
    )


class TestBuild:
    def test_empty(self):
        """An index built from nothing is empty and matches nothing."""
        index = OuiIndex.build([])
        assert len(index) == 0
        assert index.is_empty()
        assert index.lookup(0) is None

    def test_len_counts_distinct_keys(self, nested_index):
        """len() counts one per distinct block."""
        assert len(nested_index) == 4
        assert not nested_index.is_empty()

    def test_duplicate_key_last_write_wins(self):
        """A repeated block keeps the last entry."""
        index = OuiIndex.build(_pairs("00:00:18\tFirst", "00:00:18\tSecond"))
        assert len(index) == 1
        assert index.lookup(0x000018000001).short_name == "Second"

    def test_iteration_is_ordered_by_lo_then_hi(self, nested_index):
        """Iteration yields blocks in ascending (lo, hi) order."""
        keys = [block.key for block, _ in nested_index]
        assert keys == sorted(keys)
        assert keys[0] == (0x000018000000, 0x000018FFFFFF)

    def test_iteration_ordering_within_same_lo(self):
        """Blocks sharing lo are ordered by hi, narrow first."""
        index = OuiIndex.build(_pairs("00:50:C2:00:00:00/36\tNarrow", "00:50:C2\tWide"))
        assert [entry.short_name for _, entry in index] == ["Narrow", "Wide"]


class TestLookup:
    def test_longest_match_prefers_child(self, nested_index):
        """An address inside a sub-allocation resolves to the child."""
        assert nested_index.lookup(0x0050C2001FFF).short_name == "Child"
        assert nested_index.lookup(0x0050C2001000).short_name == "Child"

    def test_parent_outside_child(self, nested_index):
        """Addresses outside the child resolve to the parent."""
        assert nested_index.lookup(0x0050C2FF0000).short_name == "Parent"
        assert nested_index.lookup(0x0050C2002000).short_name == "Parent"
        assert nested_index.lookup(0x0050C2000FFF).short_name == "Parent"

    def test_single_match(self, nested_index):
        """An address in exactly one block returns that entry."""
        entry = nested_index.lookup(0x000018ABCDEF)
        assert entry == VendorEntry(short_name="Foo", long_name="Foo, Inc.", comment="comment")

    def test_mask_48_matches_exactly_one_address(self, nested_index):
        """A /48 block matches its own address only."""
        assert nested_index.lookup(0x001122334455).short_name == "Single"
        assert nested_index.lookup(0x001122334454) is None
        assert nested_index.lookup(0x001122334456) is None

    def test_miss(self, nested_index):
        """Addresses in no block return None."""
        assert nested_index.lookup(0x000019000000) is None
        assert nested_index.lookup(0xFFFFFFFFFFFF) is None

    def test_more_than_two_matches_rejected(self):
        """Three nested blocks containing an address raise IndexInconsistent."""
        index = OuiIndex.build(
            _pairs(
                "00:50:C2\tParent",
                "00:50:C2:00:10:00/36\tChild",
                "00:50:C2:00:10:00/40\tGrandchild",
            )
        )
        with pytest.raises(IndexInconsistent, match="more than two"):
            index.lookup(0x0050C2001001)
        # Only two blocks contain this one.
        assert index.lookup(0x0050C2001F00).short_name == "Child"

    def test_matches_lists_widest_first(self, nested_index):
        """matches() orders containing blocks from widest to narrowest."""
        found = nested_index.matches(0x0050C2001234)
        assert [block.prefix_len for block, _ in found] == [24, 36]

    def test_lookup_is_repeatable(self, nested_index):
        """Repeated lookups return equal but distinct objects."""
        first = nested_index.lookup(0x0050C2001234)
        second = nested_index.lookup(0x0050C2001234)
        assert first == second
        assert first is not second

    @pytest.mark.parametrize("value", [-1, 1 << 48])
    def test_out_of_range_value(self, nested_index, value):
        """Values outside the 48-bit space raise InvalidAddress."""
        with pytest.raises(InvalidAddress):
            nested_index.lookup(value)


class TestExport:
    def test_round_trip_preserves_entries(self, nested_index):
        """from_export(export()) yields the same blocks and entries."""
        restored = OuiIndex.from_export(nested_index.export())
        assert len(restored) == len(nested_index)
        assert list(restored) == list(nested_index)

    def test_round_trip_preserves_lookups(self, nested_index):
        """A reloaded index answers every lookup the same way."""
        restored = OuiIndex.from_export(nested_index.export())
        probes = [
            0,
            0x000018000000,
            0x000018FFFFFF,
            0x000019000000,
            0x0050C2000FFF,
            0x0050C2001000,
            0x0050C2001FFF,
            0x0050C2002000,
            0x001122334455,
            0xFFFFFFFFFFFF,
        ]
        for value in probes:
            assert restored.lookup(value) == nested_index.lookup(value)

    def test_export_is_deterministic(self, nested_index):
        """Exporting twice, or after reloading, gives identical bytes."""
        assert nested_index.export() == nested_index.export()
        assert OuiIndex.from_export(nested_index.export()).export() == nested_index.export()

    def test_export_preserves_unicode(self):
        """Non-ASCII vendor names survive export."""
        index = OuiIndex.build(_pairs("00:00:18\tFoo\tFöö Électronique"))
        restored = OuiIndex.from_export(index.export())
        assert restored.lookup(0x000018000000).long_name == "Föö Électronique"

    def test_empty_round_trip(self):
        """An empty index exports and reloads as empty."""
        data = OuiIndex.build([]).export()
        assert OuiIndex.from_export(data).is_empty()

    def test_header_layout(self, nested_index):
        """The blob starts with magic, version and entry count."""
        data = nested_index.export()
        magic, version, count = struct.unpack_from("<4sBQ", data)
        assert (magic, version, count) == (MAGIC, FORMAT_VERSION, 4)


def _blob(*entries: bytes, count: int | None = None, magic: bytes = MAGIC, version: int = FORMAT_VERSION) -> bytes:
    header = struct.pack("<4sBQ", magic, version, len(entries) if count is None else count)
    return header + b"".join(entries)


def _entry(lo: int, hi: int, short: bytes = b"Foo", tail: bytes = b"\x00\x00") -> bytes:
    return struct.pack("<QQI", lo, hi, len(short)) + short + tail


class TestImportErrors:
    def test_empty_data(self):
        """An empty blob is truncated."""
        with pytest.raises(DecodeError, match="truncated"):
            OuiIndex.from_export(b"")

    def test_not_bytes(self):
        """Non-bytes input raises DecodeError."""
        with pytest.raises(DecodeError):
            OuiIndex.from_export("not bytes")

    def test_bad_magic(self):
        """A blob with the wrong magic is rejected."""
        with pytest.raises(DecodeError, match="magic"):
            OuiIndex.from_export(_blob(magic=b"NOPE"))

    def test_bad_version(self):
        """An unknown format version is rejected."""
        with pytest.raises(DecodeError, match="version"):
            OuiIndex.from_export(_blob(version=FORMAT_VERSION + 1))

    def test_trailing_bytes(self, nested_index):
        """Extra bytes after the last entry are rejected."""
        with pytest.raises(DecodeError, match="trailing"):
            OuiIndex.from_export(nested_index.export() + b"\x00")

    def test_truncated_entry(self, nested_index):
        """A blob cut short inside an entry is rejected."""
        with pytest.raises(DecodeError, match="truncated"):
            OuiIndex.from_export(nested_index.export()[:-1])

    def test_count_larger_than_data(self):
        """A header count above the stored entries is rejected."""
        with pytest.raises(DecodeError, match="truncated"):
            OuiIndex.from_export(_blob(_entry(0x000018000000, 0x000018FFFFFF), count=2))

    def test_invalid_option_tag(self):
        """Option tags other than 0 and 1 are rejected."""
        with pytest.raises(DecodeError, match="option tag"):
            OuiIndex.from_export(_blob(_entry(0x000018000000, 0x000018FFFFFF, tail=b"\x02\x00")))

    def test_invalid_utf8(self):
        """Strings that are not UTF-8 are rejected."""
        with pytest.raises(DecodeError, match="UTF-8"):
            OuiIndex.from_export(_blob(_entry(0x000018000000, 0x000018FFFFFF, short=b"\xff")))

    def test_empty_short_name(self):
        """An entry with an empty short name is rejected."""
        with pytest.raises(DecodeError, match="vendor entry"):
            OuiIndex.from_export(_blob(_entry(0x000018000000, 0x000018FFFFFF, short=b"")))

    def test_unordered_keys(self):
        """Keys out of ascending order are rejected."""
        data = _blob(
            _entry(0x000019000000, 0x000019FFFFFF),
            _entry(0x000018000000, 0x000018FFFFFF),
        )
        with pytest.raises(DecodeError, match="ascending"):
            OuiIndex.from_export(data)

    def test_duplicate_keys(self):
        """A repeated key is rejected on import."""
        data = _blob(
            _entry(0x000018000000, 0x000018FFFFFF),
            _entry(0x000018000000, 0x000018FFFFFF),
        )
        with pytest.raises(DecodeError, match="ascending"):
            OuiIndex.from_export(data)

    @pytest.mark.parametrize(
        "lo,hi",
        [
            (0x000018FFFFFF, 0x000018000000),
            (0x000018000000, 0x000018FFFFFE),
            (0x000018000001, 0x000019000000),
            (0x000000000000, 0xFFFFFFFFFFFFFF),
            (0x000000000000, 0xFFFFFFFFFFFF),
        ],
    )
    def test_invalid_block_bounds(self, lo, hi):
        """Keys that are not aligned prefix blocks are rejected."""
        with pytest.raises(DecodeError, match="entry 0"):
            OuiIndex.from_export(_blob(_entry(lo, hi)))


class TestBuildValidation:
    def test_unaligned_block_rejected(self):
        """build() rejects a block not aligned to its prefix length."""
        block = AddressBlock(lo=0x0050C2001001, hi=0x0050C2002000, prefix_len=36)
        with pytest.raises(InvalidBlock):
            OuiIndex.build([(block, VendorEntry(short_name="Bad"))])
