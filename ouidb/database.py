"""Public facade over the vendor index.

Look up the IEEE-assigned vendor of a MAC/EUI-48 address using the
Wireshark ``manuf`` registry.  Where the IEEE Registration Authority has
sub-divided a block, the specific manufacturer is returned.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional, Union

from ouidb.index import OuiIndex
from ouidb.log import get_logger
from ouidb.mac import format_u48, parse_text, to_u48
from ouidb.manuf import iter_manuf
from ouidb.models import AddressBlock, VendorEntry

logger = get_logger("database")


class OuiDatabase:
    def __init__(self, index: OuiIndex) -> None:
        self._index = index

    @classmethod
    def new_from_file(cls, path: Union[str, Path]) -> "OuiDatabase":
        """Create a new database from a Wireshark manuf file."""
        index = OuiIndex.build(iter_manuf(path))
        logger.info("Created a new OUI Vendor database from file %s (%d entries)", path, len(index))
        return cls(index)

    @classmethod
    def new_from_export(cls, data: bytes) -> "OuiDatabase":
        """Create a new database from bytes produced by :meth:`export`."""
        index = OuiIndex.from_export(data)
        logger.info("Created a new OUI Vendor database from previously exported data")
        return cls(index)

    def export(self) -> bytes:
        data = self._index.export()
        logger.info("Created a dump of the OUI Vendor database for export (%d bytes)", len(data))
        return data

    def query(self, value: int) -> Optional[VendorEntry]:
        return self._index.lookup(value)

    def query_by_bytes(self, data: bytes) -> Optional[VendorEntry]:
        """Query by a raw six byte address."""
        value = to_u48(data)
        logger.debug("Querying OUI Vendor database for %s (%d)", format_u48(value), value)
        return self.query(value)

    def query_by_str(self, text: str) -> Optional[VendorEntry]:
        """Query by a colon separated address, e.g. ``00:00:18:00:20:01``."""
        value = parse_text(text)
        logger.debug("Querying OUI Vendor database for %r (%d)", text, value)
        return self.query(value)

    def entries(self) -> Iterator[tuple[AddressBlock, VendorEntry]]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def is_empty(self) -> bool:
        return self._index.is_empty()
