"""Look up MAC/EUI-48 vendors from the Wireshark manufacturer database."""
from ouidb.database import OuiDatabase
from ouidb.errors import (
    DatabaseFileError,
    DecodeError,
    IndexInconsistent,
    InvalidAddress,
    InvalidBlock,
    OuiError,
    ParseError,
)
from ouidb.models import AddressBlock, VendorEntry

__version__ = "0.1.0"

__all__ = [
    "AddressBlock",
    "DatabaseFileError",
    "DecodeError",
    "IndexInconsistent",
    "InvalidAddress",
    "InvalidBlock",
    "OuiDatabase",
    "OuiError",
    "ParseError",
    "VendorEntry",
]
