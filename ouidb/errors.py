"""Exception hierarchy for the OUI vendor database."""
from __future__ import annotations


class OuiError(Exception):
    """Base class for every error raised by ouidb."""


class DatabaseFileError(OuiError, OSError):
    """The manuf file could not be opened or read."""


class ParseError(OuiError, ValueError):
    """A manuf data line is malformed."""


class InvalidBlock(OuiError, ValueError):
    """A parsed address block is out of range or not aligned to its mask."""


class InvalidAddress(OuiError, ValueError):
    """A query address is not six bytes or could not be parsed."""


class DecodeError(OuiError, ValueError):
    """An exported database blob could not be decoded."""


class IndexInconsistent(OuiError):
    """More than two blocks contain the queried address."""
