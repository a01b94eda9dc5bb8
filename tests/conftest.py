from __future__ import annotations

import logging

import pytest

from ouidb.database import OuiDatabase

PARENT_CHILD_MANUF = (
    "# Wireshark manuf excerpt\n"
    "\n"
    "00:50:C2\tParent\tIEEE Registration Authority\n"
    "00:50:C2:00:10:00/36\tChild\tChild Electronics Corp\t# sub-allocation\n"
)


@pytest.fixture
def write_manuf(tmp_path):
    """Write manuf text to a temp file and return its path."""

    def _write(text: str, name: str = "manuf") -> str:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def parent_child_manuf(write_manuf) -> str:
    return write_manuf(PARENT_CHILD_MANUF)


@pytest.fixture
def parent_child_db(parent_child_manuf) -> OuiDatabase:
    return OuiDatabase.new_from_file(parent_child_manuf)


@pytest.fixture(autouse=True)
def _reset_ouidb_logger():
    """setup_logging() detaches the package logger from the root; undo that."""
    yield
    logger = logging.getLogger("ouidb")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
