"""Address book backed by an exported contacts file (.csv or .xlsx).

Handles:
- Permission: granted only when the export exists and is readable
- Encoding/separator detection for CSV exports (Google, Outlook, phone backups)
- Name columns ("Name", "Nome", "Given Name" + "Family Name", ...)
- Several phone columns per row and several numbers per cell (" ::: " or ";")
"""

import os
import re
from typing import List, Literal, Optional, Protocol

import pandas as pd
import structlog

from agenda.domain.schemas.contact import DeviceContact

logger = structlog.get_logger(__name__)

PermissionStatus = Literal["granted", "denied"]

NAME_COLUMNS = ("name", "nome", "display name", "full name", "nome completo")
GIVEN_NAME_COLUMNS = ("given name", "first name", "primeiro nome")
FAMILY_NAME_COLUMNS = ("family name", "last name", "sobrenome")
PHONE_PREFIXES = ("phone", "telefone", "celular", "mobile", "tel")

PHONE_SPLIT_RE = re.compile(r"\s*(?::::|;)\s*")
INVALID_CELL_VALUES = ("", "nan", "#REF!", "#ERROR!", "#N/A")


class AddressBook(Protocol):
    """Device address book: permission request and bulk read."""

    def request_permission(self) -> PermissionStatus:
        ...

    def get_contacts(self) -> List[DeviceContact]:
        ...


def _clean_column_name(col) -> str:
    return str(col).strip().lower()


def _cell(value) -> Optional[str]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    s = str(value).strip()
    return None if s in INVALID_CELL_VALUES else s


def _detect_encoding(file_path: str) -> str:
    """Detect file encoding by trying common encodings."""
    for enc in ("utf-8-sig", "utf-8", "latin-1", "cp1252"):
        try:
            with open(file_path, "r", encoding=enc) as f:
                f.read(4096)
            return enc
        except (UnicodeDecodeError, UnicodeError):
            continue
    return "latin-1"  # never raises on any byte


def _detect_separator(file_path: str, encoding: str) -> str:
    with open(file_path, "r", encoding=encoding, errors="replace") as f:
        first_line = f.readline()
    if ";" in first_line and "," not in first_line:
        return ";"
    if "\t" in first_line:
        return "\t"
    return ","


class FileAddressBook(AddressBook):
    """Reads contacts from a file the user exported from the device."""

    def __init__(self, file_path: str):
        self.file_path = file_path

    def request_permission(self) -> PermissionStatus:
        if os.path.isfile(self.file_path) and os.access(self.file_path, os.R_OK):
            return "granted"
        logger.warning("Contacts export not accessible", path=self.file_path)
        return "denied"

    def _read_frame(self) -> pd.DataFrame:
        ext = self.file_path.rsplit(".", 1)[-1].lower() if "." in self.file_path else ""
        if ext == "xlsx":
            return pd.read_excel(self.file_path, engine="openpyxl", sheet_name=0, dtype=str)
        encoding = _detect_encoding(self.file_path)
        sep = _detect_separator(self.file_path, encoding)
        return pd.read_csv(self.file_path, encoding=encoding, sep=sep, dtype=str, on_bad_lines="skip")

    def get_contacts(self) -> List[DeviceContact]:
        df = self._read_frame().dropna(how="all")
        columns = {_clean_column_name(c): c for c in df.columns}

        name_cols = [columns[c] for c in NAME_COLUMNS if c in columns]
        given_cols = [columns[c] for c in GIVEN_NAME_COLUMNS if c in columns]
        family_cols = [columns[c] for c in FAMILY_NAME_COLUMNS if c in columns]
        phone_cols = [
            original for cleaned, original in columns.items()
            if cleaned.startswith(PHONE_PREFIXES) and "type" not in cleaned and "label" not in cleaned
        ]

        contacts = []
        for _, row in df.iterrows():
            name = next((v for v in (_cell(row[c]) for c in name_cols) if v), None)
            if name is None:
                parts = [_cell(row[c]) for c in given_cols + family_cols]
                name = " ".join(p for p in parts if p) or None

            numbers = []
            for col in phone_cols:
                value = _cell(row[col])
                if value:
                    numbers.extend(n for n in PHONE_SPLIT_RE.split(value) if n)

            contacts.append(DeviceContact(name=name, phone_numbers=numbers))

        logger.info("Address book read", path=self.file_path, contacts=len(contacts))
        return contacts
