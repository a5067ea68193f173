"""Pydantic schemas for address book contacts and the import report."""

from typing import List, Literal, Optional

from pydantic import BaseModel

ImportStatus = Literal["permission_denied", "empty", "nothing_to_import", "imported", "failed"]


class DeviceContact(BaseModel):
    name: Optional[str] = None
    phone_numbers: List[str] = []


class ContactCandidate(BaseModel):
    name: str
    phone: str  # digits only


class ImportResult(BaseModel):
    status: ImportStatus
    imported: int = 0
    title: str
    message: str
