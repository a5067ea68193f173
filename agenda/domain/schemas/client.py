"""Pydantic schemas for Client domain."""

from typing import Optional

from pydantic import BaseModel, Field

from agenda.domain.schemas.document import Document


class ClientBase(BaseModel):
    name: str
    phone: str
    address: Optional[str] = None

    model_config = {"populate_by_name": True}


class ClientCreate(ClientBase):
    pass


class ClientUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class Client(ClientBase):
    id: str
    user_id: Optional[str] = Field(None, alias="userId")
    salon_id: Optional[str] = Field(None, alias="salonId")
    created_at: Optional[str] = Field(None, alias="createdAt")

    model_config = {"populate_by_name": True, "frozen": True}

    @classmethod
    def from_document(cls, doc: Document) -> "Client":
        return cls.model_validate({**doc.data, "id": doc.id})
