"""Pydantic schemas for Schedule (appointment) domain."""

from typing import Optional

from pydantic import BaseModel, Field

from agenda.domain.schemas.document import Document

PAYMENT_METHODS = ("Pix", "Dinheiro", "Cartão", "Transferência")


class ScheduleBase(BaseModel):
    date: str  # YYYY-MM-DD
    title: str
    client_id: str = Field(alias="clientId")
    client_name: str = Field(alias="clientName")
    start_time: str = Field(alias="startTime")  # HH:MM
    end_time: str = Field("", alias="endTime")  # "" when unset
    value: Optional[float] = None
    payment: Optional[str] = None

    model_config = {"populate_by_name": True}


class Schedule(ScheduleBase):
    id: str
    user_id: Optional[str] = Field(None, alias="userId")
    salon_id: Optional[str] = Field(None, alias="salonId")
    created_at: Optional[str] = Field(None, alias="createdAt")

    model_config = {"populate_by_name": True, "frozen": True}

    @classmethod
    def from_document(cls, doc: Document) -> "Schedule":
        return cls.model_validate({**doc.data, "id": doc.id})


class SchedulingForm(BaseModel):
    """Raw form input. `value` holds digits meaning currency subunits (cents)."""
    date: Optional[str] = Field(None, pattern=r"^\d{4}-\d{2}-\d{2}$")  # defaults to today
    client_id: Optional[str] = None
    title: str = ""
    value: str = ""
    payment: Optional[str] = None
    start_time: str = ""
    end_time: str = ""


class DayCount(BaseModel):
    date: str
    count: int
    badge: str


class DayView(BaseModel):
    date: str
    display_date: str
    items: list[Schedule]
