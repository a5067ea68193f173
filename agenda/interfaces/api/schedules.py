"""Schedule API routes — calendar badges, day view, scheduling form and client picker."""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from agenda.core.exceptions import UnauthorizedException
from agenda.domain.schemas.auth import AuthUser
from agenda.domain.schemas.client import Client
from agenda.domain.schemas.schedule import DayCount, DayView, Schedule, SchedulingForm
from agenda.interfaces.api.deps import get_current_user
from agenda.interfaces.deps import AgendaContainer, get_container

router = APIRouter(prefix="/api/schedules", tags=["Schedules"])


@router.get("/calendar", response_model=List[DayCount])
def calendar(
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    """Appointment count and badge per date, for the month grid."""
    return container.schedule_service.day_counts()


@router.get("/day", response_model=DayView)
def day(
    date: Optional[str] = None,
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    return container.schedule_service.day(date)


@router.get("/clients", response_model=List[Client])
def pick_client(
    q: str = "",
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    return container.schedule_service.pick_client(q)


@router.get("/{schedule_id}", response_model=Schedule)
def get_one(
    schedule_id: str,
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    return container.schedule_service.get(schedule_id)


@router.get("/{schedule_id}/form", response_model=SchedulingForm)
def edit_form(
    schedule_id: str,
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    return container.schedule_service.form_for(schedule_id)


@router.post("", response_model=Schedule, status_code=status.HTTP_201_CREATED)
def create(
    body: SchedulingForm,
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    schedule_id = container.schedule_service.save(body)
    if schedule_id is None:
        raise UnauthorizedException("Salão do usuário não identificado")
    return container.schedule_service.get(schedule_id)


@router.put("/{schedule_id}", response_model=Schedule)
def update(
    schedule_id: str,
    body: SchedulingForm,
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    container.schedule_service.save(body, schedule_id=schedule_id)
    return container.schedule_service.get(schedule_id)


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel(
    schedule_id: str,
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    container.schedule_service.cancel(schedule_id)
