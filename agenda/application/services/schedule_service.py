"""Schedule service — scheduling form validation, save/cancel, client picker and calendar views."""

from typing import List, Optional

from agenda.application.services.calendar import CalendarView, today_ymd
from agenda.application.services.clients_store import ClientsStore
from agenda.application.services.schedules_store import SchedulesStore
from agenda.application.services.search import filter_clients, only_digits
from agenda.core.exceptions import EntityNotFoundException, ValidationException
from agenda.domain.schemas.client import Client
from agenda.domain.schemas.schedule import (
    PAYMENT_METHODS,
    DayCount,
    DayView,
    Schedule,
    ScheduleBase,
    SchedulingForm,
)

TIME_DIGITS = 4


def format_time(value: str) -> str:
    """Time input mask: '930' -> '93:0', '0930' -> '09:30'. Keeps at most 4 digits."""
    digits = only_digits(value)[:4]
    if len(digits) <= 2:
        return digits
    return f"{digits[:2]}:{digits[2:]}"


def _is_complete(time_value: str) -> bool:
    """Full zero-padded HH:MM, so string order matches time order."""
    return len(only_digits(time_value)) == TIME_DIGITS


def cents_to_amount(cents: str) -> float:
    return round(int(cents) / 100, 2)


def amount_to_cents(amount: Optional[float]) -> str:
    if amount is None:
        return ""
    return str(int(round(amount * 100)))


class ScheduleService:
    def __init__(self, schedules: SchedulesStore, clients: ClientsStore, calendar: CalendarView):
        self.schedules = schedules
        self.clients = clients
        self.calendar = calendar

    # --- views -----------------------------------------------------------

    def day_counts(self) -> List[DayCount]:
        return self.calendar.day_counts(self.schedules.snapshot)

    def day(self, date: Optional[str] = None) -> DayView:
        return self.calendar.day(self.schedules.snapshot, date)

    def pick_client(self, query: str = "") -> List[Client]:
        return filter_clients(self.clients.snapshot, query)

    def get(self, schedule_id: str) -> Schedule:
        schedule = self.schedules.get(schedule_id)
        if schedule is None:
            raise EntityNotFoundException("Agendamento não encontrado", details={"id": schedule_id})
        return schedule

    def form_for(self, schedule_id: str) -> SchedulingForm:
        """Pre-filled form for editing an existing appointment."""
        s = self.get(schedule_id)
        return SchedulingForm(
            date=s.date,
            client_id=s.client_id,
            title=s.title,
            value=amount_to_cents(s.value),
            payment=s.payment,
            start_time=s.start_time,
            end_time=s.end_time or "",
        )

    # --- form ------------------------------------------------------------

    def validate(self, form: SchedulingForm) -> ScheduleBase:
        client = self.clients.get(form.client_id) if form.client_id else None
        title = form.title.strip()
        value = only_digits(form.value)
        start_time = format_time(form.start_time)
        end_time = format_time(form.end_time)

        if client is None or not title or not value or not _is_complete(start_time):
            raise ValidationException(
                "Preencha cliente, serviço, valor e horário de início.",
                details={
                    "client": client is not None,
                    "title": bool(title),
                    "value": bool(value),
                    "start_time": _is_complete(start_time),
                },
            )
        if form.payment is not None and form.payment not in PAYMENT_METHODS:
            raise ValidationException("Forma de pagamento inválida.", details={"allowed": list(PAYMENT_METHODS)})

        # End time is not checked against start time
        return ScheduleBase(
            date=form.date or today_ymd(self.calendar.timezone),
            title=title,
            client_id=client.id,
            client_name=client.name,
            value=cents_to_amount(value),
            payment=form.payment,
            start_time=start_time,
            end_time=end_time if _is_complete(end_time) else "",
        )

    def save(self, form: SchedulingForm, schedule_id: Optional[str] = None) -> Optional[str]:
        payload = self.validate(form)
        if schedule_id:
            self.get(schedule_id)
            self.schedules.update(schedule_id, payload.model_dump(by_alias=True))
            return schedule_id
        return self.schedules.add(payload)

    def cancel(self, schedule_id: str) -> None:
        self.get(schedule_id)
        self.schedules.remove(schedule_id)
