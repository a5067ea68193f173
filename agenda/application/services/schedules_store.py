"""Schedules store — live, tenant-scoped appointment list ordered by day and start time."""

from agenda.application.services.live_store import LiveCollectionStore
from agenda.domain.schemas.schedule import Schedule


class SchedulesStore(LiveCollectionStore[Schedule]):
    collection = "schedules"
    model = Schedule

    def sort_key(self, item: Schedule):
        return (item.date, item.start_time, item.id)
