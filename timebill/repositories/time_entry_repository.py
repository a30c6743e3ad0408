from typing import Dict, Iterable, List, Optional, Sequence
from datetime import date

from sqlalchemy.orm import Session
from sqlalchemy import desc, func

from timebill.repositories.base_repository import BaseRepository
from timebill.models import TimeEntry
from timebill.schemas.time_entry import TimeEntryCreate, TimeEntryUpdate


def split_minutes(total_minutes: int) -> Dict[str, object]:
    """Normalize a minute count to whole hours plus a remainder below 60."""
    hours, remainder = divmod(int(total_minutes), 60)
    return {
        "total_minutes": int(total_minutes),
        "total_hours": hours,
        "remaining_minutes": remainder,
        "formatted_time": f"{hours}h {remainder}m",
    }


class TimeEntryRepository(BaseRepository[TimeEntry]):
    """Repository for TimeEntry operations."""

    def __init__(self, db: Session):
        super().__init__(TimeEntry, db)

    def create_time_entry(self, obj_in: TimeEntryCreate) -> TimeEntry:
        """Create a new time entry with its derived total"""
        time_entry = TimeEntry(**obj_in.model_dump())
        time_entry.is_billed = False
        time_entry.bill_id = None
        time_entry.recalculate_total()
        return self.save(time_entry)

    def update_time_entry(self, time_entry: TimeEntry, obj_in: TimeEntryUpdate) -> TimeEntry:
        """Apply a patch and rewrite the derived total"""
        for field, value in obj_in.model_dump(exclude_unset=True).items():
            setattr(time_entry, field, value)
        time_entry.recalculate_total()
        return self.save(time_entry)

    def delete_time_entry(self, time_entry: TimeEntry) -> bool:
        self.db.delete(time_entry)
        self.db.commit()
        return True

    def get_time_entries(
        self,
        client_id: Optional[int] = None,
        work_date: Optional[date] = None,
        is_billed: Optional[bool] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[TimeEntry]:
        """List time entries, newest first"""
        query = self.db.query(TimeEntry)

        if client_id is not None:
            query = query.filter(TimeEntry.client_id == client_id)
        if work_date is not None:
            query = query.filter(TimeEntry.work_date == work_date)
        if is_billed is not None:
            query = query.filter(TimeEntry.is_billed.is_(is_billed))
        if date_from is not None:
            query = query.filter(TimeEntry.work_date >= date_from)
        if date_to is not None:
            query = query.filter(TimeEntry.work_date <= date_to)

        return query.order_by(desc(TimeEntry.work_date), desc(TimeEntry.id)).all()

    def get_unbilled(self, client_id: Optional[int] = None) -> List[TimeEntry]:
        return self.get_time_entries(client_id=client_id, is_billed=False)

    def get_unbilled_in_range(
        self, client_id: int, date_from: date, date_to: date
    ) -> List[TimeEntry]:
        """Unbilled entries of a client within [date_from, date_to], oldest first"""
        return (
            self.db.query(TimeEntry)
            .filter(
                TimeEntry.client_id == client_id,
                TimeEntry.is_billed.is_(False),
                TimeEntry.work_date >= date_from,
                TimeEntry.work_date <= date_to,
            )
            .order_by(TimeEntry.work_date, TimeEntry.id)
            .all()
        )

    def get_for_update(self, entry_ids: Sequence[int]) -> Dict[int, TimeEntry]:
        """
        Load entries by id, taking row locks where the backend supports them.

        Returns a mapping so callers can report the first missing id.
        """
        if not entry_ids:
            return {}
        rows = (
            self.db.query(TimeEntry)
            .filter(TimeEntry.id.in_(list(entry_ids)))
            .with_for_update()
            .all()
        )
        return {row.id: row for row in rows}

    def mark_billed(self, entry_ids: Iterable[int], client_id: int, bill_id: int) -> int:
        """
        Link still-unbilled entries of ``client_id`` to ``bill_id``.

        Runs inside the caller's transaction (no commit). Returns the number
        of rows changed; fewer than requested means another writer got there
        first.
        """
        return (
            self.db.query(TimeEntry)
            .filter(
                TimeEntry.id.in_(list(entry_ids)),
                TimeEntry.client_id == client_id,
                TimeEntry.bill_id.is_(None),
                TimeEntry.is_billed.is_(False),
            )
            .update(
                {TimeEntry.is_billed: True, TimeEntry.bill_id: bill_id},
                synchronize_session=False,
            )
        )

    def release_bill(self, bill_id: int) -> int:
        """Unlink every entry of a bill (no commit). Returns rows changed."""
        return (
            self.db.query(TimeEntry)
            .filter(TimeEntry.bill_id == bill_id)
            .update(
                {TimeEntry.is_billed: False, TimeEntry.bill_id: None},
                synchronize_session=False,
            )
        )

    def get_totals(self, client_id: int, is_billed: Optional[bool] = None) -> Dict[str, object]:
        """Entry count and minute totals for a client, summed in SQL as integers"""
        query = self.db.query(
            func.count(TimeEntry.id),
            func.coalesce(func.sum(TimeEntry.total_minutes), 0),
        ).filter(TimeEntry.client_id == client_id)
        if is_billed is not None:
            query = query.filter(TimeEntry.is_billed.is_(is_billed))

        count, minutes_sum = query.one()
        return {
            "client_id": client_id,
            "total_entries": int(count or 0),
            **split_minutes(minutes_sum or 0),
        }
