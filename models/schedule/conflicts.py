"""
Checks a proposed weekly slot against the timeslots already booked in a term.

A slot is a day of the week, a start time and a duration. It's projected onto
each of the term's ten weeks and each projection is compared against the
booked timeslots, treating both as half-open [start, end) intervals.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import select

from main import db

from ..term import TERM_WEEKS, Term
from .common import check_day
from .show import Timeslot

log = logging.getLogger(__name__)

__all__ = [
    "ProposedSlot",
    "find_conflict",
    "find_conflicts",
]


@dataclass(frozen=True)
class ProposedSlot:
    day: int
    start_time: int
    duration: int

    def __post_init__(self):
        check_day(self.day)
        if self.duration <= 0:
            raise ValueError("Slot duration must be positive")
        if not 0 <= self.start_time < 24 * 3600:
            raise ValueError("Slot start time must be within the day")

    def in_week(self, term_start: datetime, week: int) -> tuple[datetime, datetime]:
        """The slot's [start, end) in the given week of a term, counting from 1.

        Terms always start on a Monday (Term checks this), so the day of the
        week is an offset from the term's start date.
        """
        start = term_start + timedelta(weeks=week - 1, days=self.day, seconds=self.start_time)
        return start, start + timedelta(seconds=self.duration)


def find_conflict(start: datetime, end: datetime) -> Timeslot | None:
    """The earliest booked timeslot overlapping [start, end), if any."""
    return db.session.scalars(
        select(Timeslot)
        .where(Timeslot.start_time < end, Timeslot.end_time > start)
        .order_by(Timeslot.start_time, Timeslot.id)
        .limit(1)
    ).first()


def find_conflicts(term: Term | int, slot: ProposedSlot) -> dict[int, int]:
    """Map of week number to the id of the timeslot that clashes with the slot
    that week. Weeks without a clash are left out."""
    term_start = term.start if isinstance(term, Term) else Term.get_start_date(term)

    conflicts = {}
    for week in range(1, TERM_WEEKS + 1):
        start, end = slot.in_week(term_start, week)
        timeslot = find_conflict(start, end)
        if timeslot is not None:
            conflicts[week] = timeslot.id

    if conflicts:
        log.debug("Slot %s clashes in weeks %s", slot, sorted(conflicts))
    return conflicts
