"""
Show – a programme on the station, owned by a member.

Season – a show's run during one term. Members apply for a season each term.

Timeslot – a single booked broadcast of a season. Timeslots are what the
conflict checker compares proposed slots against.

Each of these carries temporal metadata (title, description, tags and so on)
through MetadataStore.
"""

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, ClassVar

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .. import BaseModel, naive_utcnow
from .metadata import MetadataOwnerMixin, OwnerKind

if TYPE_CHECKING:
    from ..term import Term
    from ..user import User

__all__ = [
    "Season",
    "Show",
    "Timeslot",
]


class Show(MetadataOwnerMixin, BaseModel):
    __tablename__ = "show"
    owner_kind: ClassVar[OwnerKind] = OwnerKind.SHOW

    id: Mapped[int] = mapped_column(primary_key=True)
    member_id: Mapped[int] = mapped_column(ForeignKey("user.id"), index=True)
    submitted: Mapped[datetime] = mapped_column(default=naive_utcnow)

    owner: Mapped["User"] = relationship(back_populates="shows")
    seasons: Mapped[list["Season"]] = relationship(back_populates="show")

    def __init__(self, owner: "User"):
        self.owner = owner

    def __repr__(self):
        return f"<Show {self.id}>"


class Season(MetadataOwnerMixin, BaseModel):
    __tablename__ = "show_season"
    owner_kind: ClassVar[OwnerKind] = OwnerKind.SEASON

    id: Mapped[int] = mapped_column(primary_key=True)
    show_id: Mapped[int] = mapped_column(ForeignKey("show.id"), index=True)
    term_id: Mapped[int] = mapped_column(ForeignKey("terms.id"), index=True)
    submitted: Mapped[datetime] = mapped_column(default=naive_utcnow)

    show: Mapped[Show] = relationship(back_populates="seasons")
    term: Mapped["Term"] = relationship(back_populates="seasons")
    timeslots: Mapped[list["Timeslot"]] = relationship(back_populates="season", order_by="Timeslot.start_time")

    def __init__(self, show: Show, term: "Term"):
        self.show = show
        self.term = term

    def __repr__(self):
        return f"<Season {self.id} of show {self.show_id}>"


class Timeslot(MetadataOwnerMixin, BaseModel):
    __tablename__ = "show_season_timeslot"
    owner_kind: ClassVar[OwnerKind] = OwnerKind.TIMESLOT

    id: Mapped[int] = mapped_column(primary_key=True)
    show_season_id: Mapped[int] = mapped_column(ForeignKey("show_season.id"), index=True)
    # The end is stored rather than the duration so overlap checks stay in plain SQL
    start_time: Mapped[datetime] = mapped_column(index=True)
    end_time: Mapped[datetime] = mapped_column(index=True)

    season: Mapped[Season] = relationship(back_populates="timeslots")

    def __init__(self, season: Season, start_time: datetime, duration: timedelta):
        if duration <= timedelta(0):
            raise ValueError("Timeslot duration must be positive")
        self.season = season
        self.start_time = start_time
        self.end_time = start_time + duration

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    @property
    def day(self) -> int:
        """Day of the week, 0 being Monday."""
        return self.start_time.weekday()

    def __repr__(self):
        return f"<Timeslot {self.id} {self.start_time:%Y-%m-%d %H:%M}+{self.duration}>"
