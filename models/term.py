from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from main import cache, db

from . import BaseModel, naive_utcnow

if TYPE_CHECKING:
    from .schedule import Season

__all__ = [
    "TERM_WEEKS",
    "Term",
    "get_active_application_term",
]

# Every term is scheduled as ten consecutive weeks from its start date
TERM_WEEKS = 10

# Members may apply for a season up to this long before the term starts
APPLICATION_WINDOW = timedelta(days=28)


class Term(BaseModel):
    __tablename__ = "terms"

    id: Mapped[int] = mapped_column(primary_key=True)
    start: Mapped[datetime] = mapped_column(index=True)
    finish: Mapped[datetime]
    description: Mapped[str | None]

    seasons: Mapped[list["Season"]] = relationship(back_populates="term")

    def __init__(self, start: datetime, finish: datetime | None = None, description: str | None = None):
        self.start = start
        if finish is None:
            finish = start + timedelta(weeks=TERM_WEEKS)
        self.finish = finish
        self.description = description

    def __repr__(self):
        return f"<Term {self.id} {self.start:%Y-%m-%d}>"

    @validates("start")
    def validate_start(self, key, start: datetime) -> datetime:
        # Slot days are offsets from the start date, counting Monday as 0
        if start.weekday() != 0:
            raise ValueError(f"Terms must start on a Monday, not {start:%A %Y-%m-%d}")
        return start

    @classmethod
    def get_start_date(cls, term_id: int) -> datetime:
        """Raises NoResultFound for an unknown term."""
        return db.session.get_one(cls, term_id).start


@cache.cached(timeout=60, key_prefix="get_active_application_term")
def get_active_application_term() -> int | None:
    """The term currently open for season applications.

    That's the current term, or the next one once it's within four weeks of
    starting.
    """
    now = naive_utcnow()
    return db.session.scalar(
        select(Term.id)
        .where(Term.start <= now + APPLICATION_WINDOW, Term.finish >= now)
        .order_by(Term.start)
        .limit(1)
    )
