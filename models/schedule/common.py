from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Mapped, mapped_column

from main import db

from .. import BaseModel

__all__ = [
    "DAY_NAMES",
    "CreditType",
    "InvalidDay",
    "check_day",
    "day_name",
    "format_time_human",
    "get_credit_name",
]

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

DEFAULT_CREDIT_NAME = "Contrib"


class InvalidDay(ValueError):
    """Raised for a day of the week outside 0 (Monday) to 6 (Sunday)."""


class CreditType(BaseModel):
    """The role a member is credited with on a show (presenter, producer, ...)."""

    __tablename__ = "credit_type"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str]

    def __init__(self, name: str):
        self.name = name


def check_day(day: int) -> int:
    if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
        raise InvalidDay(f"Invalid Day ID {day}")
    return day


def day_name(day: int) -> str:
    return DAY_NAMES[check_day(day)]


def format_time_human(day: int, start_time: int, duration: int) -> str:
    """e.g. "Mon 10:00 - 11:00" for a slot starting `start_time` seconds after
    midnight and lasting `duration` seconds."""
    midnight = datetime(1970, 1, 1, tzinfo=UTC)
    start = midnight + timedelta(seconds=start_time)
    end = start + timedelta(seconds=duration)
    return f"{day_name(day)} {start:%H:%M} - {end:%H:%M}"


def get_credit_name(credit_type_id: int) -> str:
    name = db.session.scalar(select(CreditType.name).where(CreditType.id == credit_type_id).limit(1))
    if name is None:
        return DEFAULT_CREDIT_NAME
    return name
