"""
ChartType – a kind of music chart the station publishes (e.g. the weekly
top ten). ChartRelease – one published edition of a chart type.
"""

from datetime import datetime

from sqlalchemy import ForeignKey, func, select
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from main import db

from . import BaseModel, naive_utcnow

__all__ = [
    "ChartRelease",
    "ChartType",
]


class ChartType(BaseModel):
    __versioned__: dict = {}
    __tablename__ = "chart_type"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str]
    description: Mapped[str]

    releases: Mapped[list["ChartRelease"]] = relationship(
        back_populates="chart_type",
        order_by="desc(ChartRelease.submitted)",
    )

    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description

    def __repr__(self):
        return f"<ChartType {self.id} {self.name}>"

    @validates("name", "description")
    def validate_not_empty(self, key, value):
        if not value:
            raise ValueError(f"Chart type {key} must not be empty")
        return value

    @classmethod
    def get_all(cls) -> list["ChartType"]:
        return list(db.session.scalars(select(cls).order_by(cls.id)))

    @classmethod
    def get_by_id(cls, chart_type_id: int) -> "ChartType | None":
        return db.session.get(cls, chart_type_id)

    @property
    def number_of_releases(self) -> int:
        return db.session.scalar(
            select(func.count(ChartRelease.id)).where(ChartRelease.chart_type_id == self.id)
        )

    def set_name(self, name: str) -> "ChartType":
        self.name = name
        return self

    def set_description(self, description: str) -> "ChartType":
        self.description = description
        return self


class ChartRelease(BaseModel):
    __tablename__ = "chart_release"

    id: Mapped[int] = mapped_column(primary_key=True)
    chart_type_id: Mapped[int] = mapped_column(ForeignKey("chart_type.id"), index=True)
    submitted: Mapped[datetime] = mapped_column(default=naive_utcnow, index=True)

    chart_type: Mapped[ChartType] = relationship(back_populates="releases")

    def __init__(self, chart_type: ChartType, submitted: datetime | None = None):
        self.chart_type = chart_type
        if submitted is not None:
            self.submitted = submitted

    def __repr__(self):
        return f"<ChartRelease {self.id} of {self.chart_type_id} {self.submitted}>"
