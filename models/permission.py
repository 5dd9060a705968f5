from typing import TYPE_CHECKING

from sqlalchemy import Column, ForeignKey, Integer, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from . import BaseModel

if TYPE_CHECKING:
    from .user import User

__all__ = [
    "Permission",
    "UserPermission",
]

UserPermission = Table(
    "user_permission",
    BaseModel.metadata,
    Column("user_id", Integer, ForeignKey("user.id"), primary_key=True),
    Column("permission_id", Integer, ForeignKey("permission.id"), primary_key=True),
)

# Granted to members who may edit show, season and timeslot metadata
SCHEDULER_PERMISSION = "scheduler"


class Permission(BaseModel):
    __tablename__ = "permission"
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(unique=True, index=True)

    user: Mapped[list["User"]] = relationship(back_populates="permissions", secondary=UserPermission)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self):
        return f"<Permission {self.name}>"
