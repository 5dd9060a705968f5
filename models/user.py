from __future__ import annotations

import typing

from flask_login import AnonymousUserMixin, UserMixin
from sqlalchemy import func, select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import Mapped, mapped_column, relationship

from main import db

from . import BaseModel
from .permission import Permission, UserPermission

if typing.TYPE_CHECKING:
    from .schedule import Show

__all__ = [
    "AnonymousUser",
    "User",
]


class User(BaseModel, UserMixin):
    """A station member. Members own shows and are recorded as the settor
    and approver of every metadata change they make."""

    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True)
    fname: Mapped[str]
    sname: Mapped[str]
    email: Mapped[str | None] = mapped_column(unique=True, index=True)

    permissions: Mapped[list[Permission]] = relationship(
        back_populates="user",
        cascade="all",
        secondary=UserPermission,
    )
    shows: Mapped[list[Show]] = relationship(back_populates="owner")

    def __init__(self, fname: str, sname: str, email: str | None = None):
        self.fname = fname
        self.sname = sname
        self.email = email

    @property
    def name(self) -> str:
        return f"{self.fname} {self.sname}"

    def has_permission(self, name, cascade=True) -> bool:
        if cascade and name != "admin" and self.has_permission("admin"):
            return True
        return any(permission.name == name for permission in self.permissions)

    def grant_permission(self, name: str):
        try:
            perm = db.session.execute(select(Permission).where(Permission.name == name)).scalar_one()
        except NoResultFound:
            perm = Permission(name)
            db.session.add(perm)
        self.permissions.append(perm)

    def __repr__(self):
        return f"<User {self.id} {self.name}>"

    @classmethod
    def get_by_email(cls, email) -> User | None:
        return db.session.execute(
            select(User).where(func.lower(User.email) == func.lower(email))
        ).scalar_one_or_none()


class AnonymousUser(AnonymousUserMixin):
    def has_permission(self, name, cascade=True) -> bool:
        return False


def load_anonymous_user():
    """Assigned to `login_manager.anonymous_user` in main.py."""
    return AnonymousUser()
