"""
Temporal metadata for shows, seasons and timeslots.

MetadataKey – a named kind of metadata (title, description, tag, ...). Some
keys allow several simultaneously active values per owner (tags), the rest
allow one.

ShowMetadata / SeasonMetadata / TimeslotMetadata – one row per version of a
value, valid over [effective_from, effective_to). A null effective_to means
the value is still current. Rows are appended and closed but never deleted,
so these tables are also the audit trail of who changed what and when.
"""

import enum
import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

from sqlalchemy import ForeignKey, Text, func, or_, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from main import db

from .. import BaseModel, naive_utcnow

log = logging.getLogger(__name__)

__all__ = [
    "InvalidEffectiveRange",
    "InvalidOwnerKind",
    "MetadataKey",
    "MetadataKeyInfo",
    "MetadataKeyRegistry",
    "MetadataStore",
    "MultipleValuesNotAllowed",
    "OwnerKind",
    "RegistryState",
    "SeasonMetadata",
    "ShowMetadata",
    "TimeslotMetadata",
    "UnknownMetadataKey",
    "UnknownMetadataKeyId",
]

type MetadataValue = str | list[str]


class UnknownMetadataKey(LookupError):
    """Raised when a metadata key name isn't registered."""


class UnknownMetadataKeyId(LookupError):
    """Raised when a metadata key id isn't registered."""


class MultipleValuesNotAllowed(ValueError):
    """Raised when several values are given for a single-value key."""


class InvalidOwnerKind(ValueError):
    """Raised for anything that isn't a show, season or timeslot."""


class InvalidEffectiveRange(ValueError):
    """Raised when a value would stop being effective before it starts."""


class MetadataKey(BaseModel):
    __tablename__ = "metadata_key"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(unique=True, index=True)
    allow_multiple: Mapped[bool] = mapped_column(default=False)
    description: Mapped[str | None]

    def __init__(self, name: str, allow_multiple: bool = False, description: str | None = None):
        self.name = name
        self.allow_multiple = allow_multiple
        self.description = description

    def __repr__(self):
        return f"<MetadataKey {self.id} {self.name}{'*' if self.allow_multiple else ''}>"


class MetadataValueMixin:
    id: Mapped[int] = mapped_column(primary_key=True)
    key_id: Mapped[int] = mapped_column(ForeignKey("metadata_key.id"), index=True)
    settor_id: Mapped[int] = mapped_column(ForeignKey("user.id"))
    approver_id: Mapped[int | None] = mapped_column(ForeignKey("user.id"))
    value: Mapped[str] = mapped_column(Text)
    effective_from: Mapped[datetime] = mapped_column(index=True)
    effective_to: Mapped[datetime | None] = mapped_column(index=True)

    def __repr__(self):
        return (
            f"<{self.__class__.__name__} key={self.key_id} owner={self.owner_id} "
            f"{self.value!r} [{self.effective_from}, {self.effective_to})>"
        )


class ShowMetadata(MetadataValueMixin, BaseModel):
    __tablename__ = "show_metadata"
    owner_id: Mapped[int] = mapped_column("show_id", ForeignKey("show.id"), index=True)


class SeasonMetadata(MetadataValueMixin, BaseModel):
    __tablename__ = "season_metadata"
    owner_id: Mapped[int] = mapped_column("show_season_id", ForeignKey("show_season.id"), index=True)


class TimeslotMetadata(MetadataValueMixin, BaseModel):
    __tablename__ = "timeslot_metadata"
    owner_id: Mapped[int] = mapped_column(
        "show_season_timeslot_id", ForeignKey("show_season_timeslot.id"), index=True
    )


class OwnerKind(enum.StrEnum):
    SHOW = "show"
    SEASON = "season"
    TIMESLOT = "timeslot"

    @property
    def value_model(self) -> type[MetadataValueMixin]:
        return {
            OwnerKind.SHOW: ShowMetadata,
            OwnerKind.SEASON: SeasonMetadata,
            OwnerKind.TIMESLOT: TimeslotMetadata,
        }[self]

    @classmethod
    def parse(cls, name: str) -> "OwnerKind":
        try:
            return cls(name)
        except ValueError as e:
            raise InvalidOwnerKind(f'"{name}" is not a show, season or timeslot') from e

    @classmethod
    def of(cls, owner: Any) -> "OwnerKind":
        kind = getattr(type(owner), "owner_kind", None)
        if not isinstance(kind, OwnerKind):
            raise InvalidOwnerKind(f"{owner!r} can't carry schedule metadata")
        return kind


class MetadataOwnerMixin:
    """Shows, seasons and timeslots. ``meta_values`` mirrors the owner's
    current metadata, keyed by metadata key id, once MetadataStore has read it."""

    owner_kind: ClassVar[OwnerKind]
    meta_values = None
    meta_values_expire = None


class RegistryState(enum.Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"


@dataclass(frozen=True)
class MetadataKeyInfo:
    id: int
    name: str
    allows_multiple: bool


class MetadataKeyRegistry:
    """Maps metadata key names to ids, and ids to whether they allow multiple values.

    The whole key table is read in one query the first time anything is
    looked up and kept for the life of the process. Keys added afterwards
    aren't seen until ``invalidate()`` is called (or the process restarts).

    One registry is created per app in ``create_app``; pass it to whatever
    needs key lookups rather than creating more.
    """

    def __init__(self, session_factory: Callable[[], Session] | None = None):
        self._session_factory = session_factory or (lambda: db.session)
        self._lock = threading.Lock()
        self._by_name: dict[str, MetadataKeyInfo] = {}
        self._by_id: dict[int, MetadataKeyInfo] = {}
        self.state = RegistryState.UNLOADED

    def init_app(self, app):
        app.extensions["metadata_keys"] = self

    def load(self):
        if self.state is RegistryState.LOADED:
            return

        with self._lock:
            if self.state is RegistryState.LOADED:
                return

            rows = self._session_factory().execute(
                select(MetadataKey.id, MetadataKey.name, MetadataKey.allow_multiple)
            )
            by_name = {name: MetadataKeyInfo(id, name, bool(multiple)) for id, name, multiple in rows}

            self._by_name = by_name
            self._by_id = {key.id: key for key in by_name.values()}
            self.state = RegistryState.LOADED
            log.debug("Loaded %s metadata keys", len(by_name))

    def invalidate(self):
        with self._lock:
            self._by_name = {}
            self._by_id = {}
            self.state = RegistryState.UNLOADED

    def get(self, name: str) -> MetadataKeyInfo:
        self.load()
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownMetadataKey(f"Metadata key {name} does not exist") from None

    def resolve(self, name: str) -> int:
        return self.get(name).id

    def allows_multiple(self, key_id: int) -> bool:
        self.load()
        try:
            return self._by_id[key_id].allows_multiple
        except KeyError:
            raise UnknownMetadataKeyId(f"Metadata key ID {key_id} does not exist") from None

    def keys(self) -> list[MetadataKeyInfo]:
        self.load()
        return sorted(self._by_id.values(), key=lambda k: k.id)


def normalise_value(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    if isinstance(value, str):
        return value
    return str(value)


def is_value_collection(value: Any) -> bool:
    return isinstance(value, list | tuple | set | frozenset)


class MetadataStore:
    """Reads and writes temporal metadata for shows, seasons and timeslots.

    Writes are flushed but not committed; the caller owns the transaction.
    Each write runs in its own savepoint: closing the previous value and
    inserting the new one either both happen or neither does, and a failure
    leaves the rest of the caller's session untouched.

    The mirror on ``owner.meta_values`` remembers when it next goes stale
    (a scheduled value starting or a bounded one ending) and is re-read
    from then on.
    """

    def __init__(self, registry: MetadataKeyRegistry, session: Session | None = None):
        self.registry = registry
        self.session = session if session is not None else db.session

    def _current_rows(self, owner, at: datetime) -> list[MetadataValueMixin]:
        model = OwnerKind.of(owner).value_model
        query = (
            select(model)
            .where(
                model.owner_id == owner.id,
                model.effective_from <= at,
                or_(model.effective_to.is_(None), model.effective_to > at),
            )
            .order_by(model.effective_from, model.id)
        )
        return list(self.session.scalars(query))

    def _next_start(self, owner, at: datetime) -> datetime | None:
        model = OwnerKind.of(owner).value_model
        return self.session.scalar(
            select(func.min(model.effective_from)).where(model.owner_id == owner.id, model.effective_from > at)
        )

    def load(self, owner) -> dict[int, MetadataValue]:
        """(Re)read the owner's current metadata into ``owner.meta_values``."""
        now = naive_utcnow()
        mirror: dict[int, MetadataValue] = {}
        changes: list[datetime] = []
        if owner.id is not None:
            for row in self._current_rows(owner, now):
                if row.effective_to is not None:
                    changes.append(row.effective_to)
                if self.registry.allows_multiple(row.key_id):
                    values = mirror.setdefault(row.key_id, [])
                    if row.value not in values:
                        values.append(row.value)
                else:
                    # Ordered by effective_from, so the newest value wins
                    mirror[row.key_id] = row.value

            next_start = self._next_start(owner, now)
            if next_start is not None:
                changes.append(next_start)

        owner.meta_values = mirror
        owner.meta_values_expire = min(changes, default=None)
        return mirror

    def _mirror(self, owner) -> dict[int, MetadataValue]:
        if owner.meta_values is None:
            return self.load(owner)
        expire = owner.meta_values_expire
        if expire is not None and naive_utcnow() >= expire:
            return self.load(owner)
        return owner.meta_values

    def get_value(self, owner, key_name: str) -> MetadataValue | None:
        """The current value for a single-value key (or None), or the list of
        current values for a multiple key."""
        key_id = self.registry.resolve(key_name)
        value = self._mirror(owner).get(key_id)
        if self.registry.allows_multiple(key_id):
            return list(value or [])
        return value

    def history(self, owner, key_name: str) -> list[MetadataValueMixin]:
        key_id = self.registry.resolve(key_name)
        model = OwnerKind.of(owner).value_model
        query = (
            select(model)
            .where(model.key_id == key_id, model.owner_id == owner.id)
            .order_by(model.effective_from, model.id)
        )
        return list(self.session.scalars(query))

    def set_value(
        self,
        owner,
        key_name: str,
        value: Any,
        actor_id: int,
        effective_from: datetime | None = None,
        effective_to: datetime | None = None,
    ) -> bool:
        """Set a metadata value on a show, season or timeslot.

        For a single-value key, any open value is closed at ``effective_from``
        and the new one inserted. For a multiple key the value (or each value
        in a collection) is added alongside the existing ones.

        Values which are already current are skipped. Returns False if that
        leaves nothing to write, True otherwise. Raises InvalidEffectiveRange
        if ``effective_to`` isn't after ``effective_from``.
        """
        kind = OwnerKind.of(owner)
        key_id = self.registry.resolve(key_name)
        multiple = self.registry.allows_multiple(key_id)

        if is_value_collection(value) and not multiple:
            raise MultipleValuesNotAllowed(f"Metadata key {key_name} only allows a single value")

        now = naive_utcnow()
        if effective_from is None:
            effective_from = now

        if effective_to is not None and effective_to <= effective_from:
            raise InvalidEffectiveRange(
                f"effective_to ({effective_to.isoformat()}) must be after effective_from ({effective_from.isoformat()})"
            )

        if owner.id is None:
            self.session.flush()

        current = self.get_value(owner, key_name)
        if multiple:
            candidates = value if is_value_collection(value) else [value]
            new_values: list[str] = []
            for candidate in map(normalise_value, candidates):
                if candidate not in current and candidate not in new_values:
                    new_values.append(candidate)
        else:
            new_value = normalise_value(value)
            if new_value == current:
                return False
            new_values = [new_value]

        if not new_values:
            return False

        model = kind.value_model
        with self.session.begin_nested():
            if not multiple:
                self._close_open_rows(model, key_id, owner.id, effective_from)

            self.session.add_all(
                model(
                    key_id=key_id,
                    owner_id=owner.id,
                    settor_id=actor_id,
                    approver_id=actor_id,
                    value=v,
                    effective_from=effective_from,
                    effective_to=effective_to,
                )
                for v in new_values
            )
            self.session.flush()

        if effective_from > now or effective_to is not None:
            # Not simply current from now on
            self.load(owner)
        elif multiple:
            self._mirror(owner).setdefault(key_id, []).extend(new_values)  # type: ignore[union-attr]
        else:
            self._mirror(owner)[key_id] = new_values[0]

        log.info("%s set %s on %s %s to %r", actor_id, key_name, kind, owner.id, new_values)
        return True

    def _close_open_rows(self, model, key_id: int, owner_id: int, effective_from: datetime):
        # Lock the rows being closed where the database supports it, so two
        # writers can't both see "no current value" and both insert.
        open_rows: Iterable[MetadataValueMixin] = self.session.scalars(
            select(model)
            .where(
                model.key_id == key_id,
                model.owner_id == owner_id,
                or_(model.effective_to.is_(None), model.effective_to > effective_from),
            )
            .with_for_update()
        )
        for row in open_rows:
            # A value scheduled to start later is superseded outright
            row.effective_to = max(effective_from, row.effective_from)
