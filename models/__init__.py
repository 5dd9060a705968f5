from datetime import UTC, datetime
from typing import TYPE_CHECKING

import datetype
from sqlalchemy.sql.functions import func

from main import db

# If we're type checking, we want models to inherit from the BaseModel (trivial subclass
# of DeclarativeBase) as mypy can't handle using the sqlalchemy-flask generated db.Model
if TYPE_CHECKING:
    from main import BaseModel
else:
    BaseModel = db.Model


def naive_utcnow() -> datetype.DateTime[None]:
    return datetype.naive(datetime.now(UTC).replace(tzinfo=None))


def count_groups(selectable, *entities):
    return db.session.execute(
        selectable.with_only_columns(func.count().label("count"), *entities)
        .group_by(*entities)
        .order_by(*entities)
    )


from .chart import *  # noqa: F403
from .permission import *  # noqa: F403
from .schedule import *  # noqa: F403
from .term import *  # noqa: F403
from .user import *  # noqa: F403

db.configure_mappers()
