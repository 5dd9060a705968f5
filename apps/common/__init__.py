import logging

from decorator import decorator
from flask import abort
from flask import current_app as app
from flask_login import current_user

from models.schedule.metadata import MetadataKeyRegistry

logger = logging.getLogger(__name__)


def get_metadata_keys() -> MetadataKeyRegistry:
    """The app's metadata key registry, created in create_app."""
    return app.extensions["metadata_keys"]


def require_permission(permission):
    """Reject anonymous members with 401 and members without `permission` with 403."""

    def call(f, *args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not current_user.has_permission(permission):
            logger.warning("Member %s lacks permission %s", current_user.id, permission)
            abort(403)
        return f(*args, **kwargs)

    return decorator(call)
