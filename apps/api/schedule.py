from datetime import UTC
from typing import ClassVar

from dateutil.parser import ParserError
from dateutil.parser import parse as parse_date
from flask import current_app as app
from flask import request
from flask_login import current_user
from flask_restful import Resource, abort

from main import db, get_or_404
from models.permission import SCHEDULER_PERMISSION
from models.schedule import OWNER_MODELS
from models.schedule.common import format_time_human
from models.schedule.conflicts import ProposedSlot, find_conflicts
from models.schedule.metadata import (
    InvalidEffectiveRange,
    InvalidOwnerKind,
    MetadataStore,
    MultipleValuesNotAllowed,
    OwnerKind,
    UnknownMetadataKey,
)
from models.term import Term

from ..common import get_metadata_keys, require_permission
from . import api


def _get_owner(kind, owner_id):
    try:
        owner_kind = OwnerKind.parse(kind)
    except InvalidOwnerKind:
        abort(404, message=f"Unknown owner kind {kind}")
    return get_or_404(db, OWNER_MODELS[owner_kind], owner_id)


def _parse_time(value):
    if value is None:
        return None
    try:
        parsed = parse_date(value)
    except (ParserError, TypeError, OverflowError):
        abort(400, message=f"Can't parse time {value!r}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


class MetadataKeyList(Resource):
    def get(self):
        return [
            {"id": key.id, "name": key.name, "allow_multiple": key.allows_multiple}
            for key in get_metadata_keys().keys()
        ]


class OwnerMetadata(Resource):
    method_decorators: ClassVar = {"put": [require_permission(SCHEDULER_PERMISSION)]}

    def get(self, kind, owner_id, key):
        owner = _get_owner(kind, owner_id)
        store = MetadataStore(get_metadata_keys())
        try:
            value = store.get_value(owner, key)
        except UnknownMetadataKey:
            abort(404, message=f"Unknown metadata key {key}")

        return {"key": key, "value": value}

    def put(self, kind, owner_id, key):
        if not request.is_json:
            abort(415)

        payload = request.get_json()
        if not isinstance(payload, dict) or "value" not in payload:
            abort(400, message="Expected an object with a value")

        value = payload["value"]
        if isinstance(value, dict) or value is None:
            abort(400, message="Metadata values must be a string, a number or a list")

        effective_from = _parse_time(payload.get("effective_from"))
        effective_to = _parse_time(payload.get("effective_to"))

        owner = _get_owner(kind, owner_id)
        store = MetadataStore(get_metadata_keys())
        try:
            changed = store.set_value(owner, key, value, current_user.id, effective_from, effective_to)
        except UnknownMetadataKey:
            abort(404, message=f"Unknown metadata key {key}")
        except (MultipleValuesNotAllowed, InvalidEffectiveRange) as e:
            abort(400, message=str(e))

        db.session.commit()
        if changed:
            app.logger.info(f"Member {current_user.id} changed {key} on {kind} {owner_id}")

        return {"key": key, "changed": changed, "value": store.get_value(owner, key)}


class ScheduleConflicts(Resource):
    def post(self):
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            abort(400, message="Expected an object")

        try:
            term_id = int(payload["term_id"])
            slot = ProposedSlot(
                day=int(payload["day"]),
                start_time=int(payload["start_time"]),
                duration=int(payload["duration"]),
            )
        except KeyError as e:
            abort(400, message=f"Missing {e.args[0]}")
        except (TypeError, ValueError) as e:
            # InvalidDay is a ValueError
            abort(400, message=str(e))

        term = get_or_404(db, Term, term_id)
        conflicts = find_conflicts(term, slot)

        return {
            "slot": format_time_human(slot.day, slot.start_time, slot.duration),
            # JSON object keys are always strings
            "conflicts": {str(week): timeslot_id for week, timeslot_id in conflicts.items()},
        }


api.add_resource(MetadataKeyList, "/schedule/metadata-keys")
api.add_resource(OwnerMetadata, "/schedule/<string:kind>/<int:owner_id>/metadata/<string:key>")
api.add_resource(ScheduleConflicts, "/schedule/conflicts")
