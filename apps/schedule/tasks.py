""" Schedule CLI tasks """
import json
import logging

import click
from sqlalchemy import select
from sqlalchemy.exc import NoResultFound

from main import db
from models.schedule.common import format_time_human
from models.schedule.conflicts import ProposedSlot, find_conflicts
from models.schedule.metadata import MetadataKey

from ..common import get_metadata_keys
from . import schedule

logger = logging.getLogger(__name__)


@schedule.cli.command("load_metadata_keys")
@click.option(
    "--file-name",
    default="config/metadata_keys.json",
)
def load_metadata_keys(file_name):
    """Create or update metadata keys from a JSON file"""
    with open(file_name) as data_file:
        logger.info(f"Loading metadata keys from '{file_name}'")
        definitions = json.load(data_file)

    for name, definition in definitions.items():
        key = db.session.scalar(select(MetadataKey).where(MetadataKey.name == name))
        allow_multiple = bool(definition.get("allow_multiple", False))
        description = definition.get("description")

        if key is None:
            key = MetadataKey(name, allow_multiple=allow_multiple, description=description)
            db.session.add(key)
            db.session.commit()
            logger.info(f"Added metadata key '{name}' id={key.id}")
            continue

        if key.allow_multiple != allow_multiple:
            logger.warning(f"Changing allow_multiple on '{name}' to {allow_multiple}")
            key.allow_multiple = allow_multiple
        key.description = description
        db.session.commit()
        logger.info(f"Metadata key '{name}' already exists, updated")

    get_metadata_keys().invalidate()
    logger.info("Finished loading metadata keys")


@schedule.cli.command("conflicts")
@click.argument("term_id", type=int)
@click.argument("day", type=click.IntRange(0, 6))
@click.argument("start", type=click.IntRange(0, 24 * 3600 - 1))
@click.argument("duration", type=click.IntRange(min=1))
def conflicts(term_id, day, start, duration):
    """Show which weeks of a term a weekly slot clashes with.

    START and DURATION are in seconds.
    """
    slot = ProposedSlot(day=day, start_time=start, duration=duration)
    try:
        found = find_conflicts(term_id, slot)
    except NoResultFound:
        raise click.BadParameter(f"No term with ID {term_id}", param_hint="TERM_ID") from None

    click.echo(format_time_human(day, start, duration))
    if not found:
        click.echo("No conflicts")
    for week, timeslot_id in sorted(found.items()):
        click.echo(f"Week {week:2}: timeslot {timeslot_id}")
