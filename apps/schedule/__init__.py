"""
    Schedule App

    Command line tasks for the scheduler: loading metadata keys and checking
    proposed slots for clashes. The HTTP side lives in apps/api/schedule.py.
"""
from flask import Blueprint

schedule = Blueprint("schedule", __name__)

from . import tasks  # noqa
