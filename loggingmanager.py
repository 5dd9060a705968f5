""" Per-request logging context.

    Werkzeug logs the request line after the Flask app context has gone,
    so the acting member and the client address are kept in a Werkzeug
    Local, which LocalManager clears when each request finishes.
"""

import logging

from flask import request
from werkzeug.local import Local, LocalManager

local = Local()
local_manager = LocalManager([local])

# Shown for log lines outside a request or from anonymous members
NO_CONTEXT = "-"


class ContextFormatter(logging.Formatter):
    """ Adds ``member`` and ``remote_addr`` to every record. """

    def format(self, record):
        record.member = getattr(local, "member_id", None) or NO_CONTEXT
        record.remote_addr = getattr(local, "remote_addr", None) or NO_CONTEXT
        return super().format(record)


def set_user_id(member_id):
    local.member_id = member_id


def create_logging_manager(app):
    @app.before_request
    def remember_remote_addr():
        local.remote_addr = request.remote_addr

    app.wsgi_app = local_manager.make_middleware(app.wsgi_app)
