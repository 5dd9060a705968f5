import datetime

import sqlalchemy
from flask import g

from main import db

# For test purposes it's always the Saturday before the spring term starts.
FAKE_NOW = datetime.datetime(2026, 1, 3, 12, 0)
TERM_START = datetime.datetime(2026, 1, 5)


class QueryLog:
    def __init__(self):
        self.count = 0
        self.queries = []

    def _query_callback(self, _conn, _cur, query, params, *_):
        self.count += 1
        self.queries.append(query)

    def __enter__(self):
        sqlalchemy.event.listen(db.engine, "before_cursor_execute", self._query_callback)
        return self

    def __exit__(self, *args):
        sqlalchemy.event.remove(db.engine, "before_cursor_execute", self._query_callback)

    def __repr__(self):
        return "<SQLAlchemy Query Logger>"


def login_user_to_client(client, user):
    """Mark the test client's session as logged in as `user`."""
    with client.session_transaction() as session:
        session["_user_id"] = str(user.id)
        session["_fresh"] = True
    # The module-scoped app fixture keeps one app context (and so one `g`)
    # alive across requests; drop Flask-Login's cached user so the next
    # request loads it from the session.
    g.pop("_login_user", None)
