" PyTest Config. This contains global-level pytest fixtures. "
import os
import os.path
import shutil

import pytest
from freezegun import freeze_time
from sqlalchemy import select

from _utils import FAKE_NOW, TERM_START
from main import create_app, db as db_obj
from models.permission import SCHEDULER_PERMISSION
from models.schedule.metadata import MetadataKey
from models.term import Term
from models.user import User

TEST_METADATA_KEYS = [
    ("title", False),
    ("description", False),
    ("tag", True),
]


@pytest.fixture(scope="module")
def app():
    """Fixture to provide an instance of the app.
    This will also create a Flask app_context and tear it down.

    This fixture is scoped to the module level so tests in a module
    share one database.
    """
    yield from app_factory(False)


@pytest.fixture(scope="module")
def app_with_cache():
    yield from app_factory(True)


def app_factory(cache):
    if "SETTINGS_FILE" not in os.environ:
        root = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..")
        os.environ["SETTINGS_FILE"] = os.path.join(root, "config", "test.cfg")

    tmpdir = os.environ.get("TMPDIR", "/tmp")
    prometheus_dir = os.path.join(tmpdir, "myury_test_prometheus")
    os.environ["PROMETHEUS_MULTIPROC_DIR"] = prometheus_dir

    if os.path.exists(prometheus_dir):
        shutil.rmtree(prometheus_dir)
    if not os.path.exists(prometheus_dir):
        os.mkdir(prometheus_dir)

    config_override = {}
    if cache:
        config_override["CACHE_TYPE"] = "flask_caching.backends.SimpleCache"

    app = create_app(dev_server=True, config_override=config_override)

    freezer = freeze_time(FAKE_NOW)
    freezer.start()
    with app.app_context():
        db_obj.session.close()
        db_obj.drop_all()
        db_obj.create_all()

        yield app

        db_obj.session.close()
        db_obj.drop_all()
    freezer.stop()


@pytest.fixture
def client(app):
    "Yield a test HTTP client for the app"
    yield app.test_client()


@pytest.fixture(scope="module")
def db(app):
    "Yield the DB object"
    yield db_obj


@pytest.fixture
def request_context(app):
    "Run the test in an app request context"
    with app.test_request_context("/") as c:
        yield c


@pytest.fixture(scope="module")
def user(db):
    "Yield a test member. Note that this member will be identical across all tests in a module."
    email = "test_user@example.com"
    user = User.get_by_email(email)
    if not user:
        user = User("Test", "User", email)
        db.session.add(user)
        db.session.commit()

    yield user


@pytest.fixture(scope="module")
def scheduler(db):
    "Yield a member with the scheduler permission."
    email = "scheduler@example.com"
    user = User.get_by_email(email)
    if not user:
        user = User("Station", "Scheduler", email)
        user.grant_permission(SCHEDULER_PERMISSION)
        db.session.add(user)
        db.session.commit()

    yield user


@pytest.fixture(scope="module")
def metadata_keys(app, db):
    "Create the standard metadata keys and yield the app's registry."
    for name, allow_multiple in TEST_METADATA_KEYS:
        if db.session.scalar(select(MetadataKey).where(MetadataKey.name == name)) is None:
            db.session.add(MetadataKey(name, allow_multiple=allow_multiple))
    db.session.commit()

    registry = app.extensions["metadata_keys"]
    registry.invalidate()
    yield registry


@pytest.fixture(scope="module")
def term(db):
    "Yield the ten week term starting on TERM_START."
    term = Term(TERM_START, description="Spring")
    db.session.add(term)
    db.session.commit()
    yield term

