import logging
import logging.config
import time
from pathlib import Path

import yaml
from flask import Flask, abort, request
from flask_caching import Cache
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy_continuum import make_versioned
from sqlalchemy_continuum.manager import VersioningManager
from sqlalchemy_continuum.plugins import FlaskPlugin
from werkzeug.exceptions import HTTPException

from loggingmanager import create_logging_manager, set_user_id

# If we have logging handlers set up here, don't touch them.
# This is especially problematic during testing as we don't
# want to overwrite pytest's handlers. Note: if anything
# logs before this point, logging.basicConfig will install
# a default stderr StreamHandler.
if len(logging.root.handlers) == 0 and Path("logging.yaml").is_file():
    install_logging = True
    with open("logging.yaml") as f:
        conf = yaml.load(f, Loader=yaml.FullLoader)
        if Path("logging.override.yaml").is_file():
            with open("logging.override.yaml") as fo:
                conf_overrides = yaml.load(fo, Loader=yaml.FullLoader)

                def update_logging(d, s):
                    for k, v in s.items():
                        if isinstance(v, dict):
                            d[k] = update_logging(d.get(k, {}), v)
                        elif v is not None:
                            d[k] = v
                    return d

                update_logging(conf, conf_overrides)

        logging.config.dictConfig(conf)

else:
    install_logging = False

logger = logging.getLogger(__name__)

naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class BaseModel(DeclarativeBase):
    metadata = MetaData(naming_convention=naming_convention)


def get_or_404[M: BaseModel](db: SQLAlchemy, model: type[M], id: int) -> M:
    try:
        return db.session.get_one(model, id)
    except NoResultFound:
        abort(404)


db = SQLAlchemy(model_class=BaseModel)

cache = Cache()
migrate = Migrate()
manager = VersioningManager(options={"strategy": "subquery"})
make_versioned(manager=manager, plugins=[FlaskPlugin()])
login_manager = LoginManager()


def check_cache_configuration():
    """Check the cache configuration is appropriate for production"""
    if cache.cache.__class__.__name__ == "SimpleCache":
        # SimpleCache is per-process, not appropriate for prod
        logger.warning("Per-process cache being used outside dev server - refreshing will not work")

    TEST_CACHE_KEY = "myury_test_cache_key"
    cache.set(TEST_CACHE_KEY, "exists")
    if cache.get(TEST_CACHE_KEY) != "exists":
        logger.warning("Flask-Caching backend does not appear to be working. Performance may be affected.")


def create_app(dev_server=False, config_override=None):
    app = Flask(__name__)
    app.config.from_envvar("SETTINGS_FILE")
    if config_override:
        app.config.from_mapping(config_override)

    if not app.config.get("SECRET_KEY"):
        raise RuntimeError("SECRET_KEY must be set in the app config")

    if install_logging:
        create_logging_manager(app)
        # Flask has now kindly installed its own log handler which we will summarily remove.
        app.logger.propagate = True
        app.logger.handlers = []
        if not app.debug:
            logging.root.setLevel(logging.INFO)
        else:
            logging.root.setLevel(logging.DEBUG)

    from apps.metrics import request_duration, request_total

    @app.before_request
    def before_request():
        request._start_time = time.time()

    @app.after_request
    def after_request(response):
        try:
            request_duration.labels(request.endpoint, request.method).observe(
                time.time() - request._start_time
            )
        except AttributeError:
            logger.exception("Request without _start_time - check app.before_request ordering")
        request_total.labels(request.endpoint, request.method, response.status_code).inc()
        return response

    for extension in (cache, db):
        extension.init_app(app)

    migrate.init_app(app, db)

    login_manager.init_app(app)

    from models.schedule.metadata import MetadataKeyRegistry
    from models.user import User, load_anonymous_user

    MetadataKeyRegistry().init_app(app)

    @login_manager.user_loader
    def load_user(userid: str) -> User | None:
        user = db.session.get(User, int(userid))
        if user:
            set_user_id(user.id)
        return user

    login_manager.anonymous_user = load_anonymous_user

    if not dev_server and not app.testing:
        with app.app_context():
            check_cache_configuration()

    if not app.debug and not app.testing:
        @app.errorhandler(Exception)
        def handle_exception(e):
            """Generic exception handler to catch and log unhandled exceptions in production."""
            if isinstance(e, HTTPException):
                # HTTPException is used to implement flask's HTTP errors so pass it through.
                return e

            app.logger.exception("Unhandled exception in request")
            return {"message": "Internal server error"}, 500

    @app.shell_context_processor
    def shell_imports():
        ctx = {}

        # Import models and constants
        import models

        for attr in dir(models):
            if attr[0].isupper():
                ctx[attr] = getattr(models, attr)

        # And just for convenience
        ctx["db"] = db

        return ctx

    from apps.api import api_bp
    from apps.metrics import metrics
    from apps.schedule import schedule

    app.register_blueprint(metrics)
    app.register_blueprint(schedule)
    app.register_blueprint(api_bp, url_prefix="/api")

    return app
