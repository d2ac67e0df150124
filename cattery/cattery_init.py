import logging
import os
import sys
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from .request import CatteryRequest
import cattery
import flask.app


class Cattery:
    """This class configures the Flask application to serve the cattery resources
    :param app: a Flask application.
    :param prefix: URL prefix where the api is hosted. Default is ''
    :param LOGLEVEL: loglevel configuration variable, values from logging module (0: trace, .. 50: critical)
    """

    # Default configuration settings, overrides passed to init_app are stored in the app config
    LOGLEVEL = logging.WARNING
    API_PREFIX = ""
    DEFAULT_INCLUDED = ""  # change to +all to include every relationship by default
    INCLUDE_ALL = "+all"  # include= url query argument that tells us to include all related resources
    # first argument is the url prefix (eg. /api), second the collection name (eg. cats)
    # third the url parameter name of the object id (eg. CatId), last the relationship name
    RESOURCE_URL_FMT = "{}/{}/"
    INSTANCE_URL_FMT = RESOURCE_URL_FMT + "<string:{}>/"
    RELATED_URL_FMT = INSTANCE_URL_FMT + "{}"
    ENDPOINT_FMT = "{}api.{}"
    INSTANCE_ENDPOINT_FMT = ENDPOINT_FMT + "Id"

    def __init__(self, app: flask.app.Flask, *args, **kwargs) -> None:
        """
        Constructor
        """
        self.app = app
        if app is not None:
            self.init_app(app, *args, **kwargs)

    def init_app(self, app: flask.app.Flask, prefix: str = "", app_db: SQLAlchemy = None, **kwargs) -> None:
        """
        API and application initialization
        """
        if not isinstance(app, Flask):  # pragma: no cover
            raise TypeError("'app' should be Flask.")

        if app_db is None:
            app_db = app.extensions["sqlalchemy"]

        cattery.DB = self.db = app_db

        app.request_class = CatteryRequest
        app.url_map.strict_slashes = False

        # overrides are kept in the app config, the class variables hold the defaults for every app
        app.config["API_PREFIX"] = prefix
        for conf_name, conf_val in kwargs.items():
            app.config[conf_name] = conf_val
        if "LOGLEVEL" in kwargs:
            # the logger is shared by all apps in the process
            log.setLevel(int(kwargs["LOGLEVEL"]))

        if app.config.get("DEBUG", False):
            log.setLevel(logging.DEBUG)

        # pylint: disable=unused-argument,unused-variable
        @app.teardown_appcontext
        def shutdown_session(exception=None):
            """cfr. http://flask.pocoo.org/docs/0.12/patterns/sqlalchemy/"""
            self.db.session.remove()

    @staticmethod
    def init_logging(loglevel: int = logging.WARNING) -> logging.Logger:
        """
        Specify the log format used in the webserver logs
        """
        log = logging.getLogger(__name__)
        if log.level == logging.NOTSET:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            log.setLevel(loglevel)
            log.addHandler(handler)
        return log


#
# DB and logging initialization
#
DB = SQLAlchemy()

try:
    DEBUG = os.getenv("DEBUG", logging.WARNING)
    LOGLEVEL = int(DEBUG)
except ValueError:  # pragma: no cover
    print(f'Invalid LogLevel in DEBUG Environment Variable! "{DEBUG}"')
    LOGLEVEL = logging.INFO

Cattery.LOGLEVEL = LOGLEVEL
log = Cattery.init_logging(Cattery.LOGLEVEL)
