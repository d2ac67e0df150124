"""
Application factory

    $ FLASK_APP=cattery.app flask run

creates an sqlite database populated with a couple of cats and hobbies
and exposes the cats and hobbies collections:

    GET /cats/?include=hobbies
    GET /hobbies/1/?include=cats
    GET /cats/1/hobbies
"""
from flask import Flask
from flask_cors import CORS
import cattery
from .api import CatteryAPI
from .cattery_init import DB
from .models import CATS, HOBBIES, schema
from .storage import SQLAlchemyStorage

SEED_CATS = [
    ({"name": "Moe", "breed": "Tabby", "weight": "fat", "temperament": "entitled"}, ["eating"]),
    ({"name": "Ciprian", "breed": "Calico", "weight": "skinny", "temperament": None}, ["playing"]),
]


def seed(storage: SQLAlchemyStorage) -> None:
    """
    Populate an empty database with the sample cats and hobbies
    """
    if storage.fetch_records(CATS):
        return
    hobby_ids = {}
    for attributes, hobbies in SEED_CATS:
        cat_id = storage.insert(CATS, attributes)
        for hobby_name in hobbies:
            if hobby_name not in hobby_ids:
                hobby_ids[hobby_name] = storage.insert(HOBBIES, {"name": hobby_name})
        storage.replace_links(CATS.get_relationship("hobbies"), cat_id, [hobby_ids[name] for name in hobbies])
    DB.session.commit()
    cattery.log.info(f"Seeded {len(SEED_CATS)} cats")


def create_app(config: dict = None, with_seed: bool = True, cors_origins: str = "*", **api_options) -> Flask:
    """
    :param config: Flask configuration
    :param with_seed: populate the database with the sample cats
    :param cors_origins: origins allowed by flask_cors
    :param api_options: cattery.Cattery configuration overrides for this app, e.g. DEFAULT_INCLUDED
    """
    app = Flask("cattery")
    app.config.update(SQLALCHEMY_DATABASE_URI="sqlite://")
    app.config.update(config or {})
    DB.init_app(app)
    # Allow the api to be consumed by a browser frontend on another origin
    CORS(app, origins=cors_origins)

    with app.app_context():
        DB.create_all()
        api = CatteryAPI(app, schema, prefix=app.config.get("API_PREFIX", ""), **api_options)
        api.expose_all()
        if with_seed:
            seed(api.storage)

    return app
