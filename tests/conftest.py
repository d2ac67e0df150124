from contextlib import contextmanager
import pytest
from sqlalchemy import event

import cattery
from cattery import DB
from cattery.app import create_app

JSONAPI_CONTENT_TYPE = "application/vnd.api+json"


class FakeStorage:
    """
    In-memory storage, records every call so tests can count the fetches
    """

    def __init__(self, tables: dict, links: list) -> None:
        # tables: {"cats": {1: {"name": ...}}, "hobbies": {...}}
        # links: [(cat_id, hobby_id), ...] in join row order
        self.tables = tables
        self.links = links
        self.calls = []

    def fetch_records(self, resource_type, ids=None):
        self.calls.append(("fetch_records", resource_type.type, None if ids is None else list(ids)))
        rows = self.tables.get(resource_type.type, {})
        selected = sorted(rows) if ids is None else sorted(set(ids) & set(rows))
        return [dict(rows[row_id], id=row_id) for row_id in selected]

    def fetch_join_rows(self, relationship, owner_ids):
        self.calls.append(("fetch_join_rows", relationship.name, list(owner_ids)))
        owner_ids = set(owner_ids)
        result = []
        for cat_id, hobby_id in self.links:
            pair = (cat_id, hobby_id) if relationship.owner_key == "cat_id" else (hobby_id, cat_id)
            if pair[0] in owner_ids:
                result.append(pair)
        return result


def make_cats(count: int, hobbies_per_cat: int = 1) -> FakeStorage:
    """
    `count` cats, cat i has hobbies i % 3 + 1 .. (shared between the cats)
    """
    cats = {i: {"name": f"cat{i}", "breed": "Tabby", "weight": "fat", "temperament": None} for i in range(1, count + 1)}
    hobbies = {i: {"name": f"hobby{i}"} for i in range(1, 4)}
    links = [(cat_id, (cat_id + j) % 3 + 1) for cat_id in cats for j in range(hobbies_per_cat)]
    return FakeStorage({"cats": cats, "hobbies": hobbies}, links)


@pytest.fixture
def tutorial_storage() -> FakeStorage:
    """
    Moe likes eating, Ciprian likes playing
    """
    return FakeStorage(
        {
            "cats": {
                1: {"name": "Moe", "breed": "Tabby", "weight": "fat", "temperament": "entitled"},
                2: {"name": "Ciprian", "breed": "Calico", "weight": "skinny", "temperament": None},
            },
            "hobbies": {1: {"name": "eating"}, 2: {"name": "playing"}},
        },
        [(1, 1), (2, 2)],
    )


@pytest.fixture
def app():
    app = create_app({"TESTING": True})
    yield app
    with app.app_context():
        DB.drop_all()


@pytest.fixture
def empty_app():
    app = create_app({"TESTING": True}, with_seed=False)
    yield app
    with app.app_context():
        DB.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@contextmanager
def count_queries(engine):
    """
    Collect the sql statements executed on `engine`
    """
    statements = []

    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", before_cursor_execute)
    try:
        yield statements
    finally:
        event.remove(engine, "before_cursor_execute", before_cursor_execute)


@pytest.fixture
def set_log_level():
    """
    Change the cattery log level, the original level is restored afterwards
    """
    level = cattery.log.level
    yield cattery.log.setLevel
    cattery.log.setLevel(level)
