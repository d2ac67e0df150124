from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from cattery import DB, SQLAlchemyStorage
from cattery.errors import NotFoundError, StorageUnavailable
from cattery.models import CATS, HOBBIES


class BrokenSession:
    def execute(self, *args, **kwargs):
        raise OperationalError("SELECT cats.id FROM cats", {}, Exception("unable to open database file"))


def test_operational_error_is_storage_unavailable() -> None:
    storage = SQLAlchemyStorage(session=BrokenSession())

    with pytest.raises(StorageUnavailable) as exc_info:
        storage.fetch_records(CATS)
    assert isinstance(exc_info.value.__cause__, OperationalError)

    with pytest.raises(StorageUnavailable):
        storage.fetch_join_rows(CATS.get_relationship("hobbies"), [1])


def test_empty_id_sets_dont_hit_the_database() -> None:
    storage = SQLAlchemyStorage(session=BrokenSession())

    assert storage.fetch_records(CATS, ids=[]) == []
    assert storage.fetch_join_rows(CATS.get_relationship("hobbies"), []) == []
    assert storage.missing_ids(HOBBIES, []) == set()


def test_fetch_records(app) -> None:
    with app.app_context():
        storage = SQLAlchemyStorage()

        rows = storage.fetch_records(CATS)
        assert [row["name"] for row in rows] == ["Moe", "Ciprian"]
        assert rows[1] == {"id": 2, "name": "Ciprian", "breed": "Calico", "weight": "skinny", "temperament": None}
        assert storage.fetch_records(HOBBIES, ids=[2, 42]) == [{"id": 2, "name": "playing"}]


def test_replace_links(app) -> None:
    hobbies = CATS.get_relationship("hobbies")
    cats = HOBBIES.get_relationship("cats")

    with app.app_context():
        storage = SQLAlchemyStorage()
        napping = storage.insert(HOBBIES, {"name": "napping"})
        storage.replace_links(hobbies, 1, [napping, 2])
        DB.session.commit()

        assert storage.fetch_join_rows(hobbies, [1, 2]) == [(2, 2), (1, napping), (1, 2)]
        assert storage.fetch_join_rows(cats, [2]) == [(2, 2), (2, 1)]

        storage.replace_links(hobbies, 1, [])
        assert storage.fetch_join_rows(hobbies, [1]) == []


def test_missing_ids(app) -> None:
    with app.app_context():
        assert SQLAlchemyStorage().missing_ids(HOBBIES, [1, 2, 3, 4]) == {3, 4}


def test_update_and_delete_unknown_record(app) -> None:
    with app.app_context():
        storage = SQLAlchemyStorage()

        with pytest.raises(NotFoundError):
            storage.update(CATS, 42, {"name": "Garfield"})
        with pytest.raises(NotFoundError):
            storage.update(CATS, 42, {})
        with pytest.raises(NotFoundError):
            storage.delete(CATS, 42)

        storage.update(CATS, 1, {})
        assert storage.fetch_records(CATS, ids=[1])[0]["name"] == "Moe"


def test_custom_session_is_used() -> None:
    session = SimpleNamespace(execute=BrokenSession().execute)

    assert SQLAlchemyStorage(session=session).session is session
