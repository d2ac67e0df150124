import pytest

from cattery import Loader, Record, ResourceIdentifier
from cattery.errors import NotFoundError, StorageUnavailable, UnknownRelationship, UnknownResourceType
from cattery.models import schema

from conftest import FakeStorage, make_cats


def test_load_tutorial_cats(tutorial_storage: FakeStorage) -> None:
    cats = Loader(schema, tutorial_storage).load("cats", ["hobbies"])

    assert [cat.id for cat in cats] == ["1", "2"]
    moe, ciprian = cats
    assert moe.attributes == {"name": "Moe", "breed": "Tabby", "weight": "fat", "temperament": "entitled"}
    assert ciprian.attributes["temperament"] is None
    eating = moe.relationships["hobbies"][0]
    assert isinstance(eating, Record)
    assert (eating.type, eating.id, eating.attributes) == ("hobbies", "1", {"name": "eating"})
    # the related records know their own relationships, as identifiers
    assert eating.relationships == {"cats": [ResourceIdentifier("cats", "1")]}


def test_relationships_not_included_hold_identifiers(tutorial_storage: FakeStorage) -> None:
    cats = Loader(schema, tutorial_storage).load("cats")

    assert cats[0].relationships == {"hobbies": [ResourceIdentifier("hobbies", "1")]}
    assert cats[1].relationships == {"hobbies": [ResourceIdentifier("hobbies", "2")]}
    assert [call[0] for call in tutorial_storage.calls] == ["fetch_records", "fetch_join_rows"]


@pytest.mark.parametrize("include", [["hobbies"], []])
def test_fetch_count_does_not_depend_on_primary_count(include: list) -> None:
    counts = []
    for count in (2, 20, 200):
        storage = make_cats(count, hobbies_per_cat=2)
        cats = Loader(schema, storage).load("cats", include)
        assert len(cats) == count
        counts.append(len(storage.calls))
    assert counts[0] == counts[1] == counts[2]


def test_fetch_count_with_include() -> None:
    storage = make_cats(200, hobbies_per_cat=2)
    Loader(schema, storage).load("cats", ["hobbies"])

    # cats, cats.hobbies join rows, hobbies, hobbies.cats join rows
    assert [call[:2] for call in storage.calls] == [
        ("fetch_records", "cats"),
        ("fetch_join_rows", "hobbies"),
        ("fetch_records", "hobbies"),
        ("fetch_join_rows", "cats"),
    ]
    # the distinct hobbies are fetched once
    assert sorted(storage.calls[2][2]) == [1, 2, 3]


def test_shared_related_record_is_one_instance() -> None:
    storage = FakeStorage(
        {"cats": {1: {"name": "Moe"}, 2: {"name": "Ciprian"}}, "hobbies": {7: {"name": "napping"}}},
        [(1, 7), (2, 7)],
    )
    moe, ciprian = Loader(schema, storage).load("cats", ["hobbies"])

    assert moe.relationships["hobbies"][0] is ciprian.relationships["hobbies"][0]
    napping = moe.relationships["hobbies"][0]
    assert napping.relationships["cats"] == [ResourceIdentifier("cats", "1"), ResourceIdentifier("cats", "2")]


def test_relationship_order_follows_join_rows() -> None:
    storage = FakeStorage(
        {"cats": {1: {"name": "Moe"}}, "hobbies": {1: {"name": "eating"}, 2: {"name": "playing"}, 3: {"name": "napping"}}},
        [(1, 3), (1, 1), (1, 2)],
    )
    (moe,) = Loader(schema, storage).load("cats", ["hobbies"])

    assert [hobby.attributes["name"] for hobby in moe.relationships["hobbies"]] == ["napping", "eating", "playing"]


def test_empty_relationship() -> None:
    storage = FakeStorage({"cats": {1: {"name": "Moe"}}, "hobbies": {}}, [])
    (moe,) = Loader(schema, storage).load("cats", ["hobbies"])

    assert moe.relationships == {"hobbies": []}
    # no related records to fetch
    assert [call[0] for call in storage.calls] == ["fetch_records", "fetch_join_rows"]


def test_missing_target_is_skipped() -> None:
    storage = FakeStorage({"cats": {1: {"name": "Moe"}}, "hobbies": {1: {"name": "eating"}}}, [(1, 1), (1, 99)])
    (moe,) = Loader(schema, storage).load("cats", ["hobbies"])

    assert [hobby.id for hobby in moe.relationships["hobbies"]] == ["1"]


def test_include_duplicates_and_all(tutorial_storage: FakeStorage) -> None:
    loader = Loader(schema, tutorial_storage)
    cats = loader.load("cats", ["hobbies", "hobbies", ""])
    assert isinstance(cats[0].relationships["hobbies"][0], Record)

    hobbies = loader.load("hobbies", ["+all"])
    assert isinstance(hobbies[0].relationships["cats"][0], Record)


def test_load_by_id(tutorial_storage: FakeStorage) -> None:
    cats = Loader(schema, tutorial_storage).load("cats", ["hobbies"], ids=["2"])

    assert [cat.attributes["name"] for cat in cats] == ["Ciprian"]
    assert tutorial_storage.calls[0] == ("fetch_records", "cats", [2])


def test_load_by_invalid_id(tutorial_storage: FakeStorage) -> None:
    with pytest.raises(NotFoundError):
        Loader(schema, tutorial_storage).load("cats", ids=["moe"])
    assert tutorial_storage.calls == []


def test_load_related(tutorial_storage: FakeStorage) -> None:
    hobbies = Loader(schema, tutorial_storage).load_related("cats", "1", "hobbies", ["cats"])

    assert [(hobby.type, hobby.id) for hobby in hobbies] == [("hobbies", "1")]
    assert isinstance(hobbies[0].relationships["cats"][0], Record)


def test_load_related_unknown_owner(tutorial_storage: FakeStorage) -> None:
    with pytest.raises(NotFoundError):
        Loader(schema, tutorial_storage).load_related("cats", "42", "hobbies")


def test_unknown_relationship(tutorial_storage: FakeStorage) -> None:
    with pytest.raises(UnknownRelationship) as exc_info:
        Loader(schema, tutorial_storage).load("cats", ["hobbies", "owners"])

    assert exc_info.value.rel_name == "owners"
    assert "owners" in exc_info.value.message
    # nothing has been fetched
    assert tutorial_storage.calls == []


def test_unknown_resource_type(tutorial_storage: FakeStorage) -> None:
    with pytest.raises(UnknownResourceType) as exc_info:
        Loader(schema, tutorial_storage).load("dogs")
    assert exc_info.value.type_name == "dogs"


def test_storage_unavailable_is_propagated() -> None:
    error = StorageUnavailable("database is down")

    class BrokenStorage:
        def fetch_records(self, resource_type, ids=None):
            raise error

    with pytest.raises(StorageUnavailable) as exc_info:
        Loader(schema, BrokenStorage()).load("cats", ["hobbies"])
    assert exc_info.value is error
