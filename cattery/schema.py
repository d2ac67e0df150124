"""
Explicit resource type metadata

Every exposed resource type is described by a `ResourceType`: the JSON:API type name,
the sqla model that stores it, the attribute names and the relationship slots.
The descriptors are consulted by the loader, the serializer, the storage and the http layer,
nothing is inferred from the sqla mapper at runtime.

Relationship slots are many-to-many: they are resolved through a join table that
holds (owner_key, target_key) rows. The join table is never exposed as a resource type.
"""
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple
import cattery
from .config import get_config
from .errors import NotFoundError, UnknownRelationship, UnknownResourceType


class Relationship:
    """
    A named relationship slot from an owner type to a target type
    """

    def __init__(self, name: str, target: str, through: Any, owner_key: str, target_key: str) -> None:
        """
        :param name: relationship (slot) name, e.g. "hobbies"
        :param target: JSON:API type of the related records, e.g. "hobbies"
        :param through: sqla model of the join table
        :param owner_key: join table column referencing the owner
        :param target_key: join table column referencing the target
        """
        self.name = name
        self.target = target
        self.through = through
        self.owner_key = owner_key
        self.target_key = target_key

    def __repr__(self) -> str:
        return f"<Relationship {self.name} -> {self.target}>"


class ResourceType:
    """
    Resource type descriptor
    """

    def __init__(
        self, type_name: str, model: Any, attributes: Sequence[str], relationships: Iterable[Relationship] = (), id_type: type = int
    ) -> None:
        self.type = type_name
        self.model = model
        self.attributes = tuple(attr for attr in attributes if attr != "id")
        self.relationships: Dict[str, Relationship] = {rel.name: rel for rel in relationships}
        self.id_type = id_type

    def __repr__(self) -> str:
        return f"<ResourceType {self.type}>"

    @property
    def class_name(self) -> str:
        """
        :return: the name of the instances, e.g. "Cat"
        """
        return getattr(self.model, "__name__", self.type)

    @property
    def object_id(self) -> str:
        """
        :return: the Flask url parameter name of the object, e.g. CatId
        """
        return self.class_name + "Id"

    @property
    def table(self):
        return self.model.__table__

    def get_relationship(self, rel_name: str) -> Relationship:
        """
        :param rel_name: relationship name
        :return: the declared relationship
        """
        try:
            return self.relationships[rel_name]
        except KeyError:
            raise UnknownRelationship(rel_name, self.type)

    def resolve_include(self, include: Optional[Iterable[str]]) -> Tuple[str, ...]:
        """
        Normalize a requested set of relationship names:
        duplicates and empty names are dropped, "+all" expands to every declared relationship
        and the result follows the declaration order, so the request order doesn't matter.

        :param include: iterable of relationship names
        :return: tuple of declared relationship names
        """
        requested = set()
        for rel_name in include or ():
            rel_name = rel_name.strip()
            if not rel_name:
                continue
            if rel_name == get_config("INCLUDE_ALL"):
                requested.update(self.relationships)
                continue
            self.get_relationship(rel_name)
            requested.add(rel_name)
        return tuple(rel_name for rel_name in self.relationships if rel_name in requested)

    def parse_id(self, jsonapi_id: Any) -> Any:
        """
        Convert a JSON:API id (a string) to the storage id
        """
        try:
            return self.id_type(jsonapi_id)
        except (TypeError, ValueError):
            raise NotFoundError(f'Invalid "{self.class_name}" ID "{jsonapi_id}"')


class Schema:
    """
    Lookup table of the resource type descriptors, keyed by JSON:API type
    """

    def __init__(self, *resource_types: ResourceType) -> None:
        self._types: Dict[str, ResourceType] = {}
        for resource_type in resource_types:
            self.register(resource_type)

    def register(self, resource_type: ResourceType) -> ResourceType:
        if resource_type.type in self._types:
            cattery.log.warning(f"Resource type {resource_type.type} registered twice")
        self._types[resource_type.type] = resource_type
        return resource_type

    def get(self, type_name: str) -> ResourceType:
        """
        :param type_name: JSON:API type
        :return: the resource type descriptor
        """
        try:
            return self._types[type_name]
        except KeyError:
            raise UnknownResourceType(type_name)

    def __iter__(self) -> Iterator[ResourceType]:
        return iter(self._types.values())
