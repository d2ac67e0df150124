"""
JSON:API document serialization

http://jsonapi.org/format/#document-top-level

The serializer renders records that have been loaded by the loader, it doesn't access the storage.
Resource objects have the form

    {
        "id": "1",
        "type": "cats",
        "attributes": {"name": "Moe", ...},
        "relationships": {"hobbies": {"data": [{"id": "1", "type": "hobbies"}]}}
    }

"relationships" is only present if the type declares relationships, every declared relationship
holds the resource linkage, whether it was included or not.

http://jsonapi.org/format/#fetching-includes
The related records of the included relationships are serialized once in the top-level "included"
list, in the order they're first encountered. Records that are part of the primary data are never
repeated in "included".
"""
from typing import Any, Dict, Iterable, List, Sequence
from .errors import GenericError
from .record import Record
from .schema import Schema


class Serializer:
    """
    :param schema: resource type descriptors
    """

    def __init__(self, schema: Schema) -> None:
        self.schema = schema

    def serialize(self, type_name: str, records: Sequence[Record], include: Iterable[str] = (), many: bool = True) -> Dict[str, Any]:
        """
        :param type_name: JSON:API type of the primary records
        :param records: loaded primary records
        :param include: names of the relationships that were loaded
        :param many: False to render "data" as a single resource object
        :return: jsonapi document dict: {"data": ..., "included": [...]}
        """
        resource_type = self.schema.get(type_name)
        include = resource_type.resolve_include(include)

        data = [self.serialize_record(record) for record in records]
        seen = {record.identifier for record in records}
        included = []
        for rel_name in include:
            for record in records:
                for related in record.relationships.get(rel_name, ()):
                    key = related.identifier
                    if key in seen:
                        continue
                    if not isinstance(related, Record):
                        raise GenericError(f"Relationship {record.type}/{record.id}.{rel_name} has not been loaded")
                    seen.add(key)
                    included.append(self.serialize_record(related))

        if many:
            document = dict(data=data)
        else:
            document = dict(data=data[0] if data else None)
        if included:
            document["included"] = included
        return document

    def serialize_record(self, record: Record) -> Dict[str, Any]:
        """
        :return: resource object of `record`, relationships hold resource identifier objects only
        """
        resource_type = self.schema.get(record.type)
        attributes = {attr_name: record.attributes.get(attr_name) for attr_name in resource_type.attributes}
        result = dict(id=record.id, type=record.type, attributes=attributes)
        if resource_type.relationships:
            result["relationships"] = {
                rel_name: dict(data=self.linkage(record.relationships.get(rel_name, ()))) for rel_name in resource_type.relationships
            }
        return result

    @staticmethod
    def linkage(related: Iterable[Any]) -> List[Dict[str, str]]:
        return [{"id": item.id, "type": item.type} for item in related]
