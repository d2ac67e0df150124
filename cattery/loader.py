"""
Loading of primary records and their relationships

The loader avoids the "N+1" problem: relationships are resolved for all primary records at once.
For every relationship declared on the primary type, a single query retrieves the join rows of
all the primaries. If the relationship is included, a single query retrieves the distinct
related records, and one join row query per relationship of the related type retrieves their
resource linkage. The number of storage calls doesn't depend on the number of primaries:

    1 + len(primary relationships) + sum(1 + len(target relationships) for each included relationship)

Included records are loaded one level deep: their own relationships only hold resource identifiers.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence
import cattery
from .errors import NotFoundError
from .record import Record, ResourceIdentifier
from .schema import Relationship, ResourceType, Schema


class Loader:
    """
    :param schema: resource type descriptors
    :param storage: storage collaborator, implements `fetch_records` and `fetch_join_rows`
    """

    def __init__(self, schema: Schema, storage: Any) -> None:
        self.schema = schema
        self.storage = storage

    def load(self, type_name: str, include: Iterable[str] = (), ids: Optional[Iterable[Any]] = None) -> List[Record]:
        """
        :param type_name: JSON:API type of the primary records
        :param include: names of the relationships to load
        :param ids: optional JSON:API ids of the records to load, all records are loaded if None
        :return: ordered list of primary records with all declared relationships populated
        """
        resource_type = self.schema.get(type_name)
        include = resource_type.resolve_include(include)
        # fail before hitting the storage when a relationship target isn't declared
        for rel_name in include:
            self.schema.get(resource_type.relationships[rel_name].target)
        if ids is not None:
            ids = [resource_type.parse_id(jsonapi_id) for jsonapi_id in ids]

        rows = self.storage.fetch_records(resource_type, ids)
        records = [self._make_record(resource_type, row) for row in rows]
        self._link(resource_type, records, include)
        cattery.log.debug(f"Loaded {len(records)} {type_name}, included: {include}")
        return records

    def load_related(self, type_name: str, object_id: Any, rel_name: str, include: Iterable[str] = ()) -> List[Record]:
        """
        :param type_name: JSON:API type of the owner
        :param object_id: JSON:API id of the owner
        :param rel_name: relationship name
        :param include: relationships of the related records to load
        :return: the related records, in relationship order
        """
        relationship = self.schema.get(type_name).get_relationship(rel_name)
        target_type = self.schema.get(relationship.target)
        include = target_type.resolve_include(include)

        owners = self.load(type_name, ids=[object_id])
        if not owners:
            raise NotFoundError(f'Invalid "{type_name}" ID "{object_id}"')
        refs = owners[0].relationships[rel_name]
        if not refs:
            return []
        related = {record.id: record for record in self.load(target_type.type, include, ids=[ref.id for ref in refs])}
        return [related[ref.id] for ref in refs if ref.id in related]

    @staticmethod
    def _make_record(resource_type: ResourceType, row: Dict[str, Any]) -> Record:
        attributes = {attr_name: row.get(attr_name) for attr_name in resource_type.attributes}
        return Record(resource_type.type, row["id"], attributes)

    def _link(self, resource_type: ResourceType, records: Sequence[Record], include: Sequence[str] = ()) -> None:
        """
        Populate the relationships declared on `resource_type` for all `records`:
        - included relationships hold the related Record instances
        - the other relationships hold ResourceIdentifiers
        """
        records_by_id = {record.id: record for record in records}
        owner_ids = [resource_type.parse_id(record.id) for record in records]

        for rel_name, relationship in resource_type.relationships.items():
            for record in records:
                record.relationships[rel_name] = []
            if not records:
                continue
            join_rows = self.storage.fetch_join_rows(relationship, owner_ids)
            related = self._fetch_related(relationship, join_rows) if rel_name in include else None
            for owner_id, target_id in join_rows:
                owner = records_by_id.get(str(owner_id))
                if owner is None:
                    continue
                if related is None:
                    owner.relationships[rel_name].append(ResourceIdentifier(relationship.target, str(target_id)))
                elif str(target_id) in related:
                    owner.relationships[rel_name].append(related[str(target_id)])
                else:
                    cattery.log.warning(f"{resource_type.type}/{owner_id}.{rel_name}: {relationship.target}/{target_id} not found")

    def _fetch_related(self, relationship: Relationship, join_rows: Sequence[tuple]) -> Dict[str, Record]:
        """
        Fetch the distinct related records of all owners at once
        :return: dict of JSON:API id -> Record
        """
        target_type = self.schema.get(relationship.target)
        # dict.fromkeys removes duplicates while keeping the order
        target_ids = list(dict.fromkeys(target_id for _, target_id in join_rows))
        if not target_ids:
            return {}
        rows = self.storage.fetch_records(target_type, target_ids)
        related = [self._make_record(target_type, row) for row in rows]
        self._link(target_type, related)
        return {record.id: record for record in related}
