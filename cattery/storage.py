"""
SQLAlchemy storage used by the loader and the http methods

All lookups are set based: a single query retrieves the records for a set of ids,
or the join rows for a set of owners. The storage doesn't commit, the session is
committed (or rolled back) by the http method decorator.
"""
from functools import wraps
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple
import sqlalchemy
from sqlalchemy import delete, insert, select, update
import cattery
from .errors import NotFoundError, StorageUnavailable
from .schema import Relationship, ResourceType

# sqla exceptions indicating the database can't be used right now
UNAVAILABLE_ERRORS = (sqlalchemy.exc.OperationalError, sqlalchemy.exc.InterfaceError, sqlalchemy.exc.DisconnectionError)


def storage_method(fun):
    """
    Convert database connection errors to StorageUnavailable
    """

    @wraps(fun)
    def method_wrapper(*args, **kwargs):
        try:
            return fun(*args, **kwargs)
        except UNAVAILABLE_ERRORS as exc:
            raise StorageUnavailable(str(exc)) from exc

    return method_wrapper


class SQLAlchemyStorage:
    """
    Storage backed by a sqla session, `cattery.DB.session` if none is given
    """

    def __init__(self, session=None) -> None:
        self._session = session

    @property
    def session(self):
        if self._session is not None:
            return self._session
        return cattery.DB.session

    #
    # Read operations, used by the loader
    #
    @storage_method
    def fetch_records(self, resource_type: ResourceType, ids: Optional[Iterable[Any]] = None) -> List[Dict[str, Any]]:
        """
        :param resource_type: type of the records
        :param ids: storage ids to fetch, None to fetch all records
        :return: list of row mappings with the id and the declared attributes, ordered by id
        """
        table = resource_type.table
        columns = [table.c.id] + [table.c[attr_name] for attr_name in resource_type.attributes]
        query = select(*columns).order_by(table.c.id)
        if ids is not None:
            ids = list(ids)
            if not ids:
                return []
            query = query.where(table.c.id.in_(ids))
        rows = self.session.execute(query).mappings().all()
        cattery.log.debug(f"Fetched {len(rows)} {resource_type.type}")
        return [dict(row) for row in rows]

    @storage_method
    def fetch_join_rows(self, relationship: Relationship, owner_ids: Iterable[Any]) -> List[Tuple[Any, Any]]:
        """
        :param relationship: the relationship to resolve
        :param owner_ids: storage ids of the owners
        :return: list of (owner_id, target_id) tuples in join row order
        """
        owner_ids = list(owner_ids)
        if not owner_ids:
            return []
        table = relationship.through.__table__
        owner_col, target_col = table.c[relationship.owner_key], table.c[relationship.target_key]
        query = select(owner_col, target_col).where(owner_col.in_(owner_ids)).order_by(table.c.id)
        return [(owner_id, target_id) for owner_id, target_id in self.session.execute(query)]

    @storage_method
    def missing_ids(self, resource_type: ResourceType, ids: Iterable[Any]) -> Set[Any]:
        """
        :return: the ids for which no record exists
        """
        ids = set(ids)
        if not ids:
            return set()
        table = resource_type.table
        found = self.session.execute(select(table.c.id).where(table.c.id.in_(ids))).scalars()
        return ids - set(found)

    #
    # Write operations, used by the POST, PATCH and DELETE http methods
    #
    @storage_method
    def insert(self, resource_type: ResourceType, attributes: Dict[str, Any]) -> Any:
        """
        :return: storage id of the new record
        """
        result = self.session.execute(insert(resource_type.table).values(**attributes))
        new_id = result.inserted_primary_key[0]
        cattery.log.info(f"Created {resource_type.type} {new_id}")
        return new_id

    @storage_method
    def update(self, resource_type: ResourceType, object_id: Any, attributes: Dict[str, Any]) -> None:
        table = resource_type.table
        if not attributes:
            if self.missing_ids(resource_type, [object_id]):
                raise NotFoundError(f'Invalid "{resource_type.class_name}" ID "{object_id}"')
            return
        result = self.session.execute(update(table).where(table.c.id == object_id).values(**attributes))
        if result.rowcount == 0:
            raise NotFoundError(f'Invalid "{resource_type.class_name}" ID "{object_id}"')

    @storage_method
    def delete(self, resource_type: ResourceType, object_id: Any) -> None:
        """
        Delete the record and the join rows that reference it
        """
        table = resource_type.table
        for relationship in resource_type.relationships.values():
            join_table = relationship.through.__table__
            self.session.execute(delete(join_table).where(join_table.c[relationship.owner_key] == object_id))
        result = self.session.execute(delete(table).where(table.c.id == object_id))
        if result.rowcount == 0:
            raise NotFoundError(f'Invalid "{resource_type.class_name}" ID "{object_id}"')
        cattery.log.info(f"Deleted {resource_type.type} {object_id}")

    @storage_method
    def replace_links(self, relationship: Relationship, owner_id: Any, target_ids: Sequence[Any]) -> None:
        """
        Replace every member of the relationship of `owner_id` with `target_ids` (in order)
        """
        join_table = relationship.through.__table__
        self.session.execute(delete(join_table).where(join_table.c[relationship.owner_key] == owner_id))
        if target_ids:
            rows = [{relationship.owner_key: owner_id, relationship.target_key: target_id} for target_id in target_ids]
            self.session.execute(insert(join_table), rows)
